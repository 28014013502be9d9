"""
Error taxonomy for the disciplines importer.

Driver exceptions (psycopg, confluent-kafka) are wrapped into these types at the
adapter boundary so the pipeline core never depends on a specific client.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every error raised by the importer."""


class ConfigurationError(PipelineError):
    """Required configuration is missing or invalid; raised before the loop starts."""


class ImportFailure(PipelineError):
    """Any failure that aborts a single import invocation."""


class ConnectivityError(ImportFailure):
    """The legacy store is unreachable."""


class ExtractionError(ImportFailure):
    """The range query against the legacy store failed."""


class DecodeError(ImportFailure):
    """A legacy-store row could not be decoded into a discipline."""


class PublishError(ImportFailure):
    """Writing a batch to the message bus failed."""


class FetchError(PipelineError):
    """Fetching the next inbound message failed."""


class FetchCancelled(FetchError):
    """Fetch was interrupted by the process-level cancellation signal."""


class CommitError(PipelineError):
    """Committing the offset of an inbound message failed."""


__all__ = [
    "PipelineError",
    "ConfigurationError",
    "ImportFailure",
    "ConnectivityError",
    "ExtractionError",
    "DecodeError",
    "PublishError",
    "FetchError",
    "FetchCancelled",
    "CommitError",
]
