"""
Secondary DB disciplines importer.

Listens for control events on the meta-events topic (a secondary database
reload or a new academic year), queries the legacy Dekanat database for
disciplines registered within the derived time window, and republishes each
one as a discipline event on the disciplines topic:

- Window resolution from control events
- Streaming extraction from the legacy store
- Threshold-batched publication with first-error-wins semantics
- At-least-once delivery through manual offset commits
"""

from __future__ import annotations

__version__ = "0.1.0"

# Public API exports
from disciplines_importer.config import CONSUMER_GROUP_ID, Settings, get_settings
from disciplines_importer.domain import DisciplineRecord, ImportWindow, resolve_window
from disciplines_importer.errors import ImportFailure, PipelineError
from disciplines_importer.pipeline import BatchPublisher, DisciplinesImporter, EventLoop
from disciplines_importer.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "CONSUMER_GROUP_ID",
    "Settings",
    "get_settings",
    # Domain
    "DisciplineRecord",
    "ImportWindow",
    "resolve_window",
    # Pipeline
    "BatchPublisher",
    "DisciplinesImporter",
    "EventLoop",
    # Errors
    "ImportFailure",
    "PipelineError",
    # Logging
    "configure_logging",
    "get_logger",
]
