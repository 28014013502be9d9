"""
One import: extract disciplines for a window and republish them in batches.

Errors do not short-circuit the import. The first failure (extraction,
decoding or publishing) is kept in an explicit optional value while the row
stream keeps flowing into the publisher; the remainder is flushed once the
stream ends, and only then is the first failure raised.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional, Protocol, TextIO, runtime_checkable

from disciplines_importer.domain.models import DisciplineRecord, ImportWindow, RawDiscipline
from disciplines_importer.errors import ImportFailure
from disciplines_importer.infrastructure.bus import MessageWriter
from disciplines_importer.pipeline.publisher import DEFAULT_WRITE_THRESHOLD, BatchPublisher


@runtime_checkable
class DisciplineSource(Protocol):
    def ping(self) -> None:
        ...

    def extract(self, start: datetime, end: datetime) -> Iterator[RawDiscipline]:
        ...


@runtime_checkable
class Importer(Protocol):
    def execute(self, window: ImportWindow) -> int:
        """
        Import every discipline registered within `window`.

        Returns
        -------
        int
            Number of disciplines handed to the publisher.

        Raises
        ------
        ImportFailure
            The first failure encountered during the import.
        """
        ...


def _keep_first(current: Optional[ImportFailure], new: ImportFailure) -> ImportFailure:
    return current if current is not None else new


class DisciplinesImporter:
    """
    Import disciplines from the legacy store onto the disciplines topic.

    Parameters
    ----------
    source : DisciplineSource
        Legacy-store extractor.
    writer : MessageWriter
        Outbound bus writer.
    out : TextIO
        Operator output stream for the start marker, flush dots and summary.
    write_threshold : int
        Batch size for outbound writes.
    """

    def __init__(
        self,
        source: DisciplineSource,
        writer: MessageWriter,
        out: TextIO,
        write_threshold: int = DEFAULT_WRITE_THRESHOLD,
    ) -> None:
        self._source = source
        self._writer = writer
        self._out = out
        self.write_threshold = write_threshold

    def execute(self, window: ImportWindow) -> int:
        if window.is_skip:
            raise ValueError("skip windows must be filtered out before importing")

        self._source.ping()

        publisher = BatchPublisher(self._writer, self._out, self.write_threshold)
        error: Optional[ImportFailure] = None

        self._out.write("Start import: ")
        rows: Iterator[RawDiscipline] = iter(())
        try:
            rows = self._source.extract(window.start, window.end)
            for raw in rows:
                record = DisciplineRecord(id=raw.id, name=raw.name.strip(" "), year=window.year)
                try:
                    publisher.accept(record)
                except ImportFailure as exc:
                    error = _keep_first(error, exc)
        except ImportFailure as exc:
            error = _keep_first(error, exc)
        finally:
            close = getattr(rows, "close", None)
            if close is not None:
                close()

        try:
            publisher.flush()
        except ImportFailure as exc:
            error = _keep_first(error, exc)

        self._out.write(
            f" finished. Sent {publisher.accepted} disciplines. "
            f"Error: {error if error is not None else 'none'}\n"
        )
        self._out.flush()

        if error is not None:
            raise error
        return publisher.accepted


__all__ = ["DisciplineSource", "DisciplinesImporter", "Importer"]
