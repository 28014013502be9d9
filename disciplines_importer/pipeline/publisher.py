"""
Threshold-batched publication of discipline events.
"""

from __future__ import annotations

from typing import List, TextIO

from disciplines_importer.domain.models import DISCIPLINE_EVENT_NAME, DisciplineRecord
from disciplines_importer.infrastructure.bus import BusMessage, MessageWriter

DEFAULT_WRITE_THRESHOLD = 100

PROGRESS_MARKER = "."


def make_discipline_message(record: DisciplineRecord) -> BusMessage:
    """Serialize a discipline into an outbound bus message."""
    return BusMessage(key=DISCIPLINE_EVENT_NAME, value=record.model_dump_json().encode("utf-8"))


class BatchPublisher:
    """
    Accumulate discipline events and write them in batches of `threshold`.

    A batch is written synchronously inside the `accept` call that fills it;
    `flush` writes whatever remains. The accumulator is cleared after every
    write attempt, successful or not, so a failed batch is never resent by a
    later flush. One progress marker goes to `out` after each non-empty write.

    Parameters
    ----------
    writer : MessageWriter
        Bus writer receiving each batch in a single call.
    out : TextIO
        Operator output stream.
    threshold : int
        Batch size triggering a write.
    """

    def __init__(
        self,
        writer: MessageWriter,
        out: TextIO,
        threshold: int = DEFAULT_WRITE_THRESHOLD,
    ) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self._writer = writer
        self._out = out
        self.threshold = threshold
        self._messages: List[BusMessage] = []
        self.accepted = 0

    @property
    def pending(self) -> int:
        return len(self._messages)

    def accept(self, record: DisciplineRecord) -> None:
        """
        Queue one record, writing the batch once it reaches the threshold.

        Raises
        ------
        PublishError
            If the batch write triggered by this record fails. The record
            still counts as accepted.
        """
        self._messages.append(make_discipline_message(record))
        self.accepted += 1
        if len(self._messages) >= self.threshold:
            self.flush()

    def flush(self) -> None:
        """Write the pending batch, if any, in one call."""
        if not self._messages:
            return
        batch, self._messages = self._messages, []
        try:
            self._writer.write(batch)
        finally:
            self._out.write(PROGRESS_MARKER)
            self._out.flush()


__all__ = ["BatchPublisher", "DEFAULT_WRITE_THRESHOLD", "make_discipline_message"]
