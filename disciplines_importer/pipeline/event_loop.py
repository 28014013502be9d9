"""
Top-level consumer loop of the disciplines importer.

Strictly sequential: one inbound message is fetched, resolved, imported and
committed before the next fetch, so at most one import is ever in flight.
The offset of a message is committed only after its import succeeded (or it
resolved to a skip window); a failed import ends the loop without a commit
and the message is redelivered after restart.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, TextIO, Union

from disciplines_importer.domain.models import SKIP_MALFORMED, ImportWindow
from disciplines_importer.domain.windows import resolve_window
from disciplines_importer.errors import ImportFailure
from disciplines_importer.infrastructure.bus import BusMessage, MessageReader
from disciplines_importer.pipeline.importer import Importer
from disciplines_importer.utils.logging import get_logger

log = get_logger(__name__)

WindowResolver = Callable[[str, Union[bytes, str, None], Optional[datetime]], ImportWindow]


def _message_context(message: BusMessage) -> dict:
    return {
        "key": message.key,
        "topic": message.topic,
        "partition": message.partition,
        "offset": message.offset,
    }


class EventLoop:
    """
    Consume control events and run one import per event.

    Parameters
    ----------
    reader : MessageReader
        Inbound bus reader; its `fetch` is the only cancellation point.
    importer : Importer
        Runs one import for a resolved window.
    out : TextIO
        Operator output stream for per-message notes.
    resolver : WindowResolver
        Maps a message key and payload to an import window.
    """

    def __init__(
        self,
        reader: MessageReader,
        importer: Importer,
        out: TextIO,
        resolver: WindowResolver = resolve_window,
    ) -> None:
        self._reader = reader
        self._importer = importer
        self._out = out
        self._resolver = resolver

    def execute(self) -> None:
        """
        Run until a stage fails.

        Raises
        ------
        FetchError
            Fetching failed or was cancelled.
        ImportFailure
            An import failed; the triggering message was not committed.
        CommitError
            The offset commit failed.
        """
        while True:
            message = self._reader.fetch()
            self.process(message)

    def process(self, message: BusMessage) -> None:
        """Resolve, import and commit a single fetched message."""
        context = _message_context(message)
        self._note(
            f"Received {message.key} at topic/partition/offset "
            f"{message.topic}/{message.partition}/{message.offset}"
        )

        window = self._resolver(message.key, message.value, None)
        if window.is_skip:
            self._log_skip(window, context)
            self._note(f"Zero start time, skip event {message.key}")
        else:
            context.update(
                {"year": window.year, "start": str(window.start), "end": str(window.end)}
            )
            log.debug("Import started", extra=context)
            try:
                imported = self._importer.execute(window)
            except ImportFailure as exc:
                log.error(
                    "Import failed, offset not committed",
                    extra={**context, "error": str(exc), "error_type": type(exc).__name__},
                )
                raise
            log.debug("Import finished", extra={**context, "disciplines": imported})

        self._reader.commit(message)
        log.debug("Offset committed", extra=context)

    @staticmethod
    def _log_skip(window: ImportWindow, context: dict) -> None:
        if window.skip_reason == SKIP_MALFORMED:
            log.warning(
                "Malformed control event payload, skipping: %s",
                window.skip_detail,
                extra={**context, "error": window.skip_detail},
            )
        else:
            log.info("Control event ignored", extra=context)

    def _note(self, text: str) -> None:
        self._out.write(text + "\n")
        self._out.flush()


__all__ = ["EventLoop", "WindowResolver"]
