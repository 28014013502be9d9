"""
Message-bus capability interfaces.

The pipeline only needs three operations from the bus: fetch the next inbound
message, commit it, and write a batch of outbound messages. Keeping them as
narrow protocols lets the event loop, importer and publisher run against any
client, including the in-memory fakes used by the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class BusMessage:
    """
    A message as seen by the pipeline, independent of the bus client.

    Outbound messages only need `key` and `value`; position fields are filled
    in for fetched messages so their offset can be committed.
    """

    key: str
    value: bytes
    topic: Optional[str] = None
    partition: Optional[int] = None
    offset: Optional[int] = None


@runtime_checkable
class MessageReader(Protocol):
    def fetch(self) -> BusMessage:
        """
        Block until the next inbound message is available.

        Raises
        ------
        FetchError
            If the bus fails or the wait is cancelled (FetchCancelled).
        """
        ...

    def commit(self, message: BusMessage) -> None:
        """
        Mark `message` as processed for this consumer group.

        Raises
        ------
        CommitError
            If the commit is not acknowledged.
        """
        ...


@runtime_checkable
class MessageWriter(Protocol):
    def write(self, messages: Sequence[BusMessage]) -> None:
        """
        Publish `messages` in a single call.

        Raises
        ------
        PublishError
            If any message could not be delivered.
        """
        ...


__all__ = ["BusMessage", "MessageReader", "MessageWriter"]
