"""Transfer channel between the audio callback and the transcription loop."""

import queue
from typing import Iterator

import numpy as np

from streamscribe.utils.exceptions import ChannelClosedError

_CLOSED = object()


class TransferChannel:
    """Unbounded FIFO of audio chunks with non-blocking send.

    Backed by ``queue.SimpleQueue``, whose ``put`` never blocks and is safe
    to call from the audio callback. ``receive`` blocks until a chunk arrives.
    After ``close`` the chunks already queued are still delivered in order;
    after them every ``receive`` raises ``ChannelClosedError``.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, chunk: np.ndarray) -> None:
        """Enqueue a chunk without blocking.

        Raises:
            ChannelClosedError: If the channel has been closed.
        """
        if self._closed:
            raise ChannelClosedError("Channel is closed")
        self._queue.put(chunk)

    def receive(self) -> np.ndarray:
        """Block until the next chunk is available and return it.

        Raises:
            ChannelClosedError: Once the channel is closed and drained.
        """
        if self._drained:
            raise ChannelClosedError("Channel is closed")

        item = self._queue.get()
        if item is _CLOSED:
            # A send racing close may land behind the marker; it is dropped
            self._drained = True
            raise ChannelClosedError("Channel is closed")
        return item

    def close(self) -> None:
        """Close the channel and wake a blocked receiver. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)

    def pending(self) -> int:
        """Approximate number of chunks waiting to be received."""
        if self._drained:
            return 0
        size = self._queue.qsize()
        if self._closed:
            size = max(size - 1, 0)
        return size

    def __iter__(self) -> Iterator[np.ndarray]:
        while True:
            try:
                yield self.receive()
            except ChannelClosedError:
                return
