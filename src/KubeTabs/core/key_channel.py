from __future__ import annotations

import asyncio
import logging

from KubeTabs.core.exceptions import InputChannelClosed
from KubeTabs.core.session import KeyPress

log = logging.getLogger(__name__)

_CLOSED = object()


class KeyChannel:
    """A queue of key presses between the terminal and the refresh loop."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, key: KeyPress) -> None:
        if self._closed:
            log.debug("Dropping key %s, channel is closed", key.key)
            return
        self._queue.put_nowait(key)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def read(self, timeout: float | None = None) -> KeyPress | None:
        """Waits for the next key press.

        Returns None when ``timeout`` elapses first and raises
        InputChannelClosed once the channel has been closed.
        """
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
        if item is _CLOSED:
            # Keep the sentinel queued for any later reader.
            self._queue.put_nowait(_CLOSED)
            raise InputChannelClosed("Key channel closed")
        assert isinstance(item, KeyPress)
        return item
