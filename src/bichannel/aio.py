"""Asyncio unidirectional channels.

The cooperative twin of ``bichannel.mpsc``.  The queue is an
``asyncio.Queue``, receives are coroutines, and everything else behaves
the same: FIFO delivery, cloneable senders, and ``Disconnected`` once
every sender is gone and the buffer has been drained.

``send``, ``try_recv`` and ``close`` stay plain methods because they
never suspend.  All halves belong to the event loop that uses them.
"""

import asyncio
from collections.abc import AsyncIterator
from logging import getLogger
from typing import Any

from bichannel.errors import Disconnected, Timeout
from bichannel.link import BaseReceiver, Link, Sender

logger = getLogger(__name__)


class AsyncReceiver[T](BaseReceiver[T]):
    """The receiving half of an asyncio channel."""

    _link: Link[asyncio.Queue[Any]]

    async def recv(self) -> T:
        """Wait for the next message and return it.

        Raises:
            Disconnected: If every sender is gone and the buffer is
                drained, or the channel hangs up while waiting.

        """
        self._check_open()
        return self._accept(await self._link.queue.get())

    async def recv_timeout(self, timeout: float) -> T:
        """Wait at most ``timeout`` seconds for the next message.

        Cancelling the wait leaves the queue untouched, so a message
        that arrives afterwards is still delivered to the next receive.

        Raises:
            ValueError: If ``timeout`` is negative.
            Timeout: If nothing arrived in time.
            Disconnected: Under the same condition as ``recv``.

        """
        if timeout < 0:
            msg = f"timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        self._check_open()
        try:
            item = await asyncio.wait_for(self._link.queue.get(), timeout)
        except TimeoutError:
            msg = f"No message within {timeout}s"
            raise Timeout(msg) from None
        return self._accept(item)

    async def __aiter__(self) -> AsyncIterator[T]:
        """Yield messages as they arrive until the channel hangs up."""
        while True:
            try:
                yield await self.recv()
            except Disconnected:
                return


def unbounded[T]() -> tuple[Sender[T], AsyncReceiver[T]]:
    """Create an asyncio channel with no capacity limit.

    Returns:
        A ``(sender, receiver)`` pair sharing one fresh queue.

    """
    link = Link(asyncio.Queue())
    logger.debug("Opened asyncio channel %r", link)
    return Sender(link), AsyncReceiver(link)
