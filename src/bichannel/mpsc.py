"""Thread-based unidirectional channels.

A multi-producer, single-consumer channel built on ``queue.SimpleQueue``:

    tx, rx = unbounded()
    tx.send("hello")      # never blocks
    rx.recv()             # -> "hello", blocks until something arrives

Dropping every sender (``close()`` or garbage collection) hangs the
channel up.  The receiver first drains whatever was buffered, then every
receive raises ``Disconnected``.  ``SimpleQueue.put`` is reentrant, which
is what makes it safe to hang up from a finalizer.
"""

from collections.abc import Iterator
from logging import getLogger
from queue import Empty as QueueEmpty
from queue import SimpleQueue
from typing import Any

from bichannel.errors import Disconnected, Timeout
from bichannel.link import BaseReceiver, Link, Sender

logger = getLogger(__name__)


class Receiver[T](BaseReceiver[T]):
    """The receiving half of a threaded channel.

    Only one thread should receive at a time; senders may live on any
    thread.
    """

    _link: Link[SimpleQueue[Any]]

    def recv(self) -> T:
        """Block until a message arrives and return it.

        Returns:
            The next message, in the order it was sent.

        Raises:
            Disconnected: If every sender is gone and the buffer is
                drained, or the channel hangs up while waiting.

        """
        self._check_open()
        return self._accept(self._link.queue.get())

    def recv_timeout(self, timeout: float) -> T:
        """Block for at most ``timeout`` seconds waiting for a message.

        Args:
            timeout: Maximum wait in seconds.

        Returns:
            The next message.

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
            item = self._link.queue.get(timeout=timeout)
        except QueueEmpty:
            msg = f"No message within {timeout}s"
            raise Timeout(msg) from None
        return self._accept(item)

    def __iter__(self) -> Iterator[T]:
        """Yield messages as they arrive until the channel hangs up."""
        while True:
            try:
                yield self.recv()
            except Disconnected:
                return


def unbounded[T]() -> tuple[Sender[T], Receiver[T]]:
    """Create a threaded channel with no capacity limit.

    Returns:
        A ``(sender, receiver)`` pair sharing one fresh queue.

    """
    link = Link(SimpleQueue())
    logger.debug("Opened threaded channel %r", link)
    return Sender(link), Receiver(link)
