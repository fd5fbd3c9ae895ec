"""Shared plumbing for one direction of a channel.

A direction is a queue plus a little bookkeeping, held in a ``Link``:

- how many sending halves are still alive (senders can be cloned),
- whether the receiving half is still alive,
- whether the receiver has already seen the hang-up.

The queue itself is a standard-library primitive (``queue.SimpleQueue``
for threads, ``asyncio.Queue`` for coroutines).  We never reimplement
queueing; we only teach the queue to say "nobody will ever write to
me again".  That is done with a sentinel: when the last sender goes
away, ``_HANGUP`` is enqueued behind any real messages, so the
receiver drains what was buffered first and then learns the direction
is dead.

Halves are released either explicitly (``close()``) or when they are
garbage collected.  Both paths go through ``weakref.finalize`` so the
release runs exactly once.
"""

import asyncio
import queue
import weakref
from collections.abc import Iterator
from logging import getLogger
from threading import RLock
from typing import Any, Protocol

from bichannel.errors import Disconnected, Empty, SendError
from bichannel.state import ChannelState

logger = getLogger(__name__)

_HANGUP = object()


class QueueLike(Protocol):
    """The non-blocking part of a queue primitive that every ``Link`` relies on.

    The blocking ``get`` differs between flavours (plain call with a
    timeout vs coroutine), so each receiver types its ``Link`` with the
    concrete queue it uses.
    """

    def put_nowait(self, item: Any, /) -> None:
        """Enqueue an item without blocking."""
        ...

    def get_nowait(self) -> Any:
        """Dequeue an item without blocking."""
        ...

    def qsize(self) -> int:
        """Return the number of queued items."""
        ...


class Link[Q: QueueLike]:
    """State shared by every half of one direction.

    The sender count is guarded by a reentrant lock: a finalizer may
    run in the middle of another counter update on the same thread.
    The hang-up sentinel is enqueued under the same lock, so once the
    count reads zero the sentinel is already the last queued item.
    """

    def __init__(self, queue: Q) -> None:
        """Wrap a fresh queue with no senders attached yet."""
        self.queue = queue
        self._lock = RLock()
        self._senders = 0
        self._hung_up = False
        self.receiver_alive = True
        self.drained = False

    @property
    def senders(self) -> int:
        """Return the number of live sending halves."""
        return self._senders

    @property
    def state(self) -> ChannelState:
        """Return where this direction is in its lifecycle.

        A hung-up direction is CLOSED as soon as its last real message
        has been consumed, i.e. when only the sentinel is left.
        """
        if self.drained or not self.receiver_alive:
            return ChannelState.CLOSED
        with self._lock:
            if not self._hung_up:
                return ChannelState.OPEN
            if self.queue.qsize() <= 1:
                return ChannelState.CLOSED
        return ChannelState.HALF_CLOSED

    def attach_sender(self) -> None:
        """Register one more sending half.

        Raises:
            Disconnected: If the direction has already hung up.

        """
        with self._lock:
            if self._hung_up:
                msg = "Cannot attach a sender to a hung-up channel"
                raise Disconnected(msg)
            self._senders += 1

    def detach_sender(self) -> None:
        """Release one sending half, hanging up after the last."""
        with self._lock:
            self._senders -= 1
            if self._senders == 0:
                self._hung_up = True
                self.queue.put_nowait(_HANGUP)
                logger.debug("Last sender dropped, hung up %r", self)

    def detach_receiver(self) -> None:
        """Release the receiving half.

        A sentinel is enqueued as well so that a receive blocked on
        another thread (or task) wakes up instead of waiting forever.
        """
        logger.debug("Receiver dropped on %r", self)
        self.receiver_alive = False
        self.queue.put_nowait(_HANGUP)

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"Link(senders={self._senders}, hung_up={self._hung_up})"


class Sender[T]:
    """The sending half of a direction.

    Sending never blocks: both supported queues are unbounded.  A sender
    can be cloned to let several owners feed the same receiver; the
    direction hangs up only once every clone has been closed.

    The asyncio flavour uses this same class.  There, ``send`` must be
    called from the event loop's thread, as with ``asyncio.Queue``.
    """

    def __init__(self, link: Link[Any]) -> None:
        """Attach a new sending half to ``link``.

        Raises:
            Disconnected: If ``link`` has already hung up.

        """
        link.attach_sender()
        self._link = link
        self._finalizer = weakref.finalize(self, link.detach_sender)

    @property
    def closed(self) -> bool:
        """Return True once this sending half has been released."""
        return not self._finalizer.alive

    @property
    def state(self) -> ChannelState:
        """Return the state of the direction this sender feeds."""
        return self._link.state

    def send(self, message: T) -> None:
        """Enqueue a message for the receiver.

        Args:
            message: The value to deliver.

        Raises:
            SendError: If this sender is closed or the receiver has been
                dropped.  The message is attached to the error.

        """
        if self.closed or not self._link.receiver_alive:
            raise SendError(message)
        self._link.queue.put_nowait(message)

    def clone(self) -> "Sender[T]":
        """Return another sending half for the same direction.

        Attaching is refused under the link's lock once the direction
        has hung up, so a clone racing the last close never joins a
        dead direction.

        Raises:
            Disconnected: If this sender has already been closed or the
                direction has hung up.

        """
        if self.closed:
            msg = "Cannot clone a closed sender"
            raise Disconnected(msg)
        return Sender(self._link)

    def close(self) -> None:
        """Release this sending half.  Safe to call more than once."""
        self._finalizer()

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"Sender({'closed' if self.closed else self.state})"


class BaseReceiver[T]:
    """Behaviour common to the threaded and asyncio receiving halves.

    Subclasses add the blocking (or awaitable) receive operations; the
    non-blocking ones live here because they look the same for both
    queue flavours.
    """

    def __init__(self, link: Link[Any]) -> None:
        """Own the receiving half of ``link``."""
        self._link = link
        self._finalizer = weakref.finalize(self, link.detach_receiver)

    @property
    def closed(self) -> bool:
        """Return True once this receiving half has been released."""
        return not self._finalizer.alive

    @property
    def state(self) -> ChannelState:
        """Return the state of the direction this receiver drains."""
        return self._link.state

    def try_recv(self) -> T:
        """Return a pending message without blocking.

        Raises:
            Empty: If nothing is queued and senders are still alive.
            Disconnected: If every sender is gone and the buffer is
                drained, or this receiver has been closed.

        """
        self._check_open()
        try:
            item = self._link.queue.get_nowait()
        except (queue.Empty, asyncio.QueueEmpty):
            msg = "No message pending"
            raise Empty(msg) from None
        return self._accept(item)

    def try_iter(self) -> Iterator[T]:
        """Yield the messages already queued, without blocking."""
        while True:
            try:
                yield self.try_recv()
            except (Empty, Disconnected):
                return

    def close(self) -> None:
        """Release this receiving half.  Safe to call more than once."""
        self._finalizer()

    def _check_open(self) -> None:
        if self.closed or self._link.drained:
            msg = "Channel is disconnected"
            raise Disconnected(msg)

    def _accept(self, item: Any) -> T:
        """Turn a dequeued item into a message, or raise on hang-up."""
        if item is _HANGUP:
            self._link.drained = True
            msg = "Channel is disconnected"
            raise Disconnected(msg)
        return item

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return f"{type(self).__name__}({self.state})"

