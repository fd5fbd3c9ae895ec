"""Bidirectional channels — two one-way queues wired crosswise.

``channel()`` allocates two unidirectional channels and hands back two
endpoints::

    left, right = channel()

    left.send(1)            # left → right
    assert right.recv() == 1

    right.send(2)           # right → left
    assert left.recv() == 2

Left owns the sending half of the first queue and the receiving half of
the second; right owns the other two halves.  After construction the
endpoints share nothing but those queues, so each one lives and dies
on its own.

When an endpoint is dropped (``close()``, a ``with`` block ending, or
garbage collection) its counterpart can still drain whatever was
already sent, after which every receive raises ``Disconnected``.  The
two directions fail independently.

``async_channel()`` builds the same pair on ``asyncio.Queue`` for use
inside an event loop.
"""

from collections.abc import AsyncIterator, Callable, Iterator
from logging import getLogger
from types import TracebackType
from typing import Any, Self

from bichannel import aio, mpsc
from bichannel.protocols import RecvHalf, SendHalf
from bichannel.state import ChannelState

logger = getLogger(__name__)


class _BaseEndpoint[S, R]:
    """One side of a pair: an outbound sending half and an inbound receiving half."""

    def __init__(self, sender: SendHalf[S], receiver: RecvHalf[R]) -> None:
        """Take ownership of one half of each direction."""
        self._sender = sender
        self._receiver = receiver

    @property
    def outbound_state(self) -> ChannelState:
        """Return the state of the direction this endpoint sends on."""
        return self._sender.state

    @property
    def inbound_state(self) -> ChannelState:
        """Return the state of the direction this endpoint receives on."""
        return self._receiver.state

    def send(self, message: S) -> None:
        """Send a message to the counterpart.

        Never blocks and does not wait for the counterpart to read it.
        Success only means the counterpart had not hung up yet.

        Args:
            message: The value to deliver.

        Raises:
            SendError: If the counterpart's receiving half is gone or
                this endpoint has been closed.  The message is attached
                to the error.

        """
        self._sender.send(message)

    def try_recv(self) -> R:
        """Return a pending message from the counterpart without blocking.

        Raises:
            Empty: If nothing is queued and the counterpart is alive.
            Disconnected: If the counterpart is gone and the buffer is
                drained.

        """
        return self._receiver.try_recv()

    def try_iter(self) -> Iterator[R]:
        """Yield the messages already queued, without blocking."""
        return self._receiver.try_iter()

    def clone_sender(self) -> SendHalf[S]:
        """Return an extra sending half for this endpoint's outbound direction.

        The counterpart sees ``Disconnected`` only after every clone and
        this endpoint have all let go of their sending halves.
        """
        return self._sender.clone()

    def close(self) -> None:
        """Drop both halves now.  Safe to call more than once."""
        self._sender.close()
        self._receiver.close()

    def __enter__(self) -> Self:
        """Return the endpoint itself."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the endpoint when the block ends."""
        self.close()

    def __repr__(self) -> str:
        """Return a developer-friendly representation."""
        return (
            f"{type(self).__name__}(outbound={self.outbound_state}, "
            f"inbound={self.inbound_state})"
        )


class Endpoint[S, R](_BaseEndpoint[S, R]):
    """One side of a threaded bidirectional channel.

    ``S`` is the type this side sends, ``R`` the type it receives; the
    counterpart is an ``Endpoint[R, S]``.
    """

    _receiver: mpsc.Receiver[R]

    def recv(self) -> R:
        """Block until the counterpart sends something and return it.

        Raises:
            Disconnected: If the counterpart is gone and the buffer is
                drained, or it disconnects while we wait.

        """
        return self._receiver.recv()

    def recv_timeout(self, timeout: float) -> R:
        """Like ``recv``, but give up after ``timeout`` seconds.

        Raises:
            ValueError: If ``timeout`` is negative.
            Timeout: If nothing arrived in time.
            Disconnected: Under the same condition as ``recv``.

        """
        return self._receiver.recv_timeout(timeout)

    def iter(self) -> Iterator[R]:
        """Return a fresh iterator over incoming messages.

        The iterator blocks between messages and stops once the
        counterpart has hung up and everything buffered was consumed.
        """
        return iter(self._receiver)

    def __iter__(self) -> Iterator[R]:
        """Iterate over incoming messages, see ``iter``."""
        return self.iter()


class AsyncEndpoint[S, R](_BaseEndpoint[S, R]):
    """One side of an asyncio bidirectional channel."""

    _receiver: aio.AsyncReceiver[R]

    async def recv(self) -> R:
        """Wait until the counterpart sends something and return it.

        Raises:
            Disconnected: If the counterpart is gone and the buffer is
                drained, or it disconnects while we wait.

        """
        return await self._receiver.recv()

    async def recv_timeout(self, timeout: float) -> R:
        """Like ``recv``, but give up after ``timeout`` seconds.

        Raises:
            ValueError: If ``timeout`` is negative.
            Timeout: If nothing arrived in time.
            Disconnected: Under the same condition as ``recv``.

        """
        return await self._receiver.recv_timeout(timeout)

    def __aiter__(self) -> AsyncIterator[R]:
        """Iterate over incoming messages until the counterpart hangs up."""
        return aiter(self._receiver)

    async def __aenter__(self) -> Self:
        """Return the endpoint itself."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the endpoint when the block ends."""
        self.close()


def _cross_wire[E](
    open_direction: Callable[[], tuple[Any, Any]],
    endpoint_type: Callable[[Any, Any], E],
) -> tuple[E, E]:
    """Open two directions and give each endpoint one half of both."""
    left_tx, right_rx = open_direction()
    right_tx, left_rx = open_direction()
    return endpoint_type(left_tx, left_rx), endpoint_type(right_tx, right_rx)


def channel[S, R]() -> tuple[Endpoint[S, R], Endpoint[R, S]]:
    """Create a threaded bidirectional channel.

    Returns:
        ``(left, right)``: whatever ``left`` sends, ``right`` receives
        in the same order, and vice versa.

    """
    logger.debug("Creating threaded channel pair")
    return _cross_wire(mpsc.unbounded, Endpoint)


def async_channel[S, R]() -> tuple[AsyncEndpoint[S, R], AsyncEndpoint[R, S]]:
    """Create an asyncio bidirectional channel.

    May be called outside a running loop; the endpoints bind to the
    loop that first awaits on them.
    """
    logger.debug("Creating asyncio channel pair")
    return _cross_wire(aio.unbounded, AsyncEndpoint)
