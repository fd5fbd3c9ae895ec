"""The minimal capability set the pairing logic needs from a direction.

``Endpoint`` and ``AsyncEndpoint`` are wired from any queue flavour
whose halves provide these operations.  The blocking receives are not
part of the protocol, since their shape (plain vs awaitable) is what
distinguishes the flavours; each endpoint type adds its own.
"""

from collections.abc import Iterator
from typing import Protocol, Self

from bichannel.state import ChannelState


class SendHalf[T](Protocol):
    """Anything that can feed one direction of a channel."""

    @property
    def state(self) -> ChannelState:
        """Return the state of the direction being fed."""
        ...

    def send(self, message: T) -> None:
        """Enqueue a message without blocking."""
        ...

    def clone(self) -> Self:
        """Return another sending half for the same direction."""
        ...

    def close(self) -> None:
        """Release this half."""
        ...


class RecvHalf[T](Protocol):
    """Anything that can drain one direction of a channel."""

    @property
    def state(self) -> ChannelState:
        """Return the state of the direction being drained."""
        ...

    def try_recv(self) -> T:
        """Return a pending message without blocking."""
        ...

    def try_iter(self) -> Iterator[T]:
        """Yield the messages already queued."""
        ...

    def close(self) -> None:
        """Release this half."""
        ...
