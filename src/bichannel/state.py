"""Lifecycle states of one direction of a channel.

A direction moves through three states and never goes back:

    OPEN → HALF_CLOSED → CLOSED

- **OPEN** — at least one sending half and the receiving half are alive.
- **HALF_CLOSED** — every sending half has been dropped, but messages
  already buffered can still be drained.
- **CLOSED** — the receiver has seen the hang-up (the buffer is drained),
  or the receiving half itself has been dropped.
"""

from enum import StrEnum


class ChannelState(StrEnum):
    """Lifecycle states of a unidirectional channel."""

    OPEN = "open"
    HALF_CLOSED = "half_closed"
    CLOSED = "closed"
