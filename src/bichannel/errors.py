"""Errors raised by channel endpoints.

Every failure a channel can report falls into one of two groups:

**Terminal** — ``Disconnected`` (and its subclass ``SendError``).
    The other half of the direction is gone.  Nothing will ever be
    delivered again, so retrying is pointless.

**Transient** — ``Empty`` and ``Timeout``.
    Nothing has arrived *yet*.  The caller decides whether to retry.

Endpoints never retry, log, or swallow these; they reach the caller
as raised.
"""

from typing import Any


class ChannelError(Exception):
    """Base class for all channel errors."""


class Disconnected(ChannelError):
    """Raise when the other half of a direction has been dropped."""


class SendError(Disconnected):
    """Raise when a message cannot be delivered because the receiver is gone.

    The rejected message is handed back on ``message`` so that the
    caller can recover it.
    """

    def __init__(self, message: Any) -> None:
        """Create the error, keeping the undelivered message."""
        super().__init__("Cannot send on a disconnected channel")
        self.message = message


class Empty(ChannelError):
    """Raise when a non-blocking receive finds no pending message."""


class Timeout(ChannelError, TimeoutError):
    """Raise when no message arrives before a receive deadline."""
