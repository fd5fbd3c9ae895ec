"""Bidirectional in-process channels.

Re-exports public symbols so callers can write::

    from bichannel import channel, Disconnected
"""

from bichannel.aio import AsyncReceiver
from bichannel.endpoint import AsyncEndpoint, Endpoint, async_channel, channel
from bichannel.errors import ChannelError, Disconnected, Empty, SendError, Timeout
from bichannel.link import Sender
from bichannel.mpsc import Receiver
from bichannel.protocols import RecvHalf, SendHalf
from bichannel.state import ChannelState

__all__ = [
    "AsyncEndpoint",
    "AsyncReceiver",
    "ChannelError",
    "ChannelState",
    "Disconnected",
    "Empty",
    "Endpoint",
    "Receiver",
    "RecvHalf",
    "SendError",
    "SendHalf",
    "Sender",
    "Timeout",
    "async_channel",
    "channel",
]
