"""Tests for the channel error taxonomy."""

import pytest

from bichannel.errors import ChannelError, Disconnected, Empty, SendError, Timeout


class TestHierarchy:
    """Verify how the errors relate."""

    @pytest.mark.parametrize("error", [Disconnected, SendError, Empty, Timeout])
    def test_all_are_channel_errors(self, error: type[Exception]) -> None:
        """Every error can be caught as ChannelError."""
        assert issubclass(error, ChannelError)

    def test_send_error_is_terminal(self) -> None:
        """SendError is a kind of Disconnected."""
        assert issubclass(SendError, Disconnected)

    def test_transient_errors_are_not_terminal(self) -> None:
        """Empty and Timeout are not Disconnected."""
        assert not issubclass(Empty, Disconnected)
        assert not issubclass(Timeout, Disconnected)

    def test_timeout_is_builtin_timeout(self) -> None:
        """Timeout can be caught as TimeoutError."""
        assert issubclass(Timeout, TimeoutError)


class TestSendError:
    """Verify SendError keeps the payload."""

    def test_message_attached(self) -> None:
        """The undelivered message is available on the error."""
        error = SendError([1, 2, 3])
        assert error.message == [1, 2, 3]
        assert "disconnected" in str(error)
