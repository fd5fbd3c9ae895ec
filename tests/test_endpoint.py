"""Tests for threaded bidirectional channels.

``channel()`` returns two endpoints wired crosswise: what the left side
sends, the right side receives, and vice versa.  Dropping one side lets
the other drain what was sent and then report ``Disconnected``.
"""

import gc
import threading
import time

import pytest

from bichannel import (
    ChannelState,
    Disconnected,
    Empty,
    Endpoint,
    SendError,
    Timeout,
    channel,
)

SHORT_TIMEOUT = 0.05
JOIN_TIMEOUT = 5.0
MESSAGE_COUNT = 50


class TestPairConstruction:
    """Verify what channel() hands back."""

    def test_returns_two_endpoints(self) -> None:
        """Both sides should be Endpoint instances."""
        left, right = channel()
        assert isinstance(left, Endpoint)
        assert isinstance(right, Endpoint)

    def test_both_directions_start_open(self) -> None:
        """A fresh pair has both directions OPEN."""
        left, right = channel()
        assert left.outbound_state is ChannelState.OPEN
        assert left.inbound_state is ChannelState.OPEN
        assert right.outbound_state is ChannelState.OPEN
        assert right.inbound_state is ChannelState.OPEN

    def test_pairs_are_independent(self) -> None:
        """Two pairs never see each other's messages."""
        left_a, right_a = channel()
        left_b, right_b = channel()
        left_a.send("a")
        left_b.send("b")
        assert right_a.recv() == "a"
        assert right_b.recv() == "b"


class TestDelivery:
    """Verify messages cross from one side to the other."""

    def test_left_to_right(self) -> None:
        """Left's send arrives at right."""
        left, right = channel()
        left.send(1)
        assert right.recv() == 1

    def test_right_to_left(self) -> None:
        """Right's send arrives at left."""
        left, right = channel()
        right.send(2)
        assert left.recv() == 2

    def test_fifo_each_direction(self) -> None:
        """Each direction preserves send order."""
        left, right = channel()
        for i in range(MESSAGE_COUNT):
            left.send(i)
            right.send(-i)
        assert [right.recv() for _ in range(MESSAGE_COUNT)] == list(range(MESSAGE_COUNT))
        assert [left.recv() for _ in range(MESSAGE_COUNT)] == [-i for i in range(MESSAGE_COUNT)]

    def test_own_sends_are_not_received(self) -> None:
        """Sending on the left never shows up on the left's receive."""
        left, right = channel()
        left.send("ping")
        with pytest.raises(Empty):
            left.try_recv()
        assert right.try_recv() == "ping"

    def test_ping_pong_scenario(self) -> None:
        """Send both ways, then drop the right side."""
        left, right = channel()
        left.send(1)
        assert right.recv() == 1
        right.send(2)
        assert left.recv() == 2
        del right
        gc.collect()
        with pytest.raises(Disconnected):
            left.recv()


class TestNonBlocking:
    """Verify try_recv and recv_timeout against a live counterpart."""

    def test_try_recv_empty(self) -> None:
        """Nothing pending and a live counterpart means Empty."""
        left, _right = channel()
        with pytest.raises(Empty):
            left.try_recv()

    def test_recv_timeout_waits(self) -> None:
        """Timeout is raised no earlier than the requested duration."""
        left, _right = channel()
        start = time.monotonic()
        with pytest.raises(Timeout):
            left.recv_timeout(SHORT_TIMEOUT)
        assert time.monotonic() - start >= SHORT_TIMEOUT * 0.9

    def test_recv_timeout_gets_late_message(self) -> None:
        """A message sent while waiting is returned."""
        left, right = channel()
        timer = threading.Timer(SHORT_TIMEOUT, right.send, args=("late",))
        timer.start()
        assert left.recv_timeout(JOIN_TIMEOUT) == "late"
        timer.join(JOIN_TIMEOUT)


class TestDisconnection:
    """Verify what happens when one side goes away."""

    def test_buffered_messages_survive_close(self) -> None:
        """Messages sent before closing are still delivered."""
        left, right = channel()
        right.send("a")
        right.send("b")
        right.close()
        assert left.inbound_state is ChannelState.HALF_CLOSED
        assert left.recv() == "a"
        assert left.recv() == "b"
        assert left.inbound_state is ChannelState.CLOSED
        with pytest.raises(Disconnected):
            left.recv()
        assert left.inbound_state is ChannelState.CLOSED

    def test_try_recv_after_drain(self) -> None:
        """try_recv reports Disconnected, not Empty, once drained."""
        left, right = channel()
        right.close()
        with pytest.raises(Disconnected):
            left.try_recv()

    def test_send_to_closed_counterpart(self) -> None:
        """Sending to a dropped side fails and returns the message."""
        left, right = channel()
        right.close()
        with pytest.raises(SendError) as info:
            left.send({"id": 7})
        assert info.value.message == {"id": 7}
        assert left.outbound_state is ChannelState.CLOSED

    def test_closed_endpoint_cannot_be_used(self) -> None:
        """After close, the endpoint itself refuses to send or receive."""
        left, _right = channel()
        left.close()
        with pytest.raises(SendError):
            left.send(1)
        with pytest.raises(Disconnected):
            left.recv()

    def test_close_is_idempotent(self) -> None:
        """Closing twice is harmless."""
        left, right = channel()
        left.close()
        left.close()
        with pytest.raises(Disconnected):
            right.try_recv()

    def test_context_manager_closes(self) -> None:
        """Leaving a with block drops the endpoint."""
        left, right = channel()
        with left as endpoint:
            endpoint.send("bye")
        assert right.recv() == "bye"
        with pytest.raises(Disconnected):
            right.recv()

    def test_directions_fail_independently(self) -> None:
        """Left → right can be dead while right → left keeps working."""
        left, right = channel()
        extra = right.clone_sender()
        right.close()
        with pytest.raises(SendError):
            left.send("nobody listening")
        assert left.inbound_state is ChannelState.OPEN
        extra.send("still here")
        assert left.recv() == "still here"
        extra.close()
        with pytest.raises(Disconnected):
            left.recv()

    def test_blocked_recv_wakes_when_counterpart_closes(self) -> None:
        """A receive blocked on another thread returns Disconnected."""
        left, right = channel()
        outcome: list[str] = []

        def wait() -> None:
            try:
                left.recv()
            except Disconnected:
                outcome.append("disconnected")

        worker = threading.Thread(target=wait)
        worker.start()
        right.close()
        worker.join(JOIN_TIMEOUT)
        assert outcome == ["disconnected"]


class TestFanIn:
    """Verify cloned senders."""

    def test_clone_sender_feeds_counterpart(self) -> None:
        """A cloned sender delivers to the same counterpart."""
        left, right = channel()
        extra = left.clone_sender()
        left.send(1)
        extra.send(2)
        assert sorted([right.recv(), right.recv()]) == [1, 2]

    def test_counterpart_open_until_all_clones_close(self) -> None:
        """Closing the endpoint alone is not a hang-up while a clone lives."""
        left, right = channel()
        extra = left.clone_sender()
        left.close()
        with pytest.raises(Empty):
            right.try_recv()
        extra.close()
        with pytest.raises(Disconnected):
            right.try_recv()


class TestIteration:
    """Verify iter() and try_iter()."""

    def test_iter_until_disconnected(self) -> None:
        """iter() ends once the counterpart hangs up."""
        left, right = channel()
        for word in ("x", "y"):
            right.send(word)
        right.close()
        assert list(left.iter()) == ["x", "y"]

    def test_iter_is_restartable(self) -> None:
        """Each call to iter() starts from the current queue position."""
        left, right = channel()
        right.send(1)
        right.send(2)
        right.send(3)
        first = left.iter()
        assert next(first) == 1
        right.close()
        assert list(left) == [2, 3]

    def test_try_iter(self) -> None:
        """try_iter yields only pending messages."""
        left, right = channel()
        right.send("a")
        right.send("b")
        assert list(left.try_iter()) == ["a", "b"]
        assert list(left.try_iter()) == []


class TestThreadedScenario:
    """Drive a worker thread through a pair of endpoints."""

    def test_worker_loop(self) -> None:
        """The worker answers until told to stop."""
        main, worker = channel()

        def run() -> None:
            for request in worker:
                if request == "stop":
                    worker.send("stopped")
                    return
                worker.send(f"cant stop: {request}")

        thread = threading.Thread(target=run)
        thread.start()
        main.send("slow down")
        assert main.recv() == "cant stop: slow down"
        main.send("stop")
        assert main.recv() == "stopped"
        thread.join(JOIN_TIMEOUT)
        assert not thread.is_alive()
