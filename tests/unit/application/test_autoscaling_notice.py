"""Unit tests for AutoscalingTerminationNotice handling."""

import logging
import threading
import time
from unittest.mock import Mock

import pytest

from lifecycled.application.autoscaling_listener import AutoscalingTerminationNotice
from lifecycled.domain.errors import HandlerError
from lifecycled.domain.lifecycle_message import LifecycleMessage

logger = logging.getLogger(__name__)


def make_notice(message: LifecycleMessage, interval: float = 0.01) -> tuple[AutoscalingTerminationNotice, Mock]:
    """Create a notice with a mock lifecycle action client."""
    autoscaling = Mock()
    notice = AutoscalingTerminationNotice(
        message=message, autoscaling=autoscaling, heartbeat_interval=interval
    )
    return notice, autoscaling


def test_handle_runs_handler_and_completes(sample_message, shutdown_event) -> None:
    """Test that the handler runs and the action is completed with CONTINUE."""
    notice, autoscaling = make_notice(sample_message, interval=10)
    handler = Mock()

    notice.handle(shutdown_event, handler, logger)

    handler.execute.assert_called_once_with(
        shutdown_event, "autoscaling:EC2_INSTANCE_TERMINATING", "i-1"
    )
    autoscaling.complete_action.assert_called_once_with("g", "h", "i-1", "t", "CONTINUE")


def test_handle_sends_heartbeats_while_handler_runs(sample_message, shutdown_event) -> None:
    """Test that heartbeats are recorded while the handler is running."""
    notice, autoscaling = make_notice(sample_message, interval=0.01)
    handler = Mock()
    handler.execute.side_effect = lambda *args: time.sleep(0.1)

    notice.handle(shutdown_event, handler, logger)

    assert autoscaling.record_heartbeat.call_count >= 2
    autoscaling.record_heartbeat.assert_called_with("g", "h", "i-1", "t")


def test_handle_completes_when_handler_fails(sample_message, shutdown_event) -> None:
    """Test that a handler error is raised but the action is still completed."""
    notice, autoscaling = make_notice(sample_message, interval=10)
    handler = Mock()
    error = HandlerError("exit status 1", exit_code=1)
    handler.execute.side_effect = error

    with pytest.raises(HandlerError) as exc_info:
        notice.handle(shutdown_event, handler, logger)

    assert exc_info.value is error
    autoscaling.complete_action.assert_called_once_with("g", "h", "i-1", "t", "CONTINUE")


def test_handle_completion_failure_does_not_mask_success(sample_message, shutdown_event) -> None:
    """Test that a completion failure is logged and not raised."""
    notice, autoscaling = make_notice(sample_message, interval=10)
    autoscaling.complete_action.side_effect = RuntimeError("token expired")

    notice.handle(shutdown_event, Mock(), logger)

    autoscaling.complete_action.assert_called_once()


def test_handle_completion_failure_does_not_mask_handler_error(
    sample_message, shutdown_event
) -> None:
    """Test that the handler's error wins over a completion failure."""
    notice, autoscaling = make_notice(sample_message, interval=10)
    autoscaling.complete_action.side_effect = RuntimeError("token expired")
    handler = Mock()
    handler.execute.side_effect = ValueError("handler broke")

    with pytest.raises(ValueError, match="handler broke"):
        notice.handle(shutdown_event, handler, logger)


def test_handle_heartbeat_failures_keep_ticking(sample_message, shutdown_event) -> None:
    """Test that a failed heartbeat does not stop later heartbeats."""
    notice, autoscaling = make_notice(sample_message, interval=0.01)
    autoscaling.record_heartbeat.side_effect = RuntimeError("throttled")
    handler = Mock()
    handler.execute.side_effect = lambda *args: time.sleep(0.1)

    notice.handle(shutdown_event, handler, logger)

    assert autoscaling.record_heartbeat.call_count >= 2
    autoscaling.complete_action.assert_called_once()


def test_handle_heartbeats_stop_before_completion(sample_message, shutdown_event) -> None:
    """Test that no heartbeat is sent once completion has started."""
    notice, autoscaling = make_notice(sample_message, interval=0.005)
    completed = threading.Event()
    late_heartbeats = []

    def record_heartbeat(*args) -> None:
        if completed.is_set():
            late_heartbeats.append(args)

    autoscaling.record_heartbeat.side_effect = record_heartbeat
    autoscaling.complete_action.side_effect = lambda *args: completed.set()
    handler = Mock()
    handler.execute.side_effect = lambda *args: time.sleep(0.05)

    notice.handle(shutdown_event, handler, logger)
    time.sleep(0.05)

    assert completed.is_set()
    assert late_heartbeats == []


def test_handle_completes_despite_hung_heartbeat(sample_message, shutdown_event, caplog) -> None:
    """Test that a stuck heartbeat call does not hold back completion."""
    notice, autoscaling = make_notice(sample_message, interval=0.005)
    notice.heartbeat_join_timeout = 0.05
    started = threading.Event()
    release = threading.Event()

    def record_heartbeat(*args) -> None:
        started.set()
        release.wait(5)

    autoscaling.record_heartbeat.side_effect = record_heartbeat
    handler = Mock()
    handler.execute.side_effect = lambda *args: started.wait(1)

    try:
        with caplog.at_level(logging.WARNING):
            notice.handle(shutdown_event, handler, logger)

        autoscaling.complete_action.assert_called_once_with("g", "h", "i-1", "t", "CONTINUE")
        assert "Heartbeat still in flight" in caplog.text
    finally:
        release.set()


def test_handle_completes_when_cancelled(sample_message, shutdown_event) -> None:
    """Test that completion is sent when the handler stops because of shutdown."""
    notice, autoscaling = make_notice(sample_message, interval=10)
    shutdown_event.set()
    handler = Mock()
    handler.execute.side_effect = HandlerError("terminated", exit_code=-15)

    with pytest.raises(HandlerError):
        notice.handle(shutdown_event, handler, logger)

    autoscaling.complete_action.assert_called_once()


def test_notice_type(sample_message) -> None:
    """Test the notice kind."""
    notice, _ = make_notice(sample_message)

    assert notice.type().value == "autoscaling"
