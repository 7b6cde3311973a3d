#!/usr/bin/env python3
"""
Listener for autoscaling lifecycle hook terminations.

Subscribes a queue to the lifecycle hook topic, polls it until a terminating
transition for this instance arrives, and hands over exactly one notice. The
notice keeps the lifecycle action alive with heartbeats while the handler
runs and completes it afterwards.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Protocol

from lifecycled.application.notice_handler import publish_notice
from lifecycled.domain.errors import (
    CompletionError,
    DecodeError,
    HeartbeatError,
    SetupError,
    TeardownError,
    TransientPollError,
)
from lifecycled.domain.lifecycle_message import (
    LifecycleMessage,
    QueueMessage,
    decode_envelope,
    decode_message,
    is_termination_for,
)
from lifecycled.domain.termination_notice import Handler, NoticeKind, TerminationNotice
from lifecycled.infrastructure.logger import with_fields
from lifecycled.infrastructure.retry import backoff_delay

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "autoscaling_listener",
        "description": "Listener for autoscaling lifecycle hook terminations",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


COMPLETE_RESULT = "CONTINUE"
HEARTBEAT_JOIN_TIMEOUT = 15.0


class EventChannel(Protocol):
    """Protocol defining the queue the listener polls.

    Infrastructure layer must implement this protocol.
    """

    def create(self) -> None:
        """Create the underlying queue."""
        ...

    def subscribe(self) -> None:
        """Subscribe the queue to the event source."""
        ...

    def get_messages(self, shutdown_event: threading.Event) -> list[QueueMessage]:
        """Poll for available messages (bounded wait)."""
        ...

    def delete_message(self, receipt_handle: str) -> None:
        """Acknowledge a received message."""
        ...

    def unsubscribe(self) -> None:
        """Remove the subscription to the event source."""
        ...

    def delete(self) -> None:
        """Delete the underlying queue."""
        ...


class LifecycleActionClient(Protocol):
    """Protocol defining the lifecycle action calls a notice makes."""

    def record_heartbeat(
        self, group_name: str, hook_name: str, instance_id: str, action_token: str
    ) -> None:
        """Extend the timeout of a pending lifecycle action."""
        ...

    def complete_action(
        self,
        group_name: str,
        hook_name: str,
        instance_id: str,
        action_token: str,
        result: str,
    ) -> None:
        """Complete a pending lifecycle action."""
        ...


@dataclass
class AutoscalingTerminationNotice:
    """Termination notice produced by the autoscaling listener.

    Attributes:
        message: Decoded lifecycle message that matched
        autoscaling: Client used for heartbeats and completion
        heartbeat_interval: Seconds between heartbeats
        heartbeat_join_timeout: Longest wait for an in-flight heartbeat
            before completing the action
    """

    message: LifecycleMessage
    autoscaling: LifecycleActionClient
    heartbeat_interval: float
    heartbeat_join_timeout: float = HEARTBEAT_JOIN_TIMEOUT
    kind: NoticeKind = field(default=NoticeKind.AUTOSCALING, init=False)

    def type(self) -> NoticeKind:
        """Return the kind of listener that produced this notice."""
        return self.kind

    def _send_heartbeats(
        self, stop: threading.Event, log: logging.Logger | logging.LoggerAdapter
    ) -> None:
        while not stop.wait(self.heartbeat_interval):
            log.debug("Sending heartbeat")
            try:
                self.autoscaling.record_heartbeat(
                    self.message.group_name,
                    self.message.hook_name,
                    self.message.instance_id,
                    self.message.action_token,
                )
            except Exception as e:
                log.warning(f"Failed to send heartbeat: {HeartbeatError(str(e))}")

    def _complete(self, log: logging.Logger | logging.LoggerAdapter) -> None:
        try:
            self.autoscaling.complete_action(
                self.message.group_name,
                self.message.hook_name,
                self.message.instance_id,
                self.message.action_token,
                COMPLETE_RESULT,
            )
        except Exception as e:
            log.error(f"Failed to complete lifecycle action: {CompletionError(str(e))}")
        else:
            log.info("Lifecycle action completed successfully")

    def handle(
        self,
        shutdown_event: threading.Event,
        handler: Handler,
        logger: logging.Logger | logging.LoggerAdapter,
    ) -> None:
        """Run the handler while sending heartbeats, then complete the action.

        The lifecycle action is completed with CONTINUE whether or not the
        handler succeeds. Heartbeats have stopped before completion is sent.

        Args:
            shutdown_event: Set when the daemon is shutting down
            handler: Termination handler to run
            logger: Logger for this handling cycle

        Raises:
            Exception: The handler's own failure
        """
        stop = threading.Event()
        heartbeat = threading.Thread(
            target=self._send_heartbeats,
            args=(stop, logger),
            name="LifecycleHeartbeat",
            daemon=True,
        )
        heartbeat.start()

        try:
            handler.execute(shutdown_event, self.message.transition, self.message.instance_id)
        finally:
            stop.set()
            heartbeat.join(self.heartbeat_join_timeout)
            if heartbeat.is_alive():
                logger.warning(
                    f"Heartbeat still in flight after {self.heartbeat_join_timeout}s, "
                    "completing lifecycle action anyway"
                )
            self._complete(logger)


class AutoscalingListener:
    """Listens for autoscaling lifecycle hook termination events."""

    def __init__(
        self,
        instance_id: str,
        channel: EventChannel,
        autoscaling: LifecycleActionClient,
        heartbeat_interval: float,
        poll_error_initial_delay: float = 1.0,
        poll_error_max_delay: float = 30.0,
    ) -> None:
        """Initialize the listener.

        Args:
            instance_id: Instance whose termination to listen for
            channel: Queue subscribed to the lifecycle hook topic
            autoscaling: Client handed to notices for heartbeats and completion
            heartbeat_interval: Seconds between heartbeats while handling
            poll_error_initial_delay: Wait after the first failed poll
            poll_error_max_delay: Upper bound on the wait between failed polls
        """
        self.instance_id = instance_id
        self.channel = channel
        self.autoscaling = autoscaling
        self.heartbeat_interval = heartbeat_interval
        self.poll_error_initial_delay = poll_error_initial_delay
        self.poll_error_max_delay = poll_error_max_delay

    def type(self) -> NoticeKind:
        """Return the kind of notice this listener produces."""
        return NoticeKind.AUTOSCALING

    def start(
        self,
        shutdown_event: threading.Event,
        notices: "queue.Queue[TerminationNotice]",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Listen until a termination notice is published or shutdown is set.

        Args:
            shutdown_event: Set to stop listening
            notices: Single-slot queue receiving the notice
            log: Optional logger (defaults to this module's logger)

        Raises:
            SetupError: If the queue cannot be created or subscribed
        """
        log = with_fields(log or logger, listener=self.type().value)

        log.debug("Creating sqs queue")
        try:
            self.channel.create()
        except Exception as e:
            raise SetupError(f"Failed to create queue: {e}") from e

        try:
            log.debug("Subscribing queue to sns topic")
            try:
                self.channel.subscribe()
            except Exception as e:
                raise SetupError(f"Failed to subscribe queue: {e}") from e

            try:
                self._poll(shutdown_event, notices, log)
            finally:
                log.debug("Deleting sns subscription")
                try:
                    self.channel.unsubscribe()
                except Exception as e:
                    log.error(f"Failed to unsubscribe from sns topic: {TeardownError(str(e))}")
        finally:
            log.debug("Deleting sqs queue")
            try:
                self.channel.delete()
            except Exception as e:
                log.error(f"Failed to delete queue: {TeardownError(str(e))}")

    def _poll(
        self,
        shutdown_event: threading.Event,
        notices: "queue.Queue[TerminationNotice]",
        log: logging.Logger | logging.LoggerAdapter,
    ) -> None:
        failures = 0

        while not shutdown_event.is_set():
            log.debug("Polling sqs for messages")
            try:
                messages = self.channel.get_messages(shutdown_event)
            except Exception as e:
                failures += 1
                log.warning(f"Failed to get messages from SQS: {TransientPollError(str(e))}")
                shutdown_event.wait(
                    backoff_delay(
                        failures,
                        initial_delay=self.poll_error_initial_delay,
                        max_delay=self.poll_error_max_delay,
                    )
                )
                continue

            failures = 0
            for queue_message in messages:
                notice = self._process(queue_message, log)
                if notice is None:
                    continue

                log.info(f"Received termination notice for {notice.message.instance_id}")
                publish_notice(notices, notice, shutdown_event)
                return

    def _process(
        self, queue_message: QueueMessage, log: logging.Logger | logging.LoggerAdapter
    ) -> AutoscalingTerminationNotice | None:
        """Acknowledge, decode and filter one queue message.

        Returns:
            A notice if the message is a termination for this instance
        """
        # Acknowledge first so malformed messages are never redelivered
        try:
            self.channel.delete_message(queue_message.receipt_handle)
        except Exception as e:
            log.warning(f"Failed to delete message: {e}")

        try:
            envelope = decode_envelope(queue_message.body)
        except DecodeError as e:
            log.error(f"Failed to unmarshal envelope: {e}")
            return None

        log.debug(f"Received an SQS message (type={envelope.type}, subject={envelope.subject})")

        try:
            message = decode_message(envelope)
        except DecodeError as e:
            log.error(f"Failed to unmarshal autoscaling message: {e}")
            return None

        if not is_termination_for(message, self.instance_id):
            if message.instance_id != self.instance_id:
                log.debug(
                    f"Skipping autoscaling event, doesn't match instance id (target={message.instance_id})"
                )
            else:
                log.debug(
                    f"Skipping autoscaling event, not a termination notice (transition={message.transition})"
                )
            return None

        return AutoscalingTerminationNotice(
            message=message,
            autoscaling=self.autoscaling,
            heartbeat_interval=self.heartbeat_interval,
        )


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
