#!/usr/bin/env python3
"""
SQS queue subscribed to the lifecycle hook SNS topic.

Each daemon creates its own queue, subscribes it to the topic that the
autoscaling lifecycle hook publishes to, and removes both on shutdown.
"""

import json
import logging
import threading
from typing import Any

import boto3
from botocore.exceptions import ClientError

from lifecycled.domain.lifecycle_message import QueueMessage
from lifecycled.infrastructure.retry import with_retry

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "sqs_queue",
        "description": "SQS queue subscribed to an SNS topic",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


LONG_POLL_SECONDS = 20
MAX_MESSAGES_PER_POLL = 10
MESSAGE_RETENTION_SECONDS = 3600


def queue_policy(topic_arn: str) -> str:
    """Build the queue policy that lets an SNS topic deliver to the queue.

    Args:
        topic_arn: ARN of the SNS topic

    Returns:
        Policy document as a JSON string
    """
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "AllowSNSSendMessage",
                    "Effect": "Allow",
                    "Principal": {"AWS": "*"},
                    "Action": ["sqs:SendMessage"],
                    "Resource": "*",
                    "Condition": {"ArnEquals": {"aws:SourceArn": topic_arn}},
                }
            ],
        }
    )


def queue_name_for(instance_id: str) -> str:
    """Return the queue name used by the daemon on an instance.

    Args:
        instance_id: EC2 instance ID

    Returns:
        Queue name
    """
    return f"lifecycled-{instance_id}"


class SQSQueue:
    """Event channel backed by an SQS queue subscribed to an SNS topic.

    Implements the EventChannel protocol used by the autoscaling listener.
    """

    def __init__(
        self,
        queue_name: str,
        topic_arn: str,
        region: str,
        session: boto3.Session | None = None,
    ) -> None:
        """Initialize the queue wrapper. Nothing is created until create().

        Args:
            queue_name: Name of the SQS queue to create
            topic_arn: ARN of the SNS topic to subscribe to
            region: AWS region
            session: Optional boto3 session to build clients from
        """
        self.name = queue_name
        self.topic_arn = topic_arn
        self.region = region
        self.url: str | None = None
        self.arn: str | None = None
        self.subscription_arn: str | None = None
        self._session = session or boto3.Session(region_name=region)
        self._sqs: Any = None
        self._sns: Any = None

    def _get_sqs_client(self) -> Any:
        if self._sqs is None:
            self._sqs = self._session.client("sqs")
        return self._sqs

    def _get_sns_client(self) -> Any:
        if self._sns is None:
            self._sns = self._session.client("sns")
        return self._sns

    def create(self) -> None:
        """Create the queue and look up its ARN.

        Raises:
            RuntimeError: If the queue cannot be created
        """

        @with_retry()
        def _create_impl() -> None:
            client = self._get_sqs_client()
            response = client.create_queue(
                QueueName=self.name,
                Attributes={
                    "Policy": queue_policy(self.topic_arn),
                    "ReceiveMessageWaitTimeSeconds": str(LONG_POLL_SECONDS),
                    "MessageRetentionPeriod": str(MESSAGE_RETENTION_SECONDS),
                },
            )
            self.url = response["QueueUrl"]

            attributes = client.get_queue_attributes(
                QueueUrl=self.url, AttributeNames=["QueueArn"]
            )
            self.arn = attributes["Attributes"]["QueueArn"]
            logger.debug(f"Created queue {self.url} ({self.arn})")

        try:
            _create_impl()
        except ClientError as e:
            raise RuntimeError(f"Failed to create queue {self.name}: {e}") from e

    def subscribe(self) -> None:
        """Subscribe the queue to the SNS topic.

        Raises:
            RuntimeError: If the subscription cannot be created
        """

        @with_retry()
        def _subscribe_impl() -> None:
            client = self._get_sns_client()
            response = client.subscribe(
                TopicArn=self.topic_arn,
                Protocol="sqs",
                Endpoint=self.arn,
                ReturnSubscriptionArn=True,
            )
            self.subscription_arn = response["SubscriptionArn"]

        if self.arn is None:
            raise RuntimeError(f"Queue {self.name} must be created before subscribing")

        try:
            _subscribe_impl()
        except ClientError as e:
            raise RuntimeError(f"Failed to subscribe to topic {self.topic_arn}: {e}") from e

    def get_messages(self, shutdown_event: threading.Event) -> list[QueueMessage]:
        """Long poll the queue for messages.

        Args:
            shutdown_event: Set when the caller is shutting down; an
                in-flight poll is not interrupted

        Returns:
            List of received messages (empty when none arrived or shutdown is set)

        Raises:
            RuntimeError: If the receive call fails
        """
        if shutdown_event.is_set():
            return []

        try:
            response = self._get_sqs_client().receive_message(
                QueueUrl=self.url,
                MaxNumberOfMessages=MAX_MESSAGES_PER_POLL,
                WaitTimeSeconds=LONG_POLL_SECONDS,
                VisibilityTimeout=0,
            )
        except ClientError as e:
            raise RuntimeError(f"Failed to receive messages from {self.name}: {e}") from e

        return [
            QueueMessage(receipt_handle=m["ReceiptHandle"], body=m.get("Body", ""))
            for m in response.get("Messages", [])
        ]

    def delete_message(self, receipt_handle: str) -> None:
        """Delete (acknowledge) a received message.

        Args:
            receipt_handle: Receipt handle of the message

        Raises:
            RuntimeError: If the delete call fails
        """
        try:
            self._get_sqs_client().delete_message(
                QueueUrl=self.url, ReceiptHandle=receipt_handle
            )
        except ClientError as e:
            raise RuntimeError(f"Failed to delete message: {e}") from e

    def unsubscribe(self) -> None:
        """Remove the SNS subscription.

        Raises:
            RuntimeError: If the unsubscribe call fails
        """
        if self.subscription_arn is None:
            return

        try:
            self._get_sns_client().unsubscribe(SubscriptionArn=self.subscription_arn)
        except ClientError as e:
            raise RuntimeError(
                f"Failed to unsubscribe {self.subscription_arn}: {e}"
            ) from e
        self.subscription_arn = None

    def delete(self) -> None:
        """Delete the queue.

        Raises:
            RuntimeError: If the delete call fails
        """
        if self.url is None:
            return

        try:
            self._get_sqs_client().delete_queue(QueueUrl=self.url)
        except ClientError as e:
            raise RuntimeError(f"Failed to delete queue {self.name}: {e}") from e
        self.url = None


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
