"""Unit tests for SQSQueue."""

import json
import threading
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from lifecycled.infrastructure.sqs_queue import SQSQueue, queue_name_for, queue_policy

TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:lifecycle-hooks"
QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/lifecycled-i-1"
QUEUE_ARN = "arn:aws:sqs:us-east-1:123456789012:lifecycled-i-1"


@pytest.fixture
def clients() -> dict[str, Mock]:
    """Create mock sqs and sns clients."""
    sqs = Mock()
    sqs.create_queue.return_value = {"QueueUrl": QUEUE_URL}
    sqs.get_queue_attributes.return_value = {"Attributes": {"QueueArn": QUEUE_ARN}}
    sns = Mock()
    sns.subscribe.return_value = {"SubscriptionArn": f"{TOPIC_ARN}:sub-1"}
    return {"sqs": sqs, "sns": sns}


@pytest.fixture
def sqs_queue(clients) -> SQSQueue:
    """Create an SQSQueue backed by mock clients."""
    session = Mock()
    session.client.side_effect = lambda name: clients[name]
    return SQSQueue(queue_name_for("i-1"), TOPIC_ARN, "us-east-1", session=session)


def client_error(code: str, operation: str) -> ClientError:
    """Create a botocore ClientError."""
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_queue_name_for() -> None:
    """Test queue naming."""
    assert queue_name_for("i-0abc") == "lifecycled-i-0abc"


def test_queue_policy_allows_topic() -> None:
    """Test that the queue policy is scoped to the topic."""
    policy = json.loads(queue_policy(TOPIC_ARN))

    statement = policy["Statement"][0]
    assert statement["Action"] == ["sqs:SendMessage"]
    assert statement["Condition"]["ArnEquals"]["aws:SourceArn"] == TOPIC_ARN


def test_create(sqs_queue, clients) -> None:
    """Test that create stores the queue URL and ARN."""
    sqs_queue.create()

    assert sqs_queue.url == QUEUE_URL
    assert sqs_queue.arn == QUEUE_ARN
    kwargs = clients["sqs"].create_queue.call_args.kwargs
    assert kwargs["QueueName"] == "lifecycled-i-1"
    assert kwargs["Attributes"]["ReceiveMessageWaitTimeSeconds"] == "20"


def test_create_failure(sqs_queue, clients) -> None:
    """Test that create wraps client errors."""
    clients["sqs"].create_queue.side_effect = client_error("AccessDenied", "CreateQueue")

    with pytest.raises(RuntimeError, match="Failed to create queue"):
        sqs_queue.create()


def test_subscribe(sqs_queue, clients) -> None:
    """Test subscribing the queue to the topic."""
    sqs_queue.create()
    sqs_queue.subscribe()

    clients["sns"].subscribe.assert_called_once_with(
        TopicArn=TOPIC_ARN, Protocol="sqs", Endpoint=QUEUE_ARN, ReturnSubscriptionArn=True
    )
    assert sqs_queue.subscription_arn == f"{TOPIC_ARN}:sub-1"


def test_subscribe_requires_queue(sqs_queue) -> None:
    """Test that subscribe fails before the queue exists."""
    with pytest.raises(RuntimeError, match="must be created"):
        sqs_queue.subscribe()


def test_subscribe_failure(sqs_queue, clients) -> None:
    """Test that subscribe wraps client errors."""
    clients["sns"].subscribe.side_effect = client_error("NotFound", "Subscribe")
    sqs_queue.create()

    with pytest.raises(RuntimeError, match="Failed to subscribe"):
        sqs_queue.subscribe()


def test_get_messages(sqs_queue, clients) -> None:
    """Test long polling for messages."""
    clients["sqs"].receive_message.return_value = {
        "Messages": [
            {"ReceiptHandle": "rh-1", "Body": "body-1"},
            {"ReceiptHandle": "rh-2", "Body": "body-2"},
        ]
    }
    sqs_queue.create()

    messages = sqs_queue.get_messages(threading.Event())

    assert [m.receipt_handle for m in messages] == ["rh-1", "rh-2"]
    assert [m.body for m in messages] == ["body-1", "body-2"]
    kwargs = clients["sqs"].receive_message.call_args.kwargs
    assert kwargs["WaitTimeSeconds"] == 20
    assert kwargs["MaxNumberOfMessages"] == 10


def test_get_messages_empty(sqs_queue, clients) -> None:
    """Test that a poll without messages returns an empty list."""
    clients["sqs"].receive_message.return_value = {}
    sqs_queue.create()

    assert sqs_queue.get_messages(threading.Event()) == []


def test_get_messages_after_shutdown(sqs_queue, clients) -> None:
    """Test that no receive call is made once shutdown is set."""
    event = threading.Event()
    event.set()

    assert sqs_queue.get_messages(event) == []
    clients["sqs"].receive_message.assert_not_called()


def test_get_messages_failure(sqs_queue, clients) -> None:
    """Test that receive errors are wrapped."""
    clients["sqs"].receive_message.side_effect = client_error("AccessDenied", "ReceiveMessage")
    sqs_queue.create()

    with pytest.raises(RuntimeError, match="Failed to receive messages"):
        sqs_queue.get_messages(threading.Event())


def test_delete_message(sqs_queue, clients) -> None:
    """Test acknowledging a message."""
    sqs_queue.create()
    sqs_queue.delete_message("rh-1")

    clients["sqs"].delete_message.assert_called_once_with(QueueUrl=QUEUE_URL, ReceiptHandle="rh-1")


def test_unsubscribe_and_delete(sqs_queue, clients) -> None:
    """Test tearing down the subscription and queue."""
    sqs_queue.create()
    sqs_queue.subscribe()

    sqs_queue.unsubscribe()
    sqs_queue.delete()

    clients["sns"].unsubscribe.assert_called_once_with(SubscriptionArn=f"{TOPIC_ARN}:sub-1")
    clients["sqs"].delete_queue.assert_called_once_with(QueueUrl=QUEUE_URL)
    assert sqs_queue.subscription_arn is None
    assert sqs_queue.url is None


def test_teardown_without_setup_is_noop(sqs_queue, clients) -> None:
    """Test that teardown does nothing when nothing was created."""
    sqs_queue.unsubscribe()
    sqs_queue.delete()

    clients["sns"].unsubscribe.assert_not_called()
    clients["sqs"].delete_queue.assert_not_called()


def test_delete_failure(sqs_queue, clients) -> None:
    """Test that delete wraps client errors."""
    clients["sqs"].delete_queue.side_effect = client_error("AccessDenied", "DeleteQueue")
    sqs_queue.create()

    with pytest.raises(RuntimeError, match="Failed to delete queue"):
        sqs_queue.delete()
