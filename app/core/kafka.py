"""
Kafka producer and consumer for the HR Personnel Service.

Producer: publishes event envelopes as JSON. Publishing failures are raised
so callers (the change detector) can retry the batch.

Consumer: dispatches each message to the handler registered for its topic.
A failed message is re-published to its own topic with an incremented
delivery-attempt header; once ``NOTIFICATION_MAX_ATTEMPTS`` attempts have
failed it is moved to ``<topic>-dlq`` instead.
"""

import json
from enum import Enum
from typing import Any, Callable, Optional, Union

from kafka import KafkaConsumer as KafkaClientConsumer
from kafka import KafkaProducer as KafkaClientProducer

from app.core.config import settings
from app.core.events import EventEnvelope
from app.core.logging import get_logger
from app.core.topics import KafkaTopics

logger = get_logger(__name__)

ATTEMPT_HEADER = "x-delivery-attempt"
ERROR_HEADER = "x-last-error"
SEND_TIMEOUT_SECONDS = 10

Headers = list[tuple[str, bytes]]
MessageHandler = Callable[[dict[str, Any]], None]


class KafkaProducer:
    """Process-wide Kafka producer, created on first use."""

    _producer: Optional[KafkaClientProducer] = None

    @classmethod
    def get_producer(cls) -> KafkaClientProducer:
        if cls._producer is None:
            logger.info(f"Connecting Kafka producer to {settings.KAFKA_BOOTSTRAP_SERVERS}")
            cls._producer = KafkaClientProducer(
                bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS.split(","),
                key_serializer=lambda k: k.encode("utf-8") if k else None,
                acks="all",
                retries=3,
            )
        return cls._producer

    @classmethod
    def send(
        cls,
        topic: str,
        value: Union[bytes, dict[str, Any]],
        key: Optional[str] = None,
        headers: Optional[Headers] = None,
    ) -> None:
        """Send one message and wait for the broker acknowledgement."""
        payload = value if isinstance(value, bytes) else json.dumps(value).encode("utf-8")
        future = cls.get_producer().send(topic, value=payload, key=key, headers=headers or [])
        future.get(timeout=SEND_TIMEOUT_SECONDS)

    @classmethod
    def close(cls) -> None:
        if cls._producer is not None:
            cls._producer.flush()
            cls._producer.close()
            cls._producer = None
            logger.info("Kafka producer closed")


def publish_event_sync(topic: str, event: EventEnvelope, key: Optional[str] = None) -> None:
    """
    Publish an event envelope and wait for it to be acknowledged.

    Raises:
        KafkaError: If the broker does not acknowledge the message
    """
    if not settings.KAFKA_ENABLED:
        logger.warning(f"Kafka disabled, dropping {event.event_type.value} event {event.event_id}")
        return

    KafkaProducer.send(topic, event.model_dump(mode="json"), key=key)
    logger.info(f"Published {event.event_type.value} event {event.event_id} to {topic}")


class DeliveryOutcome(str, Enum):
    PROCESSED = "processed"
    RETRIED = "retried"
    DEAD_LETTERED = "dead_lettered"


def get_attempt(headers: Optional[Headers]) -> int:
    """Delivery attempt of a message, starting at 1."""
    for name, value in headers or []:
        if name == ATTEMPT_HEADER:
            try:
                return max(1, int(value.decode("utf-8")))
            except (ValueError, AttributeError):
                return 1
    return 1


class KafkaConsumer:
    """
    Topic-dispatching consumer with bounded redelivery.

    Handlers are registered per topic on the class and shared by every
    consumer instance.
    """

    _handlers: dict[str, MessageHandler] = {}

    @classmethod
    def register_handler(cls, topic: str, handler: MessageHandler) -> None:
        cls._handlers[topic] = handler
        logger.info(f"Registered handler {handler.__name__} for topic {topic}")

    @classmethod
    def clear_handlers(cls) -> None:
        cls._handlers = {}

    def __init__(
        self,
        topics: Optional[list[str]] = None,
        group_id: Optional[str] = None,
        producer: Any = KafkaProducer,
        max_attempts: Optional[int] = None,
    ):
        self.topics = topics or list(self._handlers)
        self.group_id = group_id or settings.KAFKA_CONSUMER_GROUP
        self.producer = producer
        self.max_attempts = max_attempts or settings.NOTIFICATION_MAX_ATTEMPTS
        self._running = False

    def handle_message(
        self,
        topic: str,
        value: bytes,
        headers: Optional[Headers] = None,
        key: Optional[bytes] = None,
    ) -> DeliveryOutcome:
        """
        Process one message, scheduling a redelivery or dead-lettering on failure.

        Only a failure to re-publish propagates; the message offset must then
        stay uncommitted.
        """
        attempt = get_attempt(headers)
        try:
            handler = self._handlers.get(topic)
            if handler is None:
                raise LookupError(f"No handler registered for topic {topic}")
            handler(json.loads(value))
            return DeliveryOutcome.PROCESSED
        except Exception as e:
            logger.exception(f"Processing message from {topic} failed on attempt {attempt}: {e}")
            error_header = (ERROR_HEADER, str(e)[:500].encode("utf-8"))
            message_key = key.decode("utf-8") if key else None

            if attempt >= self.max_attempts:
                dlq_topic = KafkaTopics.dead_letter_topic(topic)
                self.producer.send(
                    dlq_topic,
                    value,
                    key=message_key,
                    headers=[(ATTEMPT_HEADER, str(attempt).encode("utf-8")), error_header],
                )
                logger.error(f"Message from {topic} moved to {dlq_topic} after {attempt} attempts")
                return DeliveryOutcome.DEAD_LETTERED

            self.producer.send(
                topic,
                value,
                key=message_key,
                headers=[(ATTEMPT_HEADER, str(attempt + 1).encode("utf-8")), error_header],
            )
            logger.warning(f"Message from {topic} scheduled for attempt {attempt + 1}")
            return DeliveryOutcome.RETRIED

    def run(self) -> None:
        """
        Consume until ``stop`` is called.

        Each poll returns at most one record and its offset is committed only
        after it was handled, so a record whose redelivery could not be
        published is read again instead of being skipped with its batch.
        """
        consumer = KafkaClientConsumer(
            *self.topics,
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS.split(","),
            group_id=self.group_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
            max_poll_records=1,
        )
        self._running = True
        logger.info(f"Kafka consumer '{self.group_id}' subscribed to {', '.join(self.topics)}")
        try:
            while self._running:
                batches = consumer.poll(timeout_ms=1000)
                for messages in batches.values():
                    for message in messages:
                        self.handle_message(
                            message.topic, message.value, message.headers, message.key
                        )
                        consumer.commit()
        finally:
            consumer.close()
            logger.info(f"Kafka consumer '{self.group_id}' stopped")

    def stop(self) -> None:
        self._running = False
