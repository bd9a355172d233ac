"""
Kafka consumer handlers for the HR Personnel Service.

Wires the notification dispatcher to the notification topics produced by
the change detector.
"""

from typing import Optional

from app.core.kafka import KafkaConsumer
from app.core.logging import get_logger
from app.core.topics import KafkaTopics
from app.services.notification_dispatcher import NotificationDispatcher

logger = get_logger(__name__)


def register_notification_handlers(dispatcher: Optional[NotificationDispatcher] = None):
    """
    Register the dispatcher for every notification topic.

    Call this function before starting the consumer.
    """
    logger.info("Registering notification event handlers...")
    dispatcher = dispatcher or NotificationDispatcher()

    for topic in KafkaTopics.notification_topics():
        KafkaConsumer.register_handler(topic, dispatcher.handle)

    logger.info(
        f"Registered handlers for {len(KafkaTopics.notification_topics())} notification topics"
    )
    return dispatcher
