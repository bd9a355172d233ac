"""
Core building blocks: settings, field encryption, the record store, error
taxonomy and the Kafka event pipeline.

``app.core.consumers`` is not re-exported; it imports the notification
service, which imports from this package.
"""

from app.core.config import settings
from app.core.encryption import FieldEncryptor, get_encryptor
from app.core.events import EventEnvelope, EventType, create_event
from app.core.exceptions import (
    Conflict,
    Forbidden,
    InternalError,
    NotFoundOrInactive,
    ServiceError,
    ValidationError,
)
from app.core.kafka import KafkaConsumer, KafkaProducer, publish_event_sync
from app.core.record_store import RecordStore
from app.core.topics import KafkaTopics

__all__ = [
    "settings",
    "FieldEncryptor",
    "get_encryptor",
    "RecordStore",
    # Errors
    "ServiceError",
    "ValidationError",
    "NotFoundOrInactive",
    "Forbidden",
    "Conflict",
    "InternalError",
    # Events
    "EventType",
    "EventEnvelope",
    "create_event",
    "KafkaTopics",
    "KafkaProducer",
    "KafkaConsumer",
    "publish_event_sync",
]
