"""
Event definitions for the HR Personnel Service.

Change events produced by the change detector and consumed by the
notification dispatcher. Each event travels inside an ``EventEnvelope``;
the envelope's ``data`` carries the notification payload:

- WELCOME: a new employee was created
- UPDATE: field-level changes to an existing employee, consolidated per batch

Sensitive values (names, email, changed encrypted fields) stay as stored
ciphertext inside events and are only decrypted by the dispatcher.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types produced by the HR Personnel Service."""

    EMPLOYEE_WELCOME = "employee.welcome"
    EMPLOYEE_UPDATED = "employee.updated"


class NotificationType(str, Enum):
    """Discriminator carried in the event payload itself."""

    WELCOME = "WELCOME"
    UPDATE = "UPDATE"


class EventMetadata(BaseModel):
    """Metadata attached to every event for tracing and correlation."""

    source_service: str = "hr-personnel-service"
    correlation_id: str = Field(default_factory=lambda: str(uuid4()))
    causation_id: Optional[str] = None
    trace_id: Optional[str] = None


class EventEnvelope(BaseModel):
    """
    Standard envelope for all events.
    Provides consistent structure for Kafka messages.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: EventType
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    version: str = "1.0"
    data: dict[str, Any]
    metadata: EventMetadata = Field(default_factory=EventMetadata)


# Notification Payloads


class WelcomeEvent(BaseModel):
    """Data for employee.welcome event. Name and email are ciphertext."""

    type: Literal["WELCOME"] = NotificationType.WELCOME.value
    employeeId: str
    firstName: str = ""
    lastName: str = ""
    role: Any = ""
    department: Any = ""
    jobLevel: Any = ""
    email: str = ""


class FieldChange(BaseModel):
    """Old and new stored value of one field. Absent values are None."""

    old: Any = None
    new: Any = None


class UpdateEvent(BaseModel):
    """Data for employee.updated event.

    ``changedFields`` is keyed by ``"<section name>.<field>"``, for example
    ``"contact info.email"``.
    """

    type: Literal["UPDATE"] = NotificationType.UPDATE.value
    employeeId: str
    changedFields: dict[str, FieldChange] = Field(default_factory=dict)


def create_event(
    event_type: EventType,
    data: BaseModel,
    correlation_id: Optional[str] = None,
    causation_id: Optional[str] = None,
) -> EventEnvelope:
    """
    Helper function to create an event envelope with proper metadata.

    Args:
        event_type: Type of the event
        data: Event data as a Pydantic model
        correlation_id: Optional correlation ID for tracing
        causation_id: Optional ID of what caused the event (e.g. feed sequence)

    Returns:
        EventEnvelope ready for publishing
    """
    metadata = EventMetadata(
        correlation_id=correlation_id or str(uuid4()),
        causation_id=causation_id,
    )

    return EventEnvelope(
        event_type=event_type,
        data=data.model_dump(mode="json"),
        metadata=metadata,
    )
