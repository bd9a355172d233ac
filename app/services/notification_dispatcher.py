"""
Notification dispatcher.

Consumes change events from Kafka, decrypts the fields that are stored
encrypted, and emails the employee and/or the HR administrator.

Per-field decryption failure is the only contained error. Anything else
(bad payload, unknown event type, mail failure) is raised so the consumer
redelivers the message and eventually dead-letters it.
"""

from typing import Any, Optional

from app.core.config import settings
from app.core.encryption import FieldEncryptor, get_encryptor
from app.core.events import EventEnvelope, NotificationType, UpdateEvent, WelcomeEvent
from app.core.exceptions import DecryptionError
from app.core.logging import get_logger
from app.core.schema import is_encrypted_field
from app.services.mailer import SesMailer

logger = get_logger(__name__)

DECRYPTION_ERROR_MARKER = "[Decryption Error]"
EMPTY_VALUE_MARKER = "N/A"


class UnknownEventType(ValueError):
    """Raised for a payload whose ``type`` is neither WELCOME nor UPDATE."""


class NotificationDispatcher:
    def __init__(
        self,
        mailer: Optional[SesMailer] = None,
        encryptor: Optional[FieldEncryptor] = None,
        admin_email: Optional[str] = None,
    ):
        self.mailer = mailer or SesMailer()
        self.encryptor = encryptor or get_encryptor()
        self.admin_email = settings.HR_ADMIN_EMAIL if admin_email is None else admin_email

    def handle(self, event_data: dict[str, Any]) -> None:
        """Kafka handler: ``event_data`` is a decoded event envelope."""
        envelope = EventEnvelope.model_validate(event_data)
        payload_type = envelope.data.get("type")

        if payload_type == NotificationType.WELCOME.value:
            self.send_welcome(WelcomeEvent.model_validate(envelope.data))
        elif payload_type == NotificationType.UPDATE.value:
            self.send_update(UpdateEvent.model_validate(envelope.data))
        else:
            raise UnknownEventType(f"Unknown notification type {payload_type!r} in {envelope.event_id}")

    # =========================================================================
    # WELCOME
    # =========================================================================

    def send_welcome(self, event: WelcomeEvent) -> None:
        email = self.encryptor.decrypt(event.email)
        first_name = self.encryptor.decrypt(event.firstName)
        last_name = self.encryptor.decrypt(event.lastName)

        if email:
            self.mailer.send(
                to=email,
                subject=f"Welcome to the Company, {first_name}!",
                body=(
                    f"Dear {first_name},\n\n"
                    "Welcome to the team! We are thrilled to have you join us. "
                    "Your onboarding process will begin shortly.\n\n"
                    "Best regards,\nThe HR Team"
                ),
            )
            logger.info(f"Welcome email sent for employee {event.employeeId}")
        else:
            logger.warning(f"Employee {event.employeeId} has no email address, welcome email skipped")

        if self.admin_email:
            self.mailer.send(
                to=self.admin_email,
                subject=f"New Employee Created: {first_name} {last_name}",
                body=(
                    "This is a notification that a new employee has been successfully "
                    "created in the system.\n\n"
                    f"Employee Details:\nName: {first_name} {last_name}\n"
                    f"Employee ID: {event.employeeId}\n"
                    f"Role: {event.role}\nDepartment: {event.department}\n"
                    f"Job Level: {event.jobLevel}\n\n"
                    "This is an automated message."
                ),
            )
            logger.info(f"Admin notified of new employee {event.employeeId}")

    # =========================================================================
    # UPDATE
    # =========================================================================

    def _decrypt_for_display(self, value: Any) -> str:
        if value is None or value == "":
            return EMPTY_VALUE_MARKER
        return self.encryptor.decrypt(value)

    def format_changes(self, event: UpdateEvent) -> list[str]:
        """
        Render one line per real change.

        Encrypted fields are decrypted first. A field whose decrypted values
        are equal was only re-encrypted and is left out.
        """
        lines = []
        for field_path, change in event.changedFields.items():
            old_value, new_value = change.old, change.new

            if is_encrypted_field(field_path):
                try:
                    old_value = self._decrypt_for_display(change.old)
                    new_value = self._decrypt_for_display(change.new)
                except DecryptionError as e:
                    logger.error(
                        f"Decryption failed for field {field_path} of employee {event.employeeId}: {e}"
                    )
                    old_value = new_value = DECRYPTION_ERROR_MARKER
                else:
                    if old_value == new_value:
                        continue

            lines.append(f'- {field_path}: "{old_value}" → "{new_value}"')
        return lines

    def send_update(self, event: UpdateEvent) -> None:
        lines = self.format_changes(event)
        if not lines:
            logger.info(f"No reportable changes for employee {event.employeeId}, skipping email")
            return

        if not self.admin_email:
            logger.warning(
                f"HR_ADMIN_EMAIL not configured, update notification for {event.employeeId} skipped"
            )
            return

        self.mailer.send(
            to=self.admin_email,
            subject=f"Employee Record Updated: {event.employeeId}",
            body=(
                "Hello Admin,\n\nAn existing employee record has been updated.\n\n"
                f"Employee ID: {event.employeeId}\n\nChanged Fields:\n"
                + "\n".join(lines)
                + "\n\nThis is an automated notification."
            ),
        )
        logger.info(f"Update notification sent for employee {event.employeeId} ({len(lines)} field(s))")
