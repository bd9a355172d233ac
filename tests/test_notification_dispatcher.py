"""
Tests for the notification dispatcher.
"""
import pytest

from app.core.events import EventType, UpdateEvent, WelcomeEvent, create_event
from app.services.notification_dispatcher import (
    DECRYPTION_ERROR_MARKER,
    NotificationDispatcher,
    UnknownEventType,
)

ADMIN = "hr-admin@example.com"


@pytest.fixture
def dispatcher(mock_mailer, encryptor):
    return NotificationDispatcher(mailer=mock_mailer, encryptor=encryptor, admin_email=ADMIN)


def _welcome(encryptor, email="jane@example.com"):
    event = WelcomeEvent(
        employeeId="e1",
        firstName=encryptor.encrypt("Jane"),
        lastName=encryptor.encrypt("Doe"),
        email=encryptor.encrypt(email),
        role="Engineer",
        department="Engineering",
        jobLevel="L3",
    )
    return create_event(EventType.EMPLOYEE_WELCOME, event).model_dump(mode="json")


def _update(changed_fields):
    event = UpdateEvent(employeeId="e1", changedFields=changed_fields)
    return create_event(EventType.EMPLOYEE_UPDATED, event).model_dump(mode="json")


class TestWelcome:
    def test_employee_and_admin_are_emailed(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(_welcome(encryptor))

        assert mock_mailer.send.call_count == 2
        employee_mail, admin_mail = mock_mailer.send.call_args_list
        assert employee_mail.kwargs["to"] == "jane@example.com"
        assert employee_mail.kwargs["subject"] == "Welcome to the Company, Jane!"
        assert "Dear Jane," in employee_mail.kwargs["body"]
        assert admin_mail.kwargs["to"] == ADMIN
        assert admin_mail.kwargs["subject"] == "New Employee Created: Jane Doe"
        assert "Employee ID: e1" in admin_mail.kwargs["body"]

    def test_empty_email_skips_employee_mail(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(_welcome(encryptor, email=""))

        mock_mailer.send.assert_called_once()
        assert mock_mailer.send.call_args.kwargs["to"] == ADMIN

    def test_no_admin_configured(self, mock_mailer, encryptor):
        dispatcher = NotificationDispatcher(mailer=mock_mailer, encryptor=encryptor, admin_email="")
        dispatcher.handle(_welcome(encryptor))

        mock_mailer.send.assert_called_once()
        assert mock_mailer.send.call_args.kwargs["to"] == "jane@example.com"

    def test_mail_failure_propagates(self, dispatcher, mock_mailer, encryptor):
        mock_mailer.send.side_effect = RuntimeError("SES throttled")
        with pytest.raises(RuntimeError):
            dispatcher.handle(_welcome(encryptor))


class TestUpdate:
    def test_selective_decryption(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(
            _update(
                {
                    "contact info.email": {
                        "old": encryptor.encrypt("a@x.com"),
                        "new": encryptor.encrypt("b@x.com"),
                    },
                    "contract details.role": {"old": "Engineer", "new": "Lead"},
                }
            )
        )

        mock_mailer.send.assert_called_once()
        mail = mock_mailer.send.call_args.kwargs
        assert mail["to"] == ADMIN
        assert mail["subject"] == "Employee Record Updated: e1"
        assert '- contact info.email: "a@x.com" → "b@x.com"' in mail["body"]
        assert '- contract details.role: "Engineer" → "Lead"' in mail["body"]

    def test_reencrypted_identical_value_is_omitted(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(
            _update(
                {
                    "personal data.firstName": {
                        "old": encryptor.encrypt("Jane"),
                        "new": encryptor.encrypt("Jane"),
                    },
                    "contact info.city": {
                        "old": encryptor.encrypt("Nairobi"),
                        "new": encryptor.encrypt("Mombasa"),
                    },
                }
            )
        )

        body = mock_mailer.send.call_args.kwargs["body"]
        assert "firstName" not in body
        assert '"Nairobi" → "Mombasa"' in body

    def test_nothing_to_report_sends_nothing(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(
            _update(
                {"contact info.phone": {"old": encryptor.encrypt("1"), "new": encryptor.encrypt("1")}}
            )
        )
        mock_mailer.send.assert_not_called()

    def test_empty_values_render_as_not_available(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(
            _update({"contact info.altPhone": {"old": None, "new": encryptor.encrypt("555")}})
        )
        assert '- contact info.altPhone: "N/A" → "555"' in mock_mailer.send.call_args.kwargs["body"]

    def test_decryption_failure_is_contained(self, dispatcher, mock_mailer, encryptor):
        dispatcher.handle(
            _update(
                {
                    "contact info.email": {"old": "garbage", "new": encryptor.encrypt("b@x.com")},
                    "contract details.salaryGrade": {"old": "G5", "new": "G6"},
                }
            )
        )

        body = mock_mailer.send.call_args.kwargs["body"]
        assert (
            f'- contact info.email: "{DECRYPTION_ERROR_MARKER}" → "{DECRYPTION_ERROR_MARKER}"'
            in body
        )
        assert '- contract details.salaryGrade: "G5" → "G6"' in body

    def test_plaintext_fields_are_not_decrypted(self, dispatcher, mock_mailer):
        dispatcher.handle(_update({"personal data.status": {"old": "ACTIVE", "new": "INACTIVE"}}))
        assert '"ACTIVE" → "INACTIVE"' in mock_mailer.send.call_args.kwargs["body"]


class TestMalformedMessages:
    def test_unknown_type_raises(self, dispatcher):
        envelope = _update({})
        envelope["data"]["type"] = "SOMETHING_ELSE"
        with pytest.raises(UnknownEventType):
            dispatcher.handle(envelope)

    def test_missing_envelope_fields_raise(self, dispatcher):
        with pytest.raises(Exception):
            dispatcher.handle({"data": {"type": "UPDATE"}})

    def test_mail_failure_on_update_propagates(self, dispatcher, mock_mailer):
        mock_mailer.send.side_effect = [RuntimeError("SES down")]
        with pytest.raises(RuntimeError):
            dispatcher.handle(_update({"contract details.role": {"old": "a", "new": "b"}}))
        assert mock_mailer.send.call_args.kwargs["to"] == ADMIN
