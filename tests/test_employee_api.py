"""
Tests for the employee endpoints and the aggregate behind them.
"""
import pytest

from app.core.schema import ENCRYPTED_FIELDS, Section, employee_pk
from app.core.topics import KafkaTopics

BASE = "/api/v1/employees"


class TestCreateEmployee:
    def test_create_writes_three_encrypted_sections(self, client, employee_payload, store, encryptor):
        response = client.post(BASE, json=employee_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Employee created successfully."
        employee_id = body["employeeId"]

        items = {item["SK"]: item for item in store.query(employee_pk(employee_id))}
        assert set(items) == {section.sort_key for section in Section}

        personal = items[Section.PERSONAL_DATA.sort_key]
        contact = items[Section.CONTACT_INFO.sort_key]
        assert personal["status"] == "ACTIVE"
        assert personal["firstName"] != "Jane"
        assert encryptor.decrypt(personal["firstName"]) == "Jane"
        assert encryptor.decrypt(contact["emergencyContactName"]) == "John Doe"
        assert items[Section.CONTRACT_DETAILS.sort_key]["role"] == "Engineer"
        # Optional fields that were not sent are not stored
        assert "middleName" not in personal
        assert "allowance" not in items[Section.CONTRACT_DETAILS.sort_key]

    def test_missing_required_field(self, client, employee_payload):
        del employee_payload["nationalId"]
        response = client.post(BASE, json=employee_payload)
        assert response.status_code == 400
        assert response.json() == {
            "message": "Bad Request: Missing or empty required field 'nationalId'."
        }

    def test_invalid_date_of_birth(self, client, employee_payload):
        response = client.post(BASE, json={**employee_payload, "dateOfBirth": "1990-04-15"})
        assert response.status_code == 400
        assert "MM/DD/YYYY" in response.json()["message"]

    def test_malformed_json(self, client):
        response = client.post(BASE, content=b"{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid JSON in request body."}

    def test_empty_body(self, client):
        response = client.post(BASE, content=b"")
        assert response.status_code == 400
        assert response.json() == {"message": "Request body is missing or empty."}

    def test_body_that_is_not_an_object(self, client):
        response = client.post(BASE, json=["firstName", "Jane"])
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid JSON in request body."}

    def test_wrongly_typed_value(self, client, employee_payload):
        response = client.post(BASE, json={**employee_payload, "age": "thirty"})
        assert response.status_code == 400
        assert response.json() == {"message": "Bad Request: Invalid value for 'age'."}

    def test_rejected_body_writes_nothing(self, client, employee_payload, store):
        client.post(BASE, json={**employee_payload, "email": ""})
        assert store.read_changes("reader", 10) == []


class TestGetEmployee:
    def test_get_returns_decrypted_nested_employee(self, client, create_employee):
        employee_id = create_employee()

        response = client.get(f"{BASE}/{employee_id}")

        assert response.status_code == 200
        employee = response.json()["employee"]
        assert employee["personalData"]["firstName"] == "Jane"
        assert employee["personalData"]["middleName"] == ""
        assert employee["personalData"]["preferredName"] == ""
        assert "status" not in employee["personalData"]
        assert employee["contactInfo"]["email"] == "jane.doe@example.com"
        assert employee["contactInfo"]["altPhone"] == ""
        assert employee["contactInfo"]["emergencyContact"] == {
            "name": "John Doe",
            "phone": "+254700000002",
            "relationship": "Brother",
        }
        assert employee["contractDetails"]["salaryPay"] == 5000
        assert employee["contractDetails"]["allowance"] is None

    def test_unknown_employee(self, client):
        response = client.get(f"{BASE}/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"message": "Employee not found."}

    def test_undecryptable_field_reads_as_null(self, client, create_employee, store):
        employee_id = create_employee()
        store.update_item(employee_pk(employee_id), Section.CONTACT_INFO.sort_key, {"city": "plain"})

        response = client.get(f"{BASE}/{employee_id}")

        assert response.status_code == 200
        assert response.json()["employee"]["contactInfo"]["city"] is None
        assert response.json()["employee"]["contactInfo"]["country"] == "Kenya"

    def test_get_single_section(self, client, create_employee):
        employee_id = create_employee(middleName="Ann")

        personal = client.get(f"{BASE}/{employee_id}/personal-data").json()
        contract = client.get(f"{BASE}/{employee_id}/contract-details").json()
        contact = client.get(f"{BASE}/{employee_id}/contact-info").json()

        assert personal["personalData"]["middleName"] == "Ann"
        assert contract["contractDetails"]["jobLevel"] == "L3"
        assert contact["contactInfo"]["phone"] == "+254700000001"


class TestUpdateEmployee:
    def test_full_update_replaces_sections(self, client, create_employee, employee_payload):
        employee_id = create_employee(altPhone="+254700000009")

        response = client.put(
            f"{BASE}/{employee_id}", json={**employee_payload, "city": "Mombasa", "jobLevel": "L4"}
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Employee updated successfully."}
        employee = client.get(f"{BASE}/{employee_id}").json()["employee"]
        assert employee["contactInfo"]["city"] == "Mombasa"
        assert employee["contractDetails"]["jobLevel"] == "L4"
        # Full replace drops optional fields left out of the body
        assert employee["contactInfo"]["altPhone"] == ""

    def test_full_update_of_unknown_employee(self, client, employee_payload, store):
        response = client.put(f"{BASE}/missing", json=employee_payload)
        assert response.status_code == 404
        assert store.query(employee_pk("missing")) == []

    def test_full_update_validates_first(self, client, create_employee, employee_payload):
        employee_id = create_employee()
        del employee_payload["role"]
        response = client.put(f"{BASE}/{employee_id}", json=employee_payload)
        assert response.status_code == 400

    def test_partial_contact_update(self, client, create_employee, employee_payload):
        employee_id = create_employee()
        contact = {
            field: employee_payload[field]
            for field in ("email", "phone", "address", "city", "state", "postalCode", "country")
        }

        response = client.put(
            f"{BASE}/{employee_id}/contact-info",
            json={**contact, "email": "jane@new.example.com", "emergencyContact": {"name": "Mary"}},
        )

        assert response.status_code == 200
        info = client.get(f"{BASE}/{employee_id}/contact-info").json()["contactInfo"]
        assert info["email"] == "jane@new.example.com"
        assert info["emergencyContact"]["name"] == "Mary"
        assert info["emergencyContact"]["relationship"] == "Brother"

    def test_partial_update_requires_section_fields(self, client, create_employee):
        employee_id = create_employee()
        response = client.put(f"{BASE}/{employee_id}/contract-details", json={"role": "Lead"})
        assert response.status_code == 400
        assert "'department'" in response.json()["message"]

    def test_personal_update_cannot_change_status(self, client, create_employee, employee_payload, store):
        employee_id = create_employee()
        personal = {
            field: employee_payload[field]
            for field in (
                "firstName", "lastName", "nationalId", "dateOfBirth",
                "age", "gender", "nationality", "maritalStatus",
            )
        }

        response = client.put(
            f"{BASE}/{employee_id}/personal-data", json={**personal, "status": "INACTIVE"}
        )

        assert response.status_code == 200
        item = store.get_item(employee_pk(employee_id), Section.PERSONAL_DATA.sort_key)
        assert item["status"] == "ACTIVE"

    def test_partial_update_of_inactive_employee_leaves_section_untouched(
        self, client, create_employee, store
    ):
        employee_id = create_employee()
        client.delete(f"{BASE}/{employee_id}")
        before = store.get_item(employee_pk(employee_id), Section.CONTRACT_DETAILS.sort_key)

        response = client.put(
            f"{BASE}/{employee_id}/contract-details",
            json={
                "role": "Lead", "department": "Ops", "jobLevel": "L5",
                "contractType": "Permanent", "salaryGrade": "G6", "salaryPay": 7000,
            },
        )

        assert response.status_code == 404
        store.session.expire_all()
        assert store.get_item(employee_pk(employee_id), Section.CONTRACT_DETAILS.sort_key) == before


class TestDeleteEmployee:
    def test_soft_delete_hides_employee(self, client, create_employee, store):
        employee_id = create_employee()

        response = client.delete(f"{BASE}/{employee_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Employee deactivated successfully."}
        assert client.get(f"{BASE}/{employee_id}").status_code == 404
        assert client.get(f"{BASE}/{employee_id}/contact-info").status_code == 404
        # Soft delete keeps every section
        assert len(store.query(employee_pk(employee_id))) == 3

    def test_second_delete_is_rejected(self, client, create_employee):
        employee_id = create_employee()
        assert client.delete(f"{BASE}/{employee_id}").status_code == 200
        assert client.delete(f"{BASE}/{employee_id}").status_code == 404

    def test_delete_unknown_employee(self, client):
        assert client.delete(f"{BASE}/missing").status_code == 404

    def test_update_after_delete_is_rejected(self, client, create_employee, employee_payload, store):
        employee_id = create_employee()
        client.delete(f"{BASE}/{employee_id}")
        before = store.query(employee_pk(employee_id))

        response = client.put(
            f"{BASE}/{employee_id}", json={**employee_payload, "firstName": "Janet", "city": "Mombasa"}
        )

        assert response.status_code == 404
        store.session.expire_all()
        assert store.query(employee_pk(employee_id)) == before


def test_every_sensitive_field_is_stored_encrypted(client, create_employee, store, encryptor, employee_payload):
    employee_id = create_employee()
    merged = {}
    for item in store.query(employee_pk(employee_id)):
        merged.update(item)

    for field in ENCRYPTED_FIELDS - {"middleName", "altPhone"}:
        assert field in merged, field
        assert encryptor.decrypt(merged[field]) != merged[field]


class TestChangeNotifications:
    """Writes made through the API, observed by the change detector."""

    PERSONAL_FIELDS = (
        "firstName", "lastName", "nationalId", "dateOfBirth",
        "age", "gender", "nationality", "maritalStatus",
    )

    @staticmethod
    def _drain(detector) -> int:
        processed = 0
        while True:
            count = detector.run_once()
            if not count:
                return processed
            processed += count

    @staticmethod
    def _updates(published):
        return [event for topic, event, _ in published.events if topic == KafkaTopics.EMPLOYEE_UPDATED]

    @pytest.fixture
    def employee_id(self, create_employee, detector, published):
        employee_id = create_employee()
        self._drain(detector)
        published.events.clear()
        return employee_id

    def test_personal_update_reports_only_the_changed_field(
        self, client, employee_id, employee_payload, detector, published
    ):
        personal = {field: employee_payload[field] for field in self.PERSONAL_FIELDS}

        response = client.put(
            f"{BASE}/{employee_id}/personal-data", json={**personal, "firstName": "Janet"}
        )

        assert response.status_code == 200
        assert self._drain(detector) > 0
        updates = self._updates(published)
        assert len(updates) == 1
        assert set(updates[0].data["changedFields"]) == {"personal data.firstName"}

    def test_identical_full_rewrite_is_not_reported(
        self, client, employee_id, employee_payload, detector, published
    ):
        response = client.put(f"{BASE}/{employee_id}", json=employee_payload)

        assert response.status_code == 200
        assert self._drain(detector) > 0
        assert self._updates(published) == []

    def test_full_update_across_two_sections_is_one_notification(
        self, client, employee_id, employee_payload, detector, published
    ):
        response = client.put(
            f"{BASE}/{employee_id}", json={**employee_payload, "city": "Mombasa", "jobLevel": "L4"}
        )

        assert response.status_code == 200
        self._drain(detector)
        updates = self._updates(published)
        assert len(updates) == 1
        assert updates[0].data["employeeId"] == employee_id
        assert set(updates[0].data["changedFields"]) == {
            "contact info.city",
            "contract details.jobLevel",
        }
        assert updates[0].data["changedFields"]["contract details.jobLevel"] == {
            "old": "L3",
            "new": "L4",
        }
