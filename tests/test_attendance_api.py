"""
Tests for the attendance endpoint and its business rules.
"""
import pytest

from app.core.schema import Section, employee_pk

BASE = "/api/v1/employees"


@pytest.fixture
def attendance_payload():
    return {
        "checkInTime": "2024-05-01T08:00:00Z",
        "checkOutTime": "2024-05-01T18:00:00Z",
        "totalHours": 9.5,
        "taskCategory": "Development",
        "wbsCode": "WBS-12",
        "costCenter": "CC-100",
        "projectCode": "PRJ-7",
        "location": "Nairobi HQ",
        "breaks": [{"start": "2024-05-01T12:00:00Z", "end": "2024-05-01T12:30:00Z"}],
    }


def _post(client, employee_id, payload):
    return client.post(f"{BASE}/{employee_id}/attendance", json=payload)


def test_create_attendance(client, create_employee, attendance_payload, store, encryptor):
    employee_id = create_employee()

    response = _post(client, employee_id, attendance_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Attendance record created successfully."
    assert body["overtimeHours"] == 1.5

    item = store.get_item(employee_pk(employee_id), "ATTENDANCE#2024-05-01")
    assert item["attendanceId"] == body["attendanceId"]
    assert encryptor.decrypt(item["location"]) == "Nairobi HQ"
    assert item["notes"] is None


def test_no_overtime_under_standard_hours(client, create_employee, attendance_payload):
    employee_id = create_employee()
    response = _post(client, employee_id, {**attendance_payload, "totalHours": 7})
    assert response.json()["overtimeHours"] == 0


def test_one_record_per_day(client, create_employee, attendance_payload):
    employee_id = create_employee()
    assert _post(client, employee_id, attendance_payload).status_code == 201

    response = _post(
        client,
        employee_id,
        {**attendance_payload, "checkInTime": "2024-05-01T09:00:00Z", "breaks": []},
    )

    assert response.status_code == 409


def test_unknown_employee(client, attendance_payload):
    response = _post(client, "missing", attendance_payload)
    assert response.status_code == 404
    assert response.json() == {"message": "Employee not found."}


def test_inactive_employee(client, create_employee, attendance_payload):
    employee_id = create_employee()
    client.delete(f"{BASE}/{employee_id}")

    response = _post(client, employee_id, attendance_payload)

    assert response.status_code == 403
    assert response.json() == {
        "message": "Cannot create attendance for an employee with status: INACTIVE."
    }


def test_incomplete_employee_record(client, store, attendance_payload):
    store.put_item(employee_pk("partial"), Section.PERSONAL_DATA.sort_key, {"status": "ACTIVE"})

    response = _post(client, "partial", attendance_payload)

    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error."}


def test_shift_longer_than_maximum(client, create_employee, attendance_payload):
    employee_id = create_employee()
    response = _post(
        client, employee_id, {**attendance_payload, "checkOutTime": "2024-05-01T21:00:00Z"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Total work duration cannot exceed 12 hours."}


def test_breaks_too_short(client, create_employee, attendance_payload):
    employee_id = create_employee()
    response = _post(
        client,
        employee_id,
        {
            **attendance_payload,
            "breaks": [{"start": "2024-05-01T12:00:00Z", "end": "2024-05-01T12:15:00Z"}],
        },
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Total break time must be at least 30 minutes."}


def test_breaks_are_optional(client, create_employee, attendance_payload):
    employee_id = create_employee()
    payload = {**attendance_payload}
    del payload["breaks"]
    assert _post(client, employee_id, payload).status_code == 201


def test_office_based_employee_needs_location(client, create_employee, attendance_payload):
    employee_id = create_employee(allowRemoteWork=False)
    payload = {**attendance_payload}
    del payload["location"]

    response = _post(client, employee_id, payload)

    assert response.status_code == 400
    assert response.json() == {"message": "Location data is required for office-based work."}


def test_remote_employee_without_location(client, create_employee, attendance_payload):
    employee_id = create_employee(allowRemoteWork=True)
    payload = {**attendance_payload}
    del payload["location"]
    assert _post(client, employee_id, payload).status_code == 201


def test_missing_required_field(client, create_employee, attendance_payload):
    employee_id = create_employee()
    del attendance_payload["wbsCode"]
    response = _post(client, employee_id, attendance_payload)
    assert response.status_code == 400
    assert "'wbsCode'" in response.json()["message"]
