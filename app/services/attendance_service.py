"""
Attendance records: one per employee per calendar day.

Stored beside the employee's sections as ``EMPLOYEE#<id>`` /
``ATTENDANCE#<YYYY-MM-DD>``; neither the employee aggregate nor the change
detector look at them.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from app.core.config import settings
from app.core.encryption import FieldEncryptor, get_encryptor
from app.core.exceptions import (
    Conflict,
    Forbidden,
    InternalError,
    NotFoundOrInactive,
    ValidationError,
)
from app.core.logging import get_logger
from app.core.record_store import Condition, ConditionalCheckFailed, RecordStore, StoreError
from app.core.schema import SORT_KEY, STATUS_FIELD, EmployeeStatus, Section, employee_pk

logger = get_logger(__name__)


def parse_timestamp(value: Any, field: str) -> datetime:
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Bad Request: Invalid format for '{field}'. Please use ISO 8601.")


def attendance_date(check_in: datetime) -> str:
    """Calendar day (UTC for zone-aware timestamps) the record is filed under."""
    if check_in.tzinfo is not None:
        check_in = check_in.astimezone(timezone.utc)
    return check_in.date().isoformat()


def total_break_minutes(breaks: list[dict[str, Any]]) -> float:
    total = 0.0
    for period in breaks:
        if not isinstance(period, dict) or not period.get("start") or not period.get("end"):
            continue
        start = parse_timestamp(period["start"], "breaks.start")
        end = parse_timestamp(period["end"], "breaks.end")
        total += (end - start).total_seconds() / 60
    return total


class AttendanceService:
    def __init__(self, store: RecordStore, encryptor: Optional[FieldEncryptor] = None):
        self.store = store
        self.encryptor = encryptor or get_encryptor()

    def _load_employee(self, employee_id: str) -> tuple[dict[str, Any], dict[str, Any]]:
        try:
            items = self.store.query(employee_pk(employee_id))
        except StoreError as e:
            raise InternalError(str(e)) from e

        by_section = {Section.from_sort_key(item[SORT_KEY]): item for item in items}
        personal = by_section.get(Section.PERSONAL_DATA)
        contract = by_section.get(Section.CONTRACT_DETAILS)

        if personal is None and contract is None:
            logger.warning(f"Attendance rejected: employee {employee_id} not found")
            raise NotFoundOrInactive()
        if personal is None or contract is None:
            logger.error(f"Data integrity issue for employee {employee_id}: missing core sections")
            raise InternalError("Incomplete employee record found.")

        status = personal.get(STATUS_FIELD)
        if status != EmployeeStatus.ACTIVE.value:
            logger.warning(f"Attendance rejected: employee {employee_id} is {status}")
            raise Forbidden(f"Cannot create attendance for an employee with status: {status}.")
        return personal, contract

    def create(self, employee_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        Record a day of attendance.

        Raises:
            ValidationError: A broken business rule
            NotFoundOrInactive: No such employee
            Forbidden: Employee is not ACTIVE
            Conflict: A record already exists for that day
        """
        _, contract = self._load_employee(employee_id)

        check_in = parse_timestamp(body["checkInTime"], "checkInTime")
        check_out = parse_timestamp(body["checkOutTime"], "checkOutTime")
        try:
            worked_hours = (check_out - check_in).total_seconds() / 3600
        except TypeError:
            raise ValidationError("checkInTime and checkOutTime must use the same timezone style.")

        if worked_hours < 0:
            raise ValidationError("checkOutTime must be after checkInTime.")
        if worked_hours > settings.MAX_WORK_HOURS:
            raise ValidationError(
                f"Total work duration cannot exceed {settings.MAX_WORK_HOURS:g} hours."
            )

        breaks = body.get("breaks") or []
        if breaks and total_break_minutes(breaks) < settings.MIN_BREAK_MINUTES:
            raise ValidationError(
                f"Total break time must be at least {settings.MIN_BREAK_MINUTES:g} minutes."
            )

        if contract.get("allowRemoteWork") is False and not body.get("location"):
            raise ValidationError("Location data is required for office-based work.")

        overtime_hours = max(0.0, body["totalHours"] - settings.STANDARD_WORK_HOURS)

        attendance_id = str(uuid4())
        day = attendance_date(check_in)
        item = {
            "attendanceId": attendance_id,
            "formType": "ATTENDANCE",
            "employeeId": employee_id,
            "checkInTime": body["checkInTime"],
            "checkOutTime": body["checkOutTime"],
            "wbsCode": body["wbsCode"],
            "costCenter": body["costCenter"],
            "projectCode": body["projectCode"],
            "taskCategory": body["taskCategory"],
            "location": self.encryptor.encrypt(body["location"]) if body.get("location") else None,
            "breaks": breaks,
            "totalHours": body["totalHours"],
            "overtimeHours": overtime_hours,
            "notes": self.encryptor.encrypt(body["notes"]) if body.get("notes") else None,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }

        try:
            self.store.put_item(
                employee_pk(employee_id),
                f"ATTENDANCE#{day}",
                item,
                condition=Condition.item_absent(),
            )
        except ConditionalCheckFailed as e:
            raise Conflict(
                "An attendance record for this employee on this date already exists."
            ) from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"Attendance {attendance_id} recorded for employee {employee_id} on {day}")
        return {
            "message": "Attendance record created successfully.",
            "attendanceId": attendance_id,
            "overtimeHours": overtime_hours,
        }
