"""Attendance API endpoints."""

from fastapi import APIRouter, status

from app.api.dependencies import StoreDep
from app.core.logging import get_logger
from app.models.attendance import AttendanceCreate, AttendanceCreatedResponse
from app.services.attendance_service import AttendanceService

logger = get_logger(__name__)

router = APIRouter(prefix="/employees", tags=["attendance"])


@router.post(
    "/{employee_id}/attendance",
    response_model=AttendanceCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_attendance(employee_id: str, attendance_in: AttendanceCreate, store: StoreDep):
    """
    Record one day of attendance for an active employee.

    Enforces the maximum shift length, the minimum total break time when
    breaks are given, and a location for office-based employees.
    """
    logger.info(f"Received request to create attendance for employee {employee_id}")
    body = attendance_in.model_dump(mode="json", exclude_unset=True)
    return AttendanceService(store).create(employee_id, body)
