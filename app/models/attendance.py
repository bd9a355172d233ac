"""Attendance API models."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class BreakPeriod(SQLModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class AttendanceCreate(SQLModel):
    """Input schema for one day of attendance."""

    checkInTime: datetime
    checkOutTime: datetime
    totalHours: float
    taskCategory: str = Field(min_length=1)
    wbsCode: str = Field(min_length=1)
    costCenter: str = Field(min_length=1)
    projectCode: str = Field(min_length=1)
    location: Optional[str] = None
    notes: Optional[str] = None
    breaks: list[BreakPeriod] = []


class AttendanceCreatedResponse(SQLModel):
    message: str
    attendanceId: str
    overtimeHours: float
