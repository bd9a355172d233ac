"""
HR Personnel Service Models.

Exports all model classes for easy importing.
"""

from app.models.attendance import AttendanceCreate, AttendanceCreatedResponse, BreakPeriod
from app.models.employee import (
    ContactInfo,
    ContactInfoResponse,
    ContactInfoUpdate,
    ContractDetails,
    ContractDetailsResponse,
    ContractDetailsUpdate,
    EmergencyContact,
    EmergencyContactInput,
    EmployeeCreate,
    EmployeeCreatedResponse,
    EmployeeDetail,
    EmployeeResponse,
    MessageResponse,
    PersonalData,
    PersonalDataResponse,
    PersonalDataUpdate,
)
from app.models.organization import (
    Department,
    DepartmentCreate,
    DepartmentResponse,
    JobClassification,
    JobClassificationCreate,
    JobClassificationResponse,
    OrgUnit,
    OrgUnitCreate,
    OrgUnitResponse,
    Position,
    PositionCreate,
    PositionResponse,
)
from app.models.record import (
    STORE_TABLES,
    ChangeEventName,
    FeedCheckpoint,
    FeedHead,
    RecordChange,
    RecordItem,
)

__all__ = [
    # Database Models
    "RecordItem",
    "RecordChange",
    "FeedHead",
    "FeedCheckpoint",
    "ChangeEventName",
    "STORE_TABLES",
    # Employee Request Schemas
    "EmployeeCreate",
    "PersonalDataUpdate",
    "ContactInfoUpdate",
    "EmergencyContactInput",
    "ContractDetailsUpdate",
    # Employee Response Schemas
    "PersonalData",
    "ContactInfo",
    "EmergencyContact",
    "ContractDetails",
    "EmployeeDetail",
    "EmployeeResponse",
    "PersonalDataResponse",
    "ContactInfoResponse",
    "ContractDetailsResponse",
    "EmployeeCreatedResponse",
    "MessageResponse",
    # Organization Request Schemas
    "DepartmentCreate",
    "PositionCreate",
    "OrgUnitCreate",
    "JobClassificationCreate",
    # Organization Response Schemas
    "Department",
    "Position",
    "OrgUnit",
    "JobClassification",
    "DepartmentResponse",
    "PositionResponse",
    "OrgUnitResponse",
    "JobClassificationResponse",
    # Attendance
    "AttendanceCreate",
    "BreakPeriod",
    "AttendanceCreatedResponse",
]
