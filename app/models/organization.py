"""
Organization API models.

Departments, positions, org units and job classifications are single
``ORG#<TYPE>#<id>`` / ``METADATA`` records. These are their input schemas
and read shapes.
"""

from typing import Any, Optional

from sqlmodel import Field, SQLModel


class Department(SQLModel):
    departmentId: str
    departmentName: Optional[str] = None
    departmentCode: Any = None
    departmentType: Any = None
    costCenter: Any = None
    departmentManager: Any = None
    description: Optional[str] = ""
    parentDepartment: Optional[str] = None
    organizationLevel: Any = None
    allowSubDepartments: Any = None
    maximumPositions: Any = None
    reportingStructure: Any = None
    budgetControl: Any = None
    comments: Optional[str] = ""
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None


class Position(SQLModel):
    positionId: str
    positionTitle: Any = None
    positionCode: Any = None
    department: Any = None
    positionLevel: Any = None
    employmentType: Any = None
    reportsTo: Any = None
    positionDescription: Optional[str] = ""
    education: Any = None
    skills: Any = None
    certifications: Any = None
    salaryGrade: Any = None
    competencyLevel: Any = None
    comments: Optional[str] = ""
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None


class OrgUnit(SQLModel):
    unitId: str
    departmentId: Optional[str] = None
    unitName: Optional[str] = None
    effectiveDate: Any = None
    description: Optional[str] = None
    costCenterInfo: Any = None
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None


class JobClassification(SQLModel):
    jobClassificationId: str
    jobFamily: Any = None
    jobTitle: Any = None
    payScale: Any = None
    responsibilities: Optional[str] = ""
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None


class DepartmentResponse(SQLModel):
    department: Department


class PositionResponse(SQLModel):
    position: Position


class OrgUnitResponse(SQLModel):
    orgUnit: OrgUnit


class JobClassificationResponse(SQLModel):
    jobClassification: JobClassification


# Request Schemas


class DepartmentCreate(SQLModel):
    departmentName: str = Field(min_length=1)
    departmentCode: str = Field(min_length=1)
    departmentType: str = Field(min_length=1)
    costCenter: str = Field(min_length=1)
    departmentManager: str = Field(min_length=1)
    organizationLevel: int
    allowSubDepartments: bool
    maximumPositions: int
    reportingStructure: str = Field(min_length=1)
    budgetControl: str = Field(min_length=1)
    description: Optional[str] = None
    parentDepartment: Optional[str] = None
    comments: Optional[str] = None


class PositionCreate(SQLModel):
    positionTitle: str = Field(min_length=1)
    positionCode: str = Field(min_length=1)
    department: str = Field(min_length=1)
    positionLevel: str = Field(min_length=1)
    employmentType: str = Field(min_length=1)
    reportsTo: str = Field(min_length=1)
    education: str = Field(min_length=1)
    skills: list[str]
    certifications: list[str]
    salaryGrade: str = Field(min_length=1)
    competencyLevel: str = Field(min_length=1)
    positionDescription: Optional[str] = None
    comments: Optional[str] = None


class OrgUnitCreate(SQLModel):
    unitName: str = Field(min_length=1)
    effectiveDate: str = Field(min_length=1)
    description: str = Field(min_length=1)


class JobClassificationCreate(SQLModel):
    jobFamily: str = Field(min_length=1)
    jobTitle: str = Field(min_length=1)
    payScale: str = Field(min_length=1)
    responsibilities: Optional[str] = None
