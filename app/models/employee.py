"""
Employee API models.

An employee is persisted as three record-store sections (see
``app.core.schema``). The request schemas validate a section body, or all
three for a full create / replace; the response shapes are assembled from
the stored sections.
Values are whatever the client stored, so classification fields are typed
loosely. A field whose ciphertext cannot be decrypted is returned as null.
"""

from typing import Any, Optional

from pydantic import EmailStr, field_validator
from pydantic_core import PydanticCustomError
from sqlmodel import Field, SQLModel

from app.core.validation import DATE_OF_BIRTH_MESSAGE, is_valid_date


class PersonalData(SQLModel):
    """Personal data section as returned to clients (``status`` is not exposed)."""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    middleName: Optional[str] = ""
    preferredName: Optional[str] = ""
    nationalId: Optional[str] = None
    dateOfBirth: Any = None
    age: Any = None
    gender: Any = None
    nationality: Any = None
    maritalStatus: Any = None


class EmergencyContact(SQLModel):
    name: Optional[str] = ""
    phone: Optional[str] = ""
    relationship: Optional[str] = ""


class ContactInfo(SQLModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    altPhone: Optional[str] = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    country: Optional[str] = None
    emergencyContact: EmergencyContact = EmergencyContact()


class ContractDetails(SQLModel):
    role: Any = None
    department: Any = None
    jobLevel: Any = None
    contractType: Any = None
    salaryGrade: Any = None
    salaryPay: Any = None
    allowance: Any = None  # null when never set, to tell it apart from 0
    allowRemoteWork: Optional[bool] = None


class EmployeeDetail(SQLModel):
    personalData: PersonalData
    contactInfo: ContactInfo
    contractDetails: ContractDetails


class EmployeeResponse(SQLModel):
    """Output schema for a full employee read."""

    employee: EmployeeDetail


class PersonalDataResponse(SQLModel):
    personalData: PersonalData


class ContactInfoResponse(SQLModel):
    contactInfo: ContactInfo


class ContractDetailsResponse(SQLModel):
    contractDetails: ContractDetails


class EmployeeCreatedResponse(SQLModel):
    message: str
    employeeId: str


class MessageResponse(SQLModel):
    message: str


# Request Schemas


class PersonalDataUpdate(SQLModel):
    """Input schema for the personal data section."""

    firstName: str = Field(min_length=1)
    lastName: str = Field(min_length=1)
    middleName: Optional[str] = None
    preferredName: Optional[str] = None
    nationalId: str = Field(min_length=1)
    dateOfBirth: str = Field(min_length=1)
    age: int
    gender: str = Field(min_length=1)
    nationality: str = Field(min_length=1)
    maritalStatus: str = Field(min_length=1)

    @field_validator("dateOfBirth")
    @classmethod
    def check_date_of_birth(cls, value: str) -> str:
        if not is_valid_date(value):
            raise PydanticCustomError("date_format", DATE_OF_BIRTH_MESSAGE)
        return value


class EmergencyContactInput(SQLModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class ContactInfoUpdate(SQLModel):
    """Input schema for the contact info section."""

    email: EmailStr
    phone: str = Field(min_length=1)
    altPhone: Optional[str] = None
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postalCode: str = Field(min_length=1)
    country: str = Field(min_length=1)
    emergencyContact: Optional[EmergencyContactInput] = None


class ContractDetailsUpdate(SQLModel):
    """Input schema for the contract details section."""

    role: str = Field(min_length=1)
    department: str = Field(min_length=1)
    jobLevel: str = Field(min_length=1)
    contractType: str = Field(min_length=1)
    salaryGrade: str = Field(min_length=1)
    salaryPay: float
    allowance: Optional[float] = None
    allowRemoteWork: Optional[bool] = None


class EmployeeCreate(ContractDetailsUpdate, ContactInfoUpdate, PersonalDataUpdate):
    """
    Input schema for a full create or replace.

    Fields are collected base-last, so errors are reported in section order:
    personal data, contact info, contract details.
    """
