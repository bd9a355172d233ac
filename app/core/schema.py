"""
Employee field schema.

The single source of truth for which section a field lives in, whether it is
required, whether it is encrypted at rest, and what it defaults to in a read
response. Validation, encryption, assembly, change detection and the
notification dispatcher all consume this table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Section(str, Enum):
    """Independently stored sections of an employee record."""

    PERSONAL_DATA = "PERSONAL_DATA"
    CONTACT_INFO = "CONTACT_INFO"
    CONTRACT_DETAILS = "CONTRACT_DETAILS"

    @property
    def sort_key(self) -> str:
        return f"SECTION#{self.value}"

    @property
    def display_name(self) -> str:
        """Human readable name used to prefix diffed field paths."""
        return self.value.lower().replace("_", " ")

    @classmethod
    def from_sort_key(cls, sort_key: str) -> "Section | None":
        prefix, _, name = sort_key.partition("#")
        if prefix != "SECTION":
            return None
        try:
            return cls(name)
        except ValueError:
            return None


class EmployeeStatus(str, Enum):
    """Lifecycle state, stored on the personal data section only."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    section: Section
    encrypted: bool = False
    required: bool = False
    default: Any = ""  # Response value when an optional field was never set


EMPLOYEE_FIELDS: tuple[FieldSpec, ...] = (
    # Personal Data
    FieldSpec("firstName", Section.PERSONAL_DATA, encrypted=True, required=True),
    FieldSpec("lastName", Section.PERSONAL_DATA, encrypted=True, required=True),
    FieldSpec("middleName", Section.PERSONAL_DATA, encrypted=True),
    FieldSpec("preferredName", Section.PERSONAL_DATA),
    FieldSpec("nationalId", Section.PERSONAL_DATA, encrypted=True, required=True),
    FieldSpec("dateOfBirth", Section.PERSONAL_DATA, required=True),
    FieldSpec("age", Section.PERSONAL_DATA, required=True),
    FieldSpec("gender", Section.PERSONAL_DATA, required=True),
    FieldSpec("nationality", Section.PERSONAL_DATA, required=True),
    FieldSpec("maritalStatus", Section.PERSONAL_DATA, required=True),
    # Contact Info
    FieldSpec("email", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("phone", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("altPhone", Section.CONTACT_INFO, encrypted=True),
    FieldSpec("address", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("city", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("state", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("postalCode", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("country", Section.CONTACT_INFO, encrypted=True, required=True),
    FieldSpec("emergencyContactName", Section.CONTACT_INFO, encrypted=True),
    FieldSpec("emergencyContactPhone", Section.CONTACT_INFO, encrypted=True),
    FieldSpec("emergencyContactRelationship", Section.CONTACT_INFO, encrypted=True),
    # Contract Details
    FieldSpec("role", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("department", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("jobLevel", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("contractType", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("salaryGrade", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("salaryPay", Section.CONTRACT_DETAILS, required=True),
    FieldSpec("allowance", Section.CONTRACT_DETAILS, default=None),
    FieldSpec("allowRemoteWork", Section.CONTRACT_DETAILS, default=None),
)

FIELDS_BY_NAME: dict[str, FieldSpec] = {spec.name: spec for spec in EMPLOYEE_FIELDS}

# Key attributes present on every stored item
PARTITION_KEY = "PK"
SORT_KEY = "SK"
KEY_ATTRIBUTES = frozenset({PARTITION_KEY, SORT_KEY})

STATUS_FIELD = "status"

# Emergency contact is stored flat and returned nested
EMERGENCY_CONTACT_FIELDS = {
    "name": "emergencyContactName",
    "phone": "emergencyContactPhone",
    "relationship": "emergencyContactRelationship",
}

ENCRYPTED_FIELDS: frozenset[str] = frozenset(
    spec.name for spec in EMPLOYEE_FIELDS if spec.encrypted
)


def fields_for(section: Section) -> list[FieldSpec]:
    return [spec for spec in EMPLOYEE_FIELDS if spec.section is section]


def required_fields(*sections: Section) -> list[str]:
    """Required field names, in schema order, for the given sections."""
    sections = sections or tuple(Section)
    return [
        spec.name
        for spec in EMPLOYEE_FIELDS
        if spec.required and spec.section in sections
    ]


def is_encrypted_field(field_path: str) -> bool:
    """Whether a (possibly section-prefixed) field name is stored encrypted.

    ``"contact info.email"`` and ``"email"`` both resolve to ``email``.
    """
    bare_name = field_path.rsplit(".", 1)[-1]
    return bare_name in ENCRYPTED_FIELDS


def employee_pk(employee_id: str) -> str:
    return f"EMPLOYEE#{employee_id}"


def employee_id_from_pk(pk: str) -> str:
    prefix, _, employee_id = pk.partition("#")
    return employee_id if prefix == "EMPLOYEE" else pk
