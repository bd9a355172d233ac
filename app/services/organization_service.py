"""
Organization records: departments, positions, org units, job classifications.

Each entity is created once and read many times. Human-readable text is
encrypted at rest; classification fields stay plaintext. References to
employees and departments are validated at creation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from app.core.encryption import FieldEncryptor, get_encryptor
from app.core.exceptions import (
    Conflict,
    DecryptionError,
    InternalError,
    NotFoundOrInactive,
    ValidationError,
)
from app.core.logging import get_logger
from app.core.record_store import Condition, ConditionalCheckFailed, RecordStore, StoreError
from app.core.schema import STATUS_FIELD, EmployeeStatus, Section, employee_pk
from app.core.validation import is_missing

logger = get_logger(__name__)

METADATA_SORT_KEY = "METADATA"


@dataclass(frozen=True)
class OrgEntity:
    """Storage layout of one organization entity type."""

    entity_type: str
    label: str
    id_field: str
    response_key: str
    plaintext: tuple[str, ...] = ()
    encrypted: tuple[str, ...] = ()
    nullable: tuple[str, ...] = ()  # Read as null rather than "" when unset

    def pk(self, entity_id: str) -> str:
        return f"ORG#{self.entity_type}#{entity_id}"


DEPARTMENT = OrgEntity(
    entity_type="DEPARTMENT",
    label="Department",
    id_field="departmentId",
    response_key="department",
    plaintext=(
        "departmentCode", "departmentType", "costCenter", "departmentManager",
        "parentDepartment", "organizationLevel", "allowSubDepartments",
        "maximumPositions", "reportingStructure", "budgetControl",
    ),
    encrypted=("departmentName", "description", "comments"),
    nullable=("parentDepartment",),
)

POSITION = OrgEntity(
    entity_type="POSITION",
    label="Position",
    id_field="positionId",
    response_key="position",
    plaintext=(
        "positionTitle", "positionCode", "department", "positionLevel",
        "employmentType", "reportsTo", "education", "skills", "certifications",
        "salaryGrade", "competencyLevel",
    ),
    encrypted=("positionDescription", "comments"),
)

ORG_UNIT = OrgEntity(
    entity_type="ORG_UNIT",
    label="Organizational Unit",
    id_field="unitId",
    response_key="orgUnit",
    plaintext=("effectiveDate",),
    encrypted=("unitName", "description"),
)

JOB_CLASSIFICATION = OrgEntity(
    entity_type="JOB_CLASSIFICATION",
    label="Job classification",
    id_field="jobClassificationId",
    response_key="jobClassification",
    plaintext=("jobFamily", "jobTitle", "payScale"),
    encrypted=("responsibilities",),
)


class OrganizationService:
    def __init__(self, store: RecordStore, encryptor: Optional[FieldEncryptor] = None):
        self.store = store
        self.encryptor = encryptor or get_encryptor()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get(self, pk: str, sk: str) -> Optional[dict[str, Any]]:
        try:
            return self.store.get_item(pk, sk)
        except StoreError as e:
            raise InternalError(str(e)) from e

    def _require_active_employee(self, employee_id: Any, role: str) -> None:
        item = self._get(employee_pk(str(employee_id)), Section.PERSONAL_DATA.sort_key)
        if item is None:
            logger.warning(f"Validation failed: {role} with ID {employee_id} not found")
            raise ValidationError(f"Invalid input: {role} with ID {employee_id} not found.")
        if item.get(STATUS_FIELD) != EmployeeStatus.ACTIVE.value:
            logger.warning(f"Validation failed: {role} with ID {employee_id} is not active")
            raise ValidationError(f"Invalid input: {role} with ID {employee_id} is not active.")

    def _get_department(self, department_id: Any) -> Optional[dict[str, Any]]:
        return self._get(DEPARTMENT.pk(str(department_id)), METADATA_SORT_KEY)

    def _create(
        self,
        entity: OrgEntity,
        body: dict[str, Any],
        created_by: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> str:
        entity_id = str(uuid4())
        item: dict[str, Any] = {entity.id_field: entity_id}
        for name in entity.plaintext:
            if not is_missing(body.get(name)):
                item[name] = body[name]
        for name in entity.encrypted:
            if not is_missing(body.get(name)):
                item[name] = self.encryptor.encrypt(body[name])
        item.update(extra or {})
        item["createdBy"] = created_by
        item["createdAt"] = datetime.now(timezone.utc).isoformat()

        try:
            self.store.put_item(
                entity.pk(entity_id), METADATA_SORT_KEY, item, condition=Condition.item_absent()
            )
        except ConditionalCheckFailed as e:
            raise Conflict(
                f"A {entity.label.lower()} with this ID already exists, which should not happen. "
                "Please try again."
            ) from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"{entity.label} {entity_id} created by {created_by}")
        return entity_id

    # =========================================================================
    # Creation
    # =========================================================================

    def create_department(self, body: dict[str, Any], created_by: str) -> str:
        self._require_active_employee(body["departmentManager"], "Department Manager")

        parent_id = body.get("parentDepartment")
        if not is_missing(parent_id):
            parent = self._get_department(parent_id)
            if parent is None:
                raise ValidationError(
                    f"Invalid input: Parent Department with ID {parent_id} not found."
                )
            if not parent.get("allowSubDepartments"):
                raise ValidationError(
                    f"Invalid input: Parent Department with ID {parent_id} does not allow sub-departments."
                )

        return self._create(DEPARTMENT, body, created_by)

    def create_position(self, body: dict[str, Any], created_by: str) -> str:
        self._require_active_employee(body["reportsTo"], "Manager")

        department_id = body["department"]
        if self._get_department(department_id) is None:
            logger.warning(f"Validation failed: Department with ID {department_id} not found")
            raise ValidationError(f"Invalid input: Department with ID {department_id} not found.")

        return self._create(POSITION, body, created_by)

    def create_org_unit(self, department_id: str, body: dict[str, Any], created_by: str) -> str:

        department = self._get_department(department_id)
        if department is None:
            raise NotFoundOrInactive(f"Department with ID {department_id} not found.")
        cost_center = department.get("costCenter")
        if is_missing(cost_center):
            logger.error(f"Data integrity issue: department {department_id} has no costCenter")
            raise InternalError(
                "Cannot create unit because the parent department has no cost center assigned."
            )

        return self._create(
            ORG_UNIT,
            body,
            created_by,
            extra={"departmentId": department_id, "costCenterInfo": cost_center},
        )

    def create_job_classification(self, body: dict[str, Any], created_by: str) -> str:
        return self._create(JOB_CLASSIFICATION, body, created_by)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, entity: OrgEntity, entity_id: str) -> dict[str, Any]:
        """Return ``{<response key>: {...}}`` with encrypted fields decrypted."""
        item = self._get(entity.pk(entity_id), METADATA_SORT_KEY)
        if item is None:
            raise NotFoundOrInactive(f"{entity.label} not found.")

        data = {
            entity.id_field: item.get(entity.id_field, entity_id),
            **{name: item.get(name) for name in entity.plaintext},
        }
        for name in entity.nullable:
            data[name] = item.get(name) or None
        for name in entity.encrypted:
            value = item.get(name)
            if is_missing(value):
                data[name] = ""
                continue
            try:
                data[name] = self.encryptor.decrypt(value)
            except DecryptionError as e:
                logger.warning(f"Could not decrypt '{name}' of {entity.label.lower()} {entity_id}: {e}")
                data[name] = None
        for name in ("departmentId", "costCenterInfo", "createdBy", "createdAt"):
            if name in item and name not in data:
                data[name] = item[name]
        return {entity.response_key: data}
