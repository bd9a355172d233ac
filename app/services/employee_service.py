"""
Employee aggregate manager.

An employee is one logical entity persisted as three sections under the
partition key ``EMPLOYEE#<id>``. Every operation here keeps the sections
consistent through the record store's transaction primitive, and gates
reads and writes on ``PERSONAL_DATA.status == ACTIVE``.
"""

from typing import Any, Optional
from uuid import uuid4

from app.core.encryption import FieldEncryptor, get_encryptor
from app.core.exceptions import (
    Conflict,
    DecryptionError,
    InternalError,
    NotFoundOrInactive,
)
from app.core.logging import get_logger
from app.core.record_store import (
    Condition,
    ConditionalCheckFailed,
    ConditionCheck,
    Put,
    RecordStore,
    StoreError,
    TransactionCanceled,
    Update,
)
from app.core.schema import (
    EMERGENCY_CONTACT_FIELDS,
    SORT_KEY,
    STATUS_FIELD,
    EmployeeStatus,
    Section,
    employee_pk,
    fields_for,
)
from app.core.validation import is_missing

logger = get_logger(__name__)

SECTION_RESPONSE_KEYS = {
    Section.PERSONAL_DATA: "personalData",
    Section.CONTACT_INFO: "contactInfo",
    Section.CONTRACT_DETAILS: "contractDetails",
}

SECTION_NOT_FOUND_MESSAGES = {
    Section.PERSONAL_DATA: "Employee not found.",
    Section.CONTACT_INFO: "Contact information not found for this employee.",
    Section.CONTRACT_DETAILS: "Contract details not found for this employee.",
}

ACTIVE_CONDITION = Condition.item_exists(**{STATUS_FIELD: EmployeeStatus.ACTIVE.value})


def normalize_body(body: dict[str, Any]) -> dict[str, Any]:
    """Flatten a nested ``emergencyContact`` object into its stored field names."""
    normalized = dict(body)
    contact = normalized.pop("emergencyContact", None)
    if isinstance(contact, dict):
        for key, field_name in EMERGENCY_CONTACT_FIELDS.items():
            if field_name not in normalized and key in contact:
                normalized[field_name] = contact[key]
    return normalized


class EmployeeService:
    """Create, read, update and soft-delete employees across their sections."""

    def __init__(self, store: RecordStore, encryptor: Optional[FieldEncryptor] = None):
        self.store = store
        self.encryptor = encryptor or get_encryptor()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _section_attributes(
        self,
        section: Section,
        body: dict[str, Any],
        keep_present: bool = False,
        current: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Build the stored attributes of one section from a request body.

        Absent optional fields are omitted. With ``keep_present`` an optional
        field sent as empty is kept, so a partial update can clear it.
        Encrypted values equal to those in ``current`` keep their stored
        ciphertext.
        """
        current = current or {}
        attributes = {}
        for spec in fields_for(section):
            if spec.name not in body:
                continue
            value = body[spec.name]
            if is_missing(value) and not keep_present:
                continue
            if spec.encrypted:
                value = self._reuse_or_encrypt(current.get(spec.name), value)
            attributes[spec.name] = value
        return attributes

    def _reuse_or_encrypt(self, stored: Any, value: Any) -> Any:
        if is_missing(value) or is_missing(stored):
            return self.encryptor.encrypt(value)
        try:
            unchanged = self.encryptor.decrypt(stored) == str(value)
        except DecryptionError:
            unchanged = False
        return stored if unchanged else self.encryptor.encrypt(value)

    def _decrypt(self, employee_id: str, field_name: str, value: Any) -> Optional[str]:
        try:
            return self.encryptor.decrypt(value)
        except DecryptionError as e:
            logger.warning(f"Could not decrypt '{field_name}' of employee {employee_id}: {e}")
            return None

    def _assemble_section(
        self, employee_id: str, section: Section, data: dict[str, Any]
    ) -> dict[str, Any]:
        assembled: dict[str, Any] = {}
        for spec in fields_for(section):
            value = data.get(spec.name)
            if is_missing(value):
                assembled[spec.name] = None if spec.required else spec.default
            elif spec.encrypted:
                assembled[spec.name] = self._decrypt(employee_id, spec.name, value)
            else:
                assembled[spec.name] = value

        if section is Section.CONTACT_INFO:
            assembled["emergencyContact"] = {
                key: assembled.pop(field_name)
                for key, field_name in EMERGENCY_CONTACT_FIELDS.items()
            }
        return assembled

    def _load_sections(self, employee_id: str) -> dict[Section, dict[str, Any]]:
        try:
            items = self.store.query(employee_pk(employee_id))
        except StoreError as e:
            raise InternalError(str(e)) from e

        sections = {}
        for item in items:
            section = Section.from_sort_key(item[SORT_KEY])
            if section is not None:
                sections[section] = item
        return sections

    def _load_active_sections(self, employee_id: str) -> dict[Section, dict[str, Any]]:
        sections = self._load_sections(employee_id)
        personal = sections.get(Section.PERSONAL_DATA)
        if not personal or personal.get(STATUS_FIELD) != EmployeeStatus.ACTIVE.value:
            logger.warning(f"Employee {employee_id} is missing or not active")
            raise NotFoundOrInactive()
        return sections

    # =========================================================================
    # Operations
    # =========================================================================

    def create(self, body: dict[str, Any]) -> str:
        """
        Create an employee from a full request body.

        Returns:
            The generated employee id

        Raises:
            Conflict: If the generated id already exists
        """
        body = normalize_body(body)

        employee_id = str(uuid4())
        pk = employee_pk(employee_id)

        operations = []
        for section in Section:
            attributes = self._section_attributes(section, body)
            if section is Section.PERSONAL_DATA:
                attributes[STATUS_FIELD] = EmployeeStatus.ACTIVE.value
            operations.append(
                Put(pk=pk, sk=section.sort_key, item=attributes, condition=Condition.item_absent())
            )

        try:
            self.store.transact_write(operations)
        except TransactionCanceled as e:
            logger.warning(f"Employee id collision on create: {e}")
            raise Conflict(
                "An employee with this ID already exists, which should not happen. "
                "Please try again."
            ) from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"Employee {employee_id} created")
        return employee_id

    def get(self, employee_id: str) -> dict[str, Any]:
        """Return ``{"employee": {personalData, contactInfo, contractDetails}}``."""
        sections = self._load_active_sections(employee_id)

        merged: dict[str, Any] = {}
        for item in sections.values():
            merged.update(item)

        return {
            "employee": {
                key: self._assemble_section(employee_id, section, merged)
                for section, key in SECTION_RESPONSE_KEYS.items()
            }
        }

    def get_section(self, employee_id: str, section: Section) -> dict[str, Any]:
        sections = self._load_active_sections(employee_id)
        item = sections.get(section)
        if item is None:
            logger.warning(f"Employee {employee_id} has no {section.display_name} section")
            raise NotFoundOrInactive(SECTION_NOT_FOUND_MESSAGES[section])
        return {SECTION_RESPONSE_KEYS[section]: self._assemble_section(employee_id, section, item)}

    def update(self, employee_id: str, body: dict[str, Any]) -> None:
        """
        Replace all three sections of an active employee atomically.

        Omitted optional fields are dropped from the stored sections.
        """
        body = normalize_body(body)
        current = self._load_sections(employee_id)

        pk = employee_pk(employee_id)
        operations = []
        for section in Section:
            attributes = self._section_attributes(section, body, current=current.get(section))
            condition = None
            if section is Section.PERSONAL_DATA:
                attributes[STATUS_FIELD] = EmployeeStatus.ACTIVE.value
                condition = ACTIVE_CONDITION
            operations.append(Put(pk=pk, sk=section.sort_key, item=attributes, condition=condition))

        try:
            self.store.transact_write(operations)
        except TransactionCanceled as e:
            logger.warning(f"Update rejected for employee {employee_id}: {e}")
            raise NotFoundOrInactive("Employee not found or is inactive.") from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"Employee {employee_id} updated")

    def update_section(self, employee_id: str, section: Section, body: dict[str, Any]) -> None:
        """
        Update one section of an active employee.

        The active check and the write run in one transaction. ``status``
        is never writable through this path.
        """
        body = normalize_body(body)

        pk = employee_pk(employee_id)
        try:
            current = self.store.get_item(pk, section.sort_key)
        except StoreError as e:
            raise InternalError(str(e)) from e

        attributes = self._section_attributes(section, body, keep_present=True, current=current)
        attributes.pop(STATUS_FIELD, None)

        if section is Section.PERSONAL_DATA:
            operations = [
                Update(pk=pk, sk=section.sort_key, set_attributes=attributes, condition=ACTIVE_CONDITION)
            ]
        else:
            operations = [
                ConditionCheck(pk=pk, sk=Section.PERSONAL_DATA.sort_key, condition=ACTIVE_CONDITION),
                Update(pk=pk, sk=section.sort_key, set_attributes=attributes),
            ]

        try:
            self.store.transact_write(operations)
        except TransactionCanceled as e:
            logger.warning(
                f"{section.display_name.capitalize()} update rejected for employee {employee_id}: {e}"
            )
            raise NotFoundOrInactive() from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"Employee {employee_id} {section.display_name} updated")

    def delete(self, employee_id: str) -> None:
        """Soft-delete: flip ``status`` from ACTIVE to INACTIVE."""
        try:
            self.store.update_item(
                employee_pk(employee_id),
                Section.PERSONAL_DATA.sort_key,
                {STATUS_FIELD: EmployeeStatus.INACTIVE.value},
                condition=ACTIVE_CONDITION,
            )
        except ConditionalCheckFailed as e:
            logger.warning(f"Deactivation rejected for employee {employee_id}: {e}")
            raise NotFoundOrInactive("Employee not found or is already inactive.") from e
        except StoreError as e:
            raise InternalError(str(e)) from e

        logger.info(f"Employee {employee_id} deactivated")
