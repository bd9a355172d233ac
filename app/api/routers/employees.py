"""
Employee API endpoints.

Provides endpoints for:
- Employee creation across the three record sections
- Full employee read, full replace and soft-delete (deactivation)
- Independent read / update of each section

Missing and inactive employees are indistinguishable: both return 404.
Notifications are not sent from here; they are driven by the change feed.
"""

from fastapi import APIRouter, status

from app.api.dependencies import StoreDep
from app.core.logging import get_logger
from app.core.schema import Section
from app.models.employee import (
    ContactInfoResponse,
    ContactInfoUpdate,
    ContractDetailsResponse,
    ContractDetailsUpdate,
    EmployeeCreate,
    EmployeeCreatedResponse,
    EmployeeResponse,
    MessageResponse,
    PersonalDataResponse,
    PersonalDataUpdate,
)
from app.services.employee_service import EmployeeService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
    responses={404: {"description": "Employee not found"}},
)


# =============================================================================
# Employee Aggregate
# =============================================================================


@router.post("", response_model=EmployeeCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_employee(employee_in: EmployeeCreate, store: StoreDep):
    """
    Create a new employee.

    Personal data, contact info and contract details are written in one
    atomic transaction; the employee starts out ACTIVE.
    """
    logger.info("Received request to create a new employee")
    body = employee_in.model_dump(mode="json", exclude_unset=True)
    employee_id = EmployeeService(store).create(body)
    return EmployeeCreatedResponse(message="Employee created successfully.", employeeId=employee_id)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: str, store: StoreDep):
    """Get an active employee with all sections decrypted."""
    logger.info(f"Fetching employee {employee_id}")
    return EmployeeService(store).get(employee_id)


@router.put("/{employee_id}", response_model=MessageResponse)
def update_employee(employee_id: str, employee_in: EmployeeCreate, store: StoreDep):
    """
    Replace every section of an active employee.

    This is a full replace: optional fields left out of the body are removed.
    """
    logger.info(f"Updating employee {employee_id}")
    body = employee_in.model_dump(mode="json", exclude_unset=True)
    EmployeeService(store).update(employee_id, body)
    return MessageResponse(message="Employee updated successfully.")


@router.delete("/{employee_id}", response_model=MessageResponse)
def delete_employee(employee_id: str, store: StoreDep):
    """Soft-delete an employee by setting its status to INACTIVE."""
    logger.info(f"Deactivating employee {employee_id}")
    EmployeeService(store).delete(employee_id)
    return MessageResponse(message="Employee deactivated successfully.")


# =============================================================================
# Personal Data
# =============================================================================


@router.get("/{employee_id}/personal-data", response_model=PersonalDataResponse)
def get_personal_data(employee_id: str, store: StoreDep):
    logger.info(f"Fetching personal data of employee {employee_id}")
    return EmployeeService(store).get_section(employee_id, Section.PERSONAL_DATA)


@router.put("/{employee_id}/personal-data", response_model=MessageResponse)
def update_personal_data(employee_id: str, personal_in: PersonalDataUpdate, store: StoreDep):
    """Update personal data. The employee status cannot be changed here."""
    logger.info(f"Updating personal data of employee {employee_id}")
    body = personal_in.model_dump(mode="json", exclude_unset=True)
    EmployeeService(store).update_section(employee_id, Section.PERSONAL_DATA, body)
    return MessageResponse(message="Personal data updated successfully.")


# =============================================================================
# Contact Info
# =============================================================================


@router.get("/{employee_id}/contact-info", response_model=ContactInfoResponse)
def get_contact_info(employee_id: str, store: StoreDep):
    logger.info(f"Fetching contact info of employee {employee_id}")
    return EmployeeService(store).get_section(employee_id, Section.CONTACT_INFO)


@router.put("/{employee_id}/contact-info", response_model=MessageResponse)
def update_contact_info(employee_id: str, contact_in: ContactInfoUpdate, store: StoreDep):
    logger.info(f"Updating contact info of employee {employee_id}")
    body = contact_in.model_dump(mode="json", exclude_unset=True)
    EmployeeService(store).update_section(employee_id, Section.CONTACT_INFO, body)
    return MessageResponse(message="Contact information updated successfully.")


# =============================================================================
# Contract Details
# =============================================================================


@router.get("/{employee_id}/contract-details", response_model=ContractDetailsResponse)
def get_contract_details(employee_id: str, store: StoreDep):
    logger.info(f"Fetching contract details of employee {employee_id}")
    return EmployeeService(store).get_section(employee_id, Section.CONTRACT_DETAILS)


@router.put("/{employee_id}/contract-details", response_model=MessageResponse)
def update_contract_details(
    employee_id: str, contract_in: ContractDetailsUpdate, store: StoreDep
):
    logger.info(f"Updating contract details of employee {employee_id}")
    body = contract_in.model_dump(mode="json", exclude_unset=True)
    EmployeeService(store).update_section(employee_id, Section.CONTRACT_DETAILS, body)
    return MessageResponse(message="Contract details updated successfully.")
