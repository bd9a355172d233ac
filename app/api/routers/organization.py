"""
Organization API endpoints.

Departments, positions, org units and job classifications. Each is created
once and read by id; there is no update, delete or listing.
"""

from fastapi import APIRouter, status

from app.api.dependencies import RequestingUserDep, StoreDep
from app.core.logging import get_logger
from app.models.organization import (
    DepartmentCreate,
    DepartmentResponse,
    JobClassificationCreate,
    JobClassificationResponse,
    OrgUnitCreate,
    OrgUnitResponse,
    PositionCreate,
    PositionResponse,
)
from app.services.organization_service import (
    DEPARTMENT,
    JOB_CLASSIFICATION,
    ORG_UNIT,
    POSITION,
    OrganizationService,
)

logger = get_logger(__name__)

router = APIRouter(tags=["organization"])


# =============================================================================
# Departments
# =============================================================================


@router.post("/departments", status_code=status.HTTP_201_CREATED)
def create_department(
    department_in: DepartmentCreate, store: StoreDep, user: RequestingUserDep
):
    """
    Create a department.

    The manager must be an active employee. A parent department, if given,
    must exist and allow sub-departments.
    """
    logger.info("Received request to create a new department")
    body = department_in.model_dump(mode="json", exclude_unset=True)
    department_id = OrganizationService(store).create_department(body, created_by=user)
    return {"message": "Department created successfully", "departmentId": department_id}


@router.get("/departments/{department_id}", response_model=DepartmentResponse)
def get_department(department_id: str, store: StoreDep):
    logger.info(f"Fetching department {department_id}")
    return OrganizationService(store).get(DEPARTMENT, department_id)


@router.post("/departments/{department_id}/org-units", status_code=status.HTTP_201_CREATED)
def create_org_unit(
    department_id: str, unit_in: OrgUnitCreate, store: StoreDep, user: RequestingUserDep
):
    """Create an organizational unit inheriting its department's cost center."""
    logger.info(f"Received request to create an org unit under department {department_id}")
    body = unit_in.model_dump(mode="json", exclude_unset=True)
    unit_id = OrganizationService(store).create_org_unit(department_id, body, created_by=user)
    return {"message": "Organizational Unit created successfully.", "unitId": unit_id}


# =============================================================================
# Org Units
# =============================================================================


@router.get("/org-units/{unit_id}", response_model=OrgUnitResponse)
def get_org_unit(unit_id: str, store: StoreDep):
    logger.info(f"Fetching org unit {unit_id}")
    return OrganizationService(store).get(ORG_UNIT, unit_id)


# =============================================================================
# Positions
# =============================================================================


@router.post("/positions", status_code=status.HTTP_201_CREATED)
def create_position(position_in: PositionCreate, store: StoreDep, user: RequestingUserDep):
    """Create a position reporting to an active employee within a department."""
    logger.info("Received request to create a new position")
    body = position_in.model_dump(mode="json", exclude_unset=True)
    position_id = OrganizationService(store).create_position(body, created_by=user)
    return {"message": "Position created successfully", "positionId": position_id}


@router.get("/positions/{position_id}", response_model=PositionResponse)
def get_position(position_id: str, store: StoreDep):
    logger.info(f"Fetching position {position_id}")
    return OrganizationService(store).get(POSITION, position_id)


# =============================================================================
# Job Classifications
# =============================================================================


@router.post("/job-classifications", status_code=status.HTTP_201_CREATED)
def create_job_classification(
    classification_in: JobClassificationCreate, store: StoreDep, user: RequestingUserDep
):
    logger.info("Received request to create a new job classification")
    body = classification_in.model_dump(mode="json", exclude_unset=True)
    job_classification_id = OrganizationService(store).create_job_classification(
        body, created_by=user
    )
    return {
        "message": "Job classification created successfully",
        "jobClassificationId": job_classification_id,
    }


@router.get("/job-classifications/{job_classification_id}", response_model=JobClassificationResponse)
def get_job_classification(job_classification_id: str, store: StoreDep):
    logger.info(f"Fetching job classification {job_classification_id}")
    return OrganizationService(store).get(JOB_CLASSIFICATION, job_classification_id)
