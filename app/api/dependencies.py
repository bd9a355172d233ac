"""
Shared FastAPI dependencies.

Authentication happens upstream (API gateway); the authenticated identity
arrives in the ``X-Authenticated-User`` header and is only used for
``createdBy`` audit fields.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlmodel import Session

from app.core.database import get_session
from app.core.logging import get_logger
from app.core.record_store import RecordStore

logger = get_logger(__name__)

SYSTEM_USER = "system"

SessionDep = Annotated[Session, Depends(get_session)]


def get_record_store(session: SessionDep) -> RecordStore:
    return RecordStore(session)


StoreDep = Annotated[RecordStore, Depends(get_record_store)]


def get_requesting_user(
    x_authenticated_user: Annotated[Optional[str], Header()] = None,
) -> str:
    """Identity of the caller, falling back to ``system``."""
    if x_authenticated_user and x_authenticated_user.strip():
        return x_authenticated_user.strip()
    logger.warning('Could not determine authenticated user. Falling back to "system".')
    return SYSTEM_USER


RequestingUserDep = Annotated[str, Depends(get_requesting_user)]
