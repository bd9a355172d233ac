"""
Record store tables.

Items are schema-less documents addressed by (pk, sk). Every mutation also
appends a row to the change feed inside the same database transaction, so a
committed write and its feed entry are never observed apart.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

FEED_HEAD_ID = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChangeEventName(str, Enum):
    """Kind of mutation captured by the change feed."""

    INSERT = "INSERT"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"


class RecordItem(SQLModel, table=True):
    """A single item of the record store."""

    __tablename__ = "records"

    pk: str = Field(primary_key=True, max_length=255)
    sk: str = Field(primary_key=True, max_length=255)
    attributes: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    updated_at: datetime = Field(default_factory=utc_now)


class RecordChange(SQLModel, table=True):
    """
    One entry of the change feed.

    Images carry the full item including the ``PK`` / ``SK`` key attributes.
    ``sequence_number`` is handed out from ``FeedHead`` by the writing
    transaction, so numbers are gap-free and become visible in order.
    """

    __tablename__ = "record_changes"

    sequence_number: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    event_name: str = Field(max_length=10)
    pk: str = Field(max_length=255, index=True)
    sk: str = Field(max_length=255)
    old_image: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    new_image: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now)


class FeedHead(SQLModel, table=True):
    """
    Single-row counter of the last change-feed sequence number issued.

    Writers hold a row lock on it until commit, which serializes sequence
    assignment in commit order.
    """

    __tablename__ = "feed_head"

    id: int = Field(default=FEED_HEAD_ID, primary_key=True, sa_column_kwargs={"autoincrement": False})
    last_sequence_number: int = Field(default=0)


class FeedCheckpoint(SQLModel, table=True):
    """Last change-feed sequence number fully processed by a consumer."""

    __tablename__ = "feed_checkpoints"

    consumer: str = Field(primary_key=True, max_length=100)
    last_sequence_number: int = Field(default=0)
    updated_at: datetime = Field(default_factory=utc_now)


STORE_TABLES = (RecordItem, RecordChange, FeedHead, FeedCheckpoint)
