"""
Record store: a (partition key, sort key) document store on SQLModel.

Provides the primitives the personnel handlers rely on:
- conditional single-item put / update
- multi-item atomic transactions with per-item preconditions
- query of every item under a partition key
- an ordered change feed of before/after images, read per consumer checkpoint
  and trimmed once every consumer has moved past an entry

A failed precondition inside a transaction surfaces as one
``TransactionCanceled`` without saying which item failed, so callers cannot
(and must not) tell "missing" from "inactive" apart.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.logging import get_logger
from app.core.schema import KEY_ATTRIBUTES, PARTITION_KEY, SORT_KEY
from app.models.record import (
    FEED_HEAD_ID,
    ChangeEventName,
    FeedCheckpoint,
    FeedHead,
    RecordChange,
    RecordItem,
    utc_now,
)

logger = get_logger(__name__)


class StoreError(Exception):
    """Unexpected record store failure."""


class ConditionalCheckFailed(StoreError):
    """A single-item write was rejected by its precondition."""


class TransactionCanceled(StoreError):
    """A transactional write was aborted; nothing was written."""


@dataclass(frozen=True)
class Condition:
    """
    Precondition evaluated against the current version of an item.

    ``must_exist`` True / False requires the item to be present / absent.
    ``equals`` requires each attribute to hold the given value, which also
    fails when the item does not exist.
    """

    must_exist: Optional[bool] = None
    equals: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def item_exists(cls, **equals: Any) -> "Condition":
        return cls(must_exist=True, equals=tuple(equals.items()))

    @classmethod
    def item_absent(cls) -> "Condition":
        return cls(must_exist=False)

    @classmethod
    def attribute_equals(cls, **equals: Any) -> "Condition":
        return cls(equals=tuple(equals.items()))

    def is_satisfied_by(self, item: Optional[dict[str, Any]]) -> bool:
        if self.must_exist is True and item is None:
            return False
        if self.must_exist is False and item is not None:
            return False
        for name, expected in self.equals:
            if item is None or item.get(name) != expected:
                return False
        return True


@dataclass
class Put:
    """Replace (or create) a whole item."""

    pk: str
    sk: str
    item: dict[str, Any]
    condition: Optional[Condition] = None


@dataclass
class Update:
    """Set attributes on an item, creating it if absent."""

    pk: str
    sk: str
    set_attributes: dict[str, Any] = field(default_factory=dict)
    condition: Optional[Condition] = None


@dataclass
class ConditionCheck:
    """Assert a condition on an item without writing it."""

    pk: str
    sk: str
    condition: Condition


WriteOperation = Union[Put, Update, ConditionCheck]


def to_image(row: RecordItem) -> dict[str, Any]:
    """Render a stored row as a full item image including key attributes."""
    return {PARTITION_KEY: row.pk, SORT_KEY: row.sk, **row.attributes}


def _strip_keys(item: dict[str, Any], drop_none: bool) -> dict[str, Any]:
    return {
        name: value
        for name, value in item.items()
        if name not in KEY_ATTRIBUTES and not (drop_none and value is None)
    }


class RecordStore:
    """Record store bound to one database session."""

    def __init__(self, session: Session):
        self.session = session

    # =========================================================================
    # Reads
    # =========================================================================

    def get_item(self, pk: str, sk: str) -> Optional[dict[str, Any]]:
        try:
            row = self.session.get(RecordItem, (pk, sk))
        except SQLAlchemyError as e:
            raise StoreError(f"get_item failed for {pk}/{sk}: {e}") from e
        return to_image(row) if row else None

    def query(self, pk: str, sk_prefix: Optional[str] = None) -> list[dict[str, Any]]:
        """Return every item under a partition key, ordered by sort key."""
        statement = select(RecordItem).where(RecordItem.pk == pk)
        if sk_prefix:
            statement = statement.where(RecordItem.sk.startswith(sk_prefix))
        try:
            rows = self.session.exec(statement.order_by(RecordItem.sk)).all()
        except SQLAlchemyError as e:
            raise StoreError(f"query failed for {pk}: {e}") from e
        return [to_image(row) for row in rows]

    # =========================================================================
    # Writes
    # =========================================================================

    def put_item(
        self,
        pk: str,
        sk: str,
        item: dict[str, Any],
        condition: Optional[Condition] = None,
    ) -> None:
        try:
            self.transact_write([Put(pk=pk, sk=sk, item=item, condition=condition)])
        except TransactionCanceled as e:
            raise ConditionalCheckFailed(str(e)) from e

    def update_item(
        self,
        pk: str,
        sk: str,
        set_attributes: dict[str, Any],
        condition: Optional[Condition] = None,
    ) -> None:
        try:
            self.transact_write(
                [Update(pk=pk, sk=sk, set_attributes=set_attributes, condition=condition)]
            )
        except TransactionCanceled as e:
            raise ConditionalCheckFailed(str(e)) from e

    def transact_write(self, operations: Sequence[WriteOperation]) -> None:
        """
        Apply all operations atomically, or none of them.

        Every condition is evaluated before anything is written. Each write
        appends an INSERT or MODIFY entry to the change feed in the same
        database transaction. Feed sequence numbers are taken from the
        locked feed head, so a reader never sees a later number commit
        ahead of an earlier one.

        Raises:
            TransactionCanceled: If any condition does not hold, or a
                concurrent writer created one of the items first
            StoreError: On any other database failure
        """
        keys = [(op.pk, op.sk) for op in operations]
        if len(set(keys)) != len(keys):
            raise StoreError("A transaction cannot target the same item twice")

        try:
            current: dict[tuple[str, str], Optional[RecordItem]] = {}
            for op in operations:
                current[(op.pk, op.sk)] = self.session.exec(
                    select(RecordItem)
                    .where(RecordItem.pk == op.pk, RecordItem.sk == op.sk)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                ).first()

            for op in operations:
                row = current[(op.pk, op.sk)]
                if op.condition and not op.condition.is_satisfied_by(
                    to_image(row) if row else None
                ):
                    self.session.rollback()
                    raise TransactionCanceled(
                        f"Transaction cancelled: condition failed on {op.pk}/{op.sk}"
                    )

            writes = [op for op in operations if not isinstance(op, ConditionCheck)]
            if writes:
                head = self._lock_feed_head()
                for op in writes:
                    head.last_sequence_number += 1
                    self._apply(op, current[(op.pk, op.sk)], head.last_sequence_number)
                self.session.add(head)

            self.session.commit()
        except TransactionCanceled:
            raise
        except IntegrityError as e:
            self.session.rollback()
            raise TransactionCanceled(f"Transaction cancelled: concurrent write ({e.orig})") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Transactional write failed: {e}") from e

    def _lock_feed_head(self) -> FeedHead:
        """Lock the feed head row until the current transaction ends."""
        head = self.session.exec(
            select(FeedHead)
            .where(FeedHead.id == FEED_HEAD_ID)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if head is None:
            head = FeedHead(id=FEED_HEAD_ID, last_sequence_number=0)
        return head

    def _apply(self, op: Union[Put, Update], row: Optional[RecordItem], sequence_number: int) -> None:
        old_image = to_image(row) if row else None

        if isinstance(op, Put):
            attributes = _strip_keys(op.item, drop_none=True)
        else:
            attributes = {**(row.attributes if row else {}), **_strip_keys(op.set_attributes, drop_none=False)}

        if row is None:
            row = RecordItem(pk=op.pk, sk=op.sk, attributes=attributes)
        else:
            row.attributes = attributes
            row.updated_at = utc_now()
        self.session.add(row)

        self.session.add(
            RecordChange(
                sequence_number=sequence_number,
                event_name=(
                    ChangeEventName.MODIFY.value if old_image else ChangeEventName.INSERT.value
                ),
                pk=op.pk,
                sk=op.sk,
                old_image=old_image,
                new_image={PARTITION_KEY: op.pk, SORT_KEY: op.sk, **attributes},
            )
        )

    # =========================================================================
    # Change Feed
    # =========================================================================

    def read_changes(self, consumer: str, limit: int) -> list[RecordChange]:
        """Return the next ordered batch of changes not yet processed by ``consumer``."""
        checkpoint = self.session.get(FeedCheckpoint, consumer)
        after = checkpoint.last_sequence_number if checkpoint else 0
        try:
            return list(
                self.session.exec(
                    select(RecordChange)
                    .where(RecordChange.sequence_number > after)
                    .order_by(RecordChange.sequence_number)
                    .limit(limit)
                ).all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Reading change feed for {consumer} failed: {e}") from e

    def get_checkpoint(self, consumer: str) -> int:
        checkpoint = self.session.get(FeedCheckpoint, consumer)
        return checkpoint.last_sequence_number if checkpoint else 0

    def advance_checkpoint(self, consumer: str, sequence_number: int) -> None:
        checkpoint = self.session.get(FeedCheckpoint, consumer)
        if checkpoint is None:
            checkpoint = FeedCheckpoint(consumer=consumer)
        checkpoint.last_sequence_number = max(checkpoint.last_sequence_number, sequence_number)
        checkpoint.updated_at = utc_now()
        self.session.add(checkpoint)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Advancing checkpoint for {consumer} failed: {e}") from e

    def trim_changes(self, consumers: Sequence[str]) -> int:
        """
        Delete feed entries that every one of ``consumers`` has processed.

        A consumer without a checkpoint holds the whole feed. Returns the
        number of entries removed.
        """
        floor = min((self.get_checkpoint(consumer) for consumer in consumers), default=0)
        if floor <= 0:
            return 0
        try:
            result = self.session.exec(
                delete(RecordChange).where(RecordChange.sequence_number <= floor)
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Trimming change feed up to {floor} failed: {e}") from e
        if result.rowcount:
            logger.info(f"Trimmed {result.rowcount} change feed entries up to {floor}")
        return result.rowcount


def ensure_feed_head(session: Session) -> None:
    """Create the feed head row if this is a fresh store."""
    if session.get(FeedHead, FEED_HEAD_ID) is None:
        session.add(FeedHead(id=FEED_HEAD_ID, last_sequence_number=0))
        session.commit()
        logger.info("Change feed initialized")
