"""
Change detector over the record store's change feed.

Two independent feed consumers, each with its own checkpoint:

- insert: a new PERSONAL_DATA section becomes one WELCOME event
- modify: old/new images are diffed per field and consolidated so each
  employee changed in a batch produces exactly one UPDATE event

A checkpoint only advances after every event of its batch was published,
so a publish failure makes the whole batch be read again.
"""

import time
from typing import Any, Callable, Optional

from app.core.config import settings
from app.core.events import EventEnvelope, EventType, UpdateEvent, WelcomeEvent, create_event
from app.core.kafka import publish_event_sync
from app.core.logging import get_logger
from app.core.record_store import RecordStore
from app.core.schema import KEY_ATTRIBUTES, Section, employee_id_from_pk
from app.core.topics import KafkaTopics
from app.models.record import ChangeEventName, RecordChange

logger = get_logger(__name__)

INSERT_CONSUMER = "change-detector-insert"
MODIFY_CONSUMER = "change-detector-modify"

Publisher = Callable[[str, EventEnvelope, Optional[str]], None]


def diff_images(
    old_image: Optional[dict[str, Any]], new_image: Optional[dict[str, Any]]
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff of two item images.

    Covers the union of attribute names except the key attributes. A field
    present on only one side is compared against None.
    """
    old_image = old_image or {}
    new_image = new_image or {}
    names = (set(old_image) | set(new_image)) - KEY_ATTRIBUTES

    changes = {}
    for name in sorted(names):
        old_value = old_image.get(name)
        new_value = new_image.get(name)
        if old_value != new_value:
            changes[name] = {"old": old_value, "new": new_value}
    return changes


def consolidate_modifications(records: list[RecordChange]) -> dict[str, dict[str, dict[str, Any]]]:
    """
    Merge the diffs of every MODIFY record in a batch per employee.

    Field paths are ``"<section name>.<field>"``. When a field changes more
    than once in a batch the earliest old and latest new value are kept.
    Employees whose net change is empty are left out.
    """
    consolidated: dict[str, dict[str, dict[str, Any]]] = {}
    for record in records:
        if record.event_name != ChangeEventName.MODIFY.value:
            continue
        section = Section.from_sort_key(record.sk)
        if section is None:
            continue

        employee_changes = consolidated.setdefault(employee_id_from_pk(record.pk), {})
        for name, change in diff_images(record.old_image, record.new_image).items():
            path = f"{section.display_name}.{name}"
            if path in employee_changes:
                employee_changes[path]["new"] = change["new"]
            else:
                employee_changes[path] = dict(change)

    return {
        employee_id: {path: change for path, change in changes.items() if change["old"] != change["new"]}
        for employee_id, changes in consolidated.items()
        if any(change["old"] != change["new"] for change in changes.values())
    }


class ChangeDetector:
    """Turns change-feed batches into notification events."""

    def __init__(
        self,
        store: RecordStore,
        publisher: Publisher = publish_event_sync,
        batch_size: Optional[int] = None,
    ):
        self.store = store
        self.publisher = publisher
        self.batch_size = batch_size or settings.CHANGE_FEED_BATCH_SIZE

    def build_welcome(self, record: RecordChange) -> Optional[WelcomeEvent]:
        """WELCOME payload for a new personal data section, else None."""
        if record.event_name != ChangeEventName.INSERT.value:
            return None
        if Section.from_sort_key(record.sk) is not Section.PERSONAL_DATA:
            return None

        personal = record.new_image or {}
        contact = self.store.get_item(record.pk, Section.CONTACT_INFO.sort_key) or {}
        contract = self.store.get_item(record.pk, Section.CONTRACT_DETAILS.sort_key) or {}

        return WelcomeEvent(
            employeeId=employee_id_from_pk(record.pk),
            firstName=personal.get("firstName", ""),
            lastName=personal.get("lastName", ""),
            email=contact.get("email", ""),
            role=contract.get("role", ""),
            department=contract.get("department", ""),
            jobLevel=contract.get("jobLevel", ""),
        )

    def process_inserts(self) -> int:
        """Handle one batch for the insert consumer. Returns the number of feed records read."""
        records = self.store.read_changes(INSERT_CONSUMER, self.batch_size)
        if not records:
            return 0

        last_sequence = records[-1].sequence_number
        published = 0
        for record in records:
            welcome = self.build_welcome(record)
            if welcome is None:
                continue
            event = create_event(
                EventType.EMPLOYEE_WELCOME, welcome, causation_id=str(record.sequence_number)
            )
            self.publisher(KafkaTopics.EMPLOYEE_WELCOME, event, welcome.employeeId)
            published += 1

        self.store.advance_checkpoint(INSERT_CONSUMER, last_sequence)
        logger.info(
            f"Insert batch of {len(records)} change(s) up to {last_sequence}: "
            f"{published} welcome event(s) published"
        )
        return len(records)

    def process_modifications(self) -> int:
        """Handle one batch for the modify consumer. Returns the number of feed records read."""
        records = self.store.read_changes(MODIFY_CONSUMER, self.batch_size)
        if not records:
            return 0

        last_sequence = records[-1].sequence_number
        consolidated = consolidate_modifications(records)
        for employee_id, changed_fields in consolidated.items():
            update = UpdateEvent(employeeId=employee_id, changedFields=changed_fields)
            event = create_event(EventType.EMPLOYEE_UPDATED, update)
            self.publisher(KafkaTopics.EMPLOYEE_UPDATED, event, employee_id)
            logger.info(
                f"Update event for employee {employee_id} with {len(changed_fields)} changed field(s)"
            )

        self.store.advance_checkpoint(MODIFY_CONSUMER, last_sequence)
        logger.info(
            f"Modify batch of {len(records)} change(s) up to {last_sequence}: "
            f"{len(consolidated)} update event(s) published"
        )
        return len(records)

    def run_once(self) -> int:
        """Process one batch per consumer, then drop entries both have passed."""
        processed = self.process_inserts() + self.process_modifications()
        if processed:
            self.store.trim_changes([INSERT_CONSUMER, MODIFY_CONSUMER])
        return processed


def run_change_detector(
    session_factory: Callable[[], Any],
    publisher: Publisher = publish_event_sync,
    poll_interval: Optional[float] = None,
    should_stop: Callable[[], bool] = lambda: False,
) -> None:
    """
    Poll the change feed until ``should_stop`` returns True.

    A fresh session per cycle keeps each poll on a current snapshot. A
    failed cycle is logged and retried after the poll interval.
    """
    poll_interval = poll_interval if poll_interval is not None else settings.CHANGE_FEED_POLL_INTERVAL
    logger.info("Change detector started")
    while not should_stop():
        try:
            with session_factory() as session:
                processed = ChangeDetector(RecordStore(session), publisher).run_once()
        except Exception as e:
            logger.exception(f"Change detector cycle failed, batch will be retried: {e}")
            processed = 0
        if not processed:
            time.sleep(poll_interval)
    logger.info("Change detector stopped")
