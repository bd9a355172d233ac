"""
Background workers.

Usage:
    python -m app.worker change-detector   # change feed -> Kafka
    python -m app.worker notifications     # Kafka -> email
"""

import argparse
import signal

from sqlmodel import Session

from app.core.consumers import register_notification_handlers
from app.core.database import create_db_and_tables, engine
from app.core.kafka import KafkaConsumer, KafkaProducer
from app.core.logging import get_logger, setup_logging
from app.core.record_store import ensure_feed_head
from app.core.topics import KafkaTopics
from app.models.record import STORE_TABLES
from app.services.change_detector import run_change_detector

logger = get_logger(__name__)


def run_change_detector_worker() -> None:
    create_db_and_tables(*STORE_TABLES)
    with Session(engine) as session:
        ensure_feed_head(session)
    stopping = []

    def _stop(signum, _frame):
        logger.info(f"Received signal {signum}, stopping change detector")
        stopping.append(signum)

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    try:
        run_change_detector(lambda: Session(engine), should_stop=lambda: bool(stopping))
    finally:
        KafkaProducer.close()


def run_notification_worker() -> None:
    register_notification_handlers()
    consumer = KafkaConsumer(topics=KafkaTopics.notification_topics())

    def _stop(signum, _frame):
        logger.info(f"Received signal {signum}, stopping notification consumer")
        consumer.stop()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    try:
        consumer.run()
    finally:
        KafkaProducer.close()


WORKERS = {
    "change-detector": run_change_detector_worker,
    "notifications": run_notification_worker,
}


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="app.worker", description="HR Personnel Service workers")
    parser.add_argument("worker", choices=sorted(WORKERS))
    args = parser.parse_args(argv)

    setup_logging()
    logger.info(f"Starting {args.worker} worker")
    WORKERS[args.worker]()


if __name__ == "__main__":
    main()
