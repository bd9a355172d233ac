"""
Kafka Topic Definitions for the HR Personnel Service.

Topic naming follows the pattern: <domain>-<event-type>
Every notification topic has a dead-letter companion: <topic>-dlq
"""


class KafkaTopics:
    """
    Central registry of all Kafka topics used by the HR Personnel Service.
    Topics are named following the pattern: <domain>-<event-type>
    """

    # Employee Notification Events - produced by the change detector
    EMPLOYEE_WELCOME = "employee-welcome"
    EMPLOYEE_UPDATED = "employee-updated"

    DLQ_SUFFIX = "-dlq"

    @classmethod
    def notification_topics(cls) -> list[str]:
        """Return list of topics consumed by the notification dispatcher."""
        return [cls.EMPLOYEE_WELCOME, cls.EMPLOYEE_UPDATED]

    @classmethod
    def dead_letter_topic(cls, topic: str) -> str:
        """Return the dead-letter topic for ``topic``."""
        return f"{topic}{cls.DLQ_SUFFIX}"
