"""Plain-text email delivery through Amazon SES."""

from typing import Optional

import boto3

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_ses = None


def _get_ses():
    global _ses
    if _ses is None:
        _ses = boto3.client("ses", region_name=settings.AWS_REGION)
    return _ses


class SesMailer:
    """Sends plain-text emails. Any SES error propagates to the caller."""

    def __init__(self, sender: Optional[str] = None, client=None):
        self.sender = sender or settings.HR_ADMIN_EMAIL_FROM
        self._client = client

    @property
    def client(self):
        return self._client or _get_ses()

    def send(self, to: str, subject: str, body: str) -> None:
        response = self.client.send_email(
            Source=self.sender,
            Destination={"ToAddresses": [to]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
            },
        )
        logger.info(f"Email sent, SES message id {response.get('MessageId')}")
