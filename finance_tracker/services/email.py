from fastapi import Depends

from ..config import settings
from ..core.logging import get_logger


class EmailService:
    """Outgoing mail stub.

    Nothing is sent over SMTP yet; each message becomes an ``email_sent``
    log event so flows that notify users can be followed in the logs.
    """

    def __init__(self, logger, sender: str = settings.email_from):
        self.sender = sender
        self._logger = logger.bind(component="email")

    def send(self, to: str, subject: str, message: str) -> None:
        self._logger.info(
            "email_sent",
            sender=self.sender,
            to=to,
            subject=subject,
            length=len(message),
        )


def get_email_service(logger=Depends(get_logger)) -> EmailService:
    return EmailService(logger)
