"""Common interface for mail transports."""

from abc import ABC, abstractmethod

from mail.message import MailMessage


class MailSendError(Exception):
    """Raised when a transport fails to deliver a message.

    ``message`` is safe to show to operators in the UI; ``detail`` carries the
    underlying error for logs.
    """

    def __init__(self, message: str, detail: str | None = None, status_code: int | None = None):
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message if not detail else f"{message} ({detail})")


class MailTransport(ABC):
    """Sends one email with attachments. One attempt, no retries."""

    name: str = "mail"

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver ``message`` or raise MailSendError."""
