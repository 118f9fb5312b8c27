"""
Microsoft Graph mail transport

Sends mail as an application (no signed-in user): exchanges the app's client
credentials for a bearer token, then calls sendMail on the sender's mailbox.

Token URL: https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token
Send URL:  https://graph.microsoft.com/v1.0/users/{mailbox}/sendMail
Auth: Authorization: Bearer <token> (requires Mail.Send application permission)
"""

import base64
import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from mail.base import MailSendError, MailTransport
from mail.message import MailMessage

logger = logging.getLogger(__name__)

GRAPH_LOGIN_URL = "https://login.microsoftonline.com"
GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"

TOKEN_ERROR_MESSAGE = (
    "Could not get a Microsoft Graph access token. "
    "Check GRAPH_TENANT_ID, GRAPH_CLIENT_ID and GRAPH_CLIENT_SECRET."
)
PERMISSION_ERROR_MESSAGE = (
    "Microsoft Graph denied permission to send mail. "
    "Grant the app the Mail.Send application permission with admin consent, "
    "and check APP_MAILBOX is a licensed mailbox."
)


@dataclass(frozen=True)
class GraphConfig:
    tenant_id: str
    client_id: str
    client_secret: str


class GraphTransport(MailTransport):
    """Async transport for Microsoft Graph sendMail."""

    name = "graph"

    def __init__(
        self,
        config: GraphConfig,
        timeout: float = 30.0,
        login_url: str = GRAPH_LOGIN_URL,
        base_url: str = GRAPH_BASE_URL,
    ):
        self.config = config
        self.timeout = timeout
        self.login_url = login_url.rstrip("/")
        self.base_url = base_url.rstrip("/")

    @property
    def token_url(self) -> str:
        return f"{self.login_url}/{self.config.tenant_id}/oauth2/v2.0/token"

    def send_url(self, mailbox: str) -> str:
        return f"{self.base_url}/users/{quote(mailbox, safe='@')}/sendMail"

    async def send(self, message: MailMessage) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            token = await self._fetch_token(client)
            url = self.send_url(message.sender)
            logger.info(f"Graph sendMail request: POST {url}")
            try:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                    },
                    json=build_send_mail_payload(message),
                )
            except httpx.HTTPError as e:
                raise MailSendError("Could not reach Microsoft Graph.", detail=repr(e)) from e

        logger.info(f"Graph sendMail response: {response.status_code}")

        if response.status_code == 202:
            return
        logger.error(f"Graph sendMail error response body: {response.text[:2000]}")
        if response.status_code == 403:
            raise MailSendError(
                PERMISSION_ERROR_MESSAGE,
                detail=response.text[:500],
                status_code=403,
            )
        raise MailSendError(
            f"Microsoft Graph did not accept the email (HTTP {response.status_code}). "
            "Check APP_MAILBOX, FORWARD_TO/MAIL_TO and the app registration.",
            detail=response.text[:500],
            status_code=response.status_code,
        )

    async def _fetch_token(self, client: httpx.AsyncClient) -> str:
        """Client-credentials grant; returns the bearer token."""
        try:
            response = await client.post(
                self.token_url,
                data={
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "scope": GRAPH_SCOPE,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            raise MailSendError(TOKEN_ERROR_MESSAGE, detail=repr(e)) from e

        if not response.is_success:
            logger.error(
                "Graph token request failed: %s %s", response.status_code, response.text[:2000]
            )
            raise MailSendError(
                TOKEN_ERROR_MESSAGE,
                detail=response.text[:500],
                status_code=response.status_code,
            )

        try:
            token = response.json().get("access_token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            raise MailSendError(TOKEN_ERROR_MESSAGE, detail="No access_token in token response")
        return token


def build_send_mail_payload(message: MailMessage) -> dict:
    """JSON body for POST /users/{mailbox}/sendMail."""
    graph_message = {
        "subject": message.subject,
        "body": {"contentType": "Text", "content": message.text},
        "toRecipients": [{"emailAddress": {"address": message.recipient}}],
        "attachments": [
            {
                "@odata.type": "#microsoft.graph.fileAttachment",
                "name": attachment.filename,
                "contentType": attachment.content_type,
                "contentBytes": base64.b64encode(attachment.content).decode("ascii"),
            }
            for attachment in message.attachments
        ],
    }
    if message.reply_to:
        graph_message["replyTo"] = [{"emailAddress": {"address": message.reply_to}}]
    return {"message": graph_message, "saveToSentItems": True}
