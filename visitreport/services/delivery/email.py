"""
Email delivery over SMTP (implicit TLS).

smtplib is blocking, so each send runs in a worker thread to keep the event
loop free for the HTTP server and the scheduler.
"""
import asyncio
import logging
import mimetypes
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional, Protocol, Sequence

from visitreport.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PLAIN_TEXT_FALLBACK = "This report is best viewed in an email client that supports HTML."


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    mime_type: Optional[str] = None

    def resolved_mime_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        if self.filename.lower().endswith(".xlsx"):
            return XLSX_MIME_TYPE
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"


class MailTransport(Protocol):
    async def send(self, message: EmailMessage) -> str:
        """Deliver `message` and return its message id."""
        ...


class SMTPMailTransport:
    """SMTP-over-SSL transport (Gmail app passwords by default)."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        timeout: float = 30.0
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP_SSL:
        smtp = smtplib.SMTP_SSL(
            self.host,
            self.port,
            timeout=self.timeout,
            context=ssl.create_default_context()
        )
        if self.username:
            try:
                smtp.login(self.username, self.password or "")
            except Exception:
                smtp.close()
                raise
        return smtp

    def _send_sync(self, message: EmailMessage) -> None:
        with self._connect() as smtp:
            smtp.send_message(message)

    def _verify_sync(self) -> None:
        with self._connect() as smtp:
            smtp.noop()

    async def send(self, message: EmailMessage) -> str:
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ SMTP send failed: {e}")
            raise DeliveryError("email", f"SMTP send failed: {e}") from e
        return message["Message-ID"]

    async def verify(self) -> None:
        """Connect and authenticate once; raises on bad configuration."""
        await asyncio.to_thread(self._verify_sync)


class EmailSender:
    """Builds report emails and hands them to a transport."""

    def __init__(self, transport: MailTransport, sender: Optional[str]):
        self.transport = transport
        self.sender = sender

    def build_message(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment] = ()
    ) -> EmailMessage:
        message = EmailMessage()
        if self.sender:
            message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        domain = self.sender.split("@", 1)[1] if self.sender and "@" in self.sender else None
        message["Message-ID"] = make_msgid(domain=domain)

        message.set_content(PLAIN_TEXT_FALLBACK)
        message.add_alternative(html, subtype="html")

        for attachment in attachments:
            maintype, _, subtype = attachment.resolved_mime_type().partition("/")
            message.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename
            )
        return message

    async def send_report(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment] = ()
    ) -> str:
        """Send one report email and return its message id."""
        message = self.build_message(to, subject, html, attachments)
        message_id = await self.transport.send(message)
        logger.info(f"✅ Email sent to {to}: {message_id}")
        return message_id
