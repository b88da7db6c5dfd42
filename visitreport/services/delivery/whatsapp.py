"""
WhatsApp delivery via the Twilio Messages API.

Long reports go out as several messages, sent strictly in order with a pause
between sends to stay inside the provider's rate limits. A failure stops the
remaining parts; parts already delivered stay delivered.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

import httpx

from visitreport.core.exceptions import DeliveryError
from visitreport.services.reports.chat import build_no_data_message, split_into_chunks
from visitreport.services.reports.models import ChatDeliveryResult
from visitreport.services.reports.summary import ReportLabels
from visitreport.services.visits.models import VisitRecord

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


def format_whatsapp_number(number: str) -> str:
    number = number.strip()
    return number if number.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{number}"


class MessagingClient(Protocol):
    async def create_message(self, from_: str, to: str, body: str) -> str:
        """Send one message and return the provider's message id."""
        ...


class TwilioClient:
    """Minimal Twilio REST client on a shared httpx.AsyncClient."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_sid: str,
        auth_token: str,
        api_base: str = "https://api.twilio.com"
    ):
        self.http_client = http_client
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.api_base = api_base.rstrip("/")

    async def create_message(self, from_: str, to: str, body: str) -> str:
        url = f"{self.api_base}/2010-04-01/Accounts/{self.account_sid}/Messages.json"
        try:
            response = await self.http_client.post(
                url,
                data={"From": from_, "To": to, "Body": body},
                auth=(self.account_sid, self.auth_token)
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Twilio rejected message: {e.response.status_code} - {e.response.text}")
            raise DeliveryError(
                "whatsapp",
                f"Twilio rejected message ({e.response.status_code})",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error calling Twilio: {e}")
            raise DeliveryError("whatsapp", f"Twilio request failed: {e}") from e

        return response.json()["sid"]


class WhatsAppSender:
    """Renders a visit report as WhatsApp text and sends it, chunked if needed."""

    def __init__(
        self,
        client: MessagingClient,
        from_number: Optional[str],
        max_length: int = 1500,
        pacing_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.client = client
        self.from_number = from_number
        self.max_length = max_length
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep

    async def _send(self, to: str, body: str) -> str:
        if not self.from_number:
            raise DeliveryError("whatsapp", "WhatsApp sender number is not configured")
        return await self.client.create_message(self.from_number, to, body)

    async def send_report(
        self,
        number: str,
        rows: Sequence[VisitRecord],
        labels: ReportLabels,
        generated_at: datetime,
        tz: Optional[ZoneInfo] = None
    ) -> ChatDeliveryResult:
        to = format_whatsapp_number(number)

        if not rows:
            logger.info("ℹ️ No visits to report, sending WhatsApp no-data notice")
            message_id = await self._send(to, build_no_data_message(labels, generated_at, tz))
            return ChatDeliveryResult(message_id=message_id, visits_count=0)

        chunks = split_into_chunks(rows, labels, generated_at, tz, max_length=self.max_length)
        if len(chunks) == 1:
            message_id = await self._send(to, chunks[0])
            logger.info(f"✅ WhatsApp message sent: {message_id}")
            return ChatDeliveryResult(message_id=message_id, visits_count=len(rows))

        logger.info(f"📱 Report exceeds {self.max_length} chars, sending {len(chunks)} parts")
        message_ids = []
        for position, chunk in enumerate(chunks):
            if position > 0:
                await self._sleep(self.pacing_seconds)
            message_id = await self._send(to, chunk)
            message_ids.append(message_id)
            logger.info(f"✅ WhatsApp chunk {position + 1}/{len(chunks)} sent: {message_id}")

        return ChatDeliveryResult(message_ids=message_ids, visits_count=len(rows))
