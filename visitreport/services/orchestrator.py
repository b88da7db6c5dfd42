"""
Report Delivery Orchestrator

One pipeline for both triggers:

    fetch → filter/sort (policy) → render → send email / WhatsApp

The timer and the HTTP endpoint only decide where rows come from and where
reports go. Channels are attempted independently: a failed email never
stops the WhatsApp send and vice versa, and each outcome is reported.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from visitreport.core.exceptions import DeliveryError
from visitreport.models.schemas.reports import SendReportRequest
from visitreport.services.delivery.email import Attachment, EmailSender
from visitreport.services.delivery.whatsapp import WhatsAppSender
from visitreport.services.reports.formatting import format_locale_date
from visitreport.services.reports.html import render_report_html, render_summary_html
from visitreport.services.reports.models import (
    ChannelResult,
    ManualRunResult,
    ReportConfig,
    ScheduledRunResult,
)
from visitreport.services.reports.spreadsheet import build_visit_workbook
from visitreport.services.reports.summary import ReportLabels
from visitreport.services.visits.fetcher import VisitStore, fetch_visits
from visitreport.services.visits.filters import apply_policy
from visitreport.services.visits.models import VisitRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportOrchestrator:
    """Composes the report pipeline from explicit config and collaborators."""

    def __init__(
        self,
        config: ReportConfig,
        store: VisitStore,
        email_sender: Optional[EmailSender],
        whatsapp_sender: Optional[WhatsAppSender],
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config
        self.store = store
        self.email_sender = email_sender
        self.whatsapp_sender = whatsapp_sender
        self.clock = clock
        self.tz = ZoneInfo(config.timezone)
        self.labels = ReportLabels.for_policy(config.filter_policy, config.recency_window_hours)

    # ------------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------------

    def prepare(self, rows: Sequence[VisitRecord], now: datetime) -> List[VisitRecord]:
        window = timedelta(hours=self.config.recency_window_hours)
        return apply_policy(rows, self.config.filter_policy, now, window)

    def spreadsheet_attachment(self, rows: Sequence[VisitRecord], now: datetime) -> Attachment:
        date_text = format_locale_date(now, self.tz)
        return Attachment(
            filename=self.labels.attachment_name(date_text),
            content=build_visit_workbook(rows, self.labels.sheet_title())
        )

    async def _deliver_email(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[Attachment],
        visit_count: int
    ) -> ChannelResult:
        data_type = self.labels.data_type()
        try:
            if not self.email_sender:
                raise DeliveryError("email", "Email delivery is not configured")
            message_id = await self.email_sender.send_report(to, subject, html, attachments)
        except Exception as e:
            logger.error(f"❌ Email delivery to {to} failed: {e}", exc_info=True)
            return ChannelResult.failed(e, data_type)

        return ChannelResult(
            success=True,
            message_id=message_id,
            visit_count=visit_count,
            data_type=data_type
        )

    async def _deliver_whatsapp(
        self,
        number: str,
        rows: Sequence[VisitRecord],
        now: datetime
    ) -> ChannelResult:
        data_type = self.labels.data_type()
        try:
            if not self.whatsapp_sender:
                raise DeliveryError("whatsapp", "WhatsApp delivery is not configured")
            result = await self.whatsapp_sender.send_report(number, rows, self.labels, now, self.tz)
        except Exception as e:
            logger.error(f"❌ WhatsApp delivery to {number} failed: {e}", exc_info=True)
            return ChannelResult.failed(e, data_type)

        return ChannelResult.from_chat(result, data_type)

    # ------------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------------

    async def run_scheduled(self) -> ScheduledRunResult:
        """
        Daily run to the fixed destinations.

        Sends nothing on either channel when no rows survive the policy.
        Store and render errors propagate; channel errors are recorded.
        """
        now = self.clock()
        rows = self.prepare(await fetch_visits(self.store, self.tz), now)

        if not rows:
            logger.warning("⚠️ No visits found for the report window. Skipping scheduled reports.")
            return ScheduledRunResult(
                success=True,
                message="No visits found for the report window",
                visit_count=0
            )

        date_text = format_locale_date(now, self.tz)
        html = render_report_html(rows, self.labels, now, self.tz)
        attachment = self.spreadsheet_attachment(rows, now)

        email_result = None
        if self.config.report_email:
            email_result = await self._deliver_email(
                self.config.report_email,
                self.labels.subject(date_text),
                html,
                [attachment],
                visit_count=len(rows)
            )
        else:
            logger.warning("⚠️ REPORT_EMAIL not set, skipping scheduled email")

        whatsapp_result = None
        if self.config.report_whatsapp_number:
            whatsapp_result = await self._deliver_whatsapp(self.config.report_whatsapp_number, rows, now)
            if whatsapp_result.success:
                logger.info(f"📱 WhatsApp sent with {whatsapp_result.visits_count} visits")
        else:
            logger.warning("⚠️ REPORT_WHATSAPP_NUMBER not set, skipping scheduled WhatsApp")

        attempted = [result for result in (email_result, whatsapp_result) if result is not None]
        success = bool(attempted) and all(result.success for result in attempted)
        message = "Daily report sent successfully" if success else "Daily report delivery incomplete"
        logger.info(f"{'✅' if success else '⚠️'} {message} ({len(rows)} visits)")

        return ScheduledRunResult(
            success=success,
            message=message,
            visit_count=len(rows),
            email=email_result,
            whatsapp=whatsapp_result
        )

    async def run_manual(self, request: SendReportRequest) -> ManualRunResult:
        """
        On-demand run to caller-supplied destinations.

        Raises:
            ReportValidationError: before any send, for bad destinations or attachments
        """
        request.validate_destinations()
        attachments = request.decoded_attachments()

        now = self.clock()
        if request.fetch_from_store:
            source_rows = await fetch_visits(self.store, self.tz)
        else:
            source_rows = list(request.visits)
        rows = self.prepare(source_rows, now)
        logger.info(f"📊 Manual report: {len(source_rows)} visits received → {len(rows)} to send")

        results = {}
        method = request.send_method

        if method.includes_email:
            to = request.to.strip()
            html = request.html or render_summary_html(len(rows), self.labels, now, self.tz)
            subject = request.subject or self.labels.subject(format_locale_date(now, self.tz))
            if request.attach_spreadsheet:
                attachments.append(self.spreadsheet_attachment(rows, now))
            logger.info(f"📧 Sending report email to: {to}")
            results["email"] = await self._deliver_email(to, subject, html, attachments, visit_count=len(rows))

        if method.includes_chat:
            number = request.whatsapp_number.strip()
            logger.info(f"📱 Sending WhatsApp report to: {number}")
            results["whatsapp"] = await self._deliver_whatsapp(number, rows, now)

        failed = [channel for channel, result in results.items() if not result.success]
        ok = not failed
        description = self.labels.filter_description().lower()
        if ok:
            message = f"Report sent successfully via {method.value} ({description})"
        else:
            message = f"Report delivery failed for: {', '.join(failed)}"

        return ManualRunResult(
            ok=ok,
            message=message,
            results=results,
            total_visits=len(source_rows),
            sent_visits=len(rows),
            note=f"Reports contain {description}"
        )
