"""
Shared fixtures for the visit report tests.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from visitreport.services.delivery.email import EmailSender
from visitreport.services.delivery.whatsapp import WhatsAppSender
from visitreport.services.orchestrator import ReportOrchestrator
from visitreport.services.reports.models import ReportConfig
from visitreport.services.reports.summary import ReportLabels
from visitreport.services.visits.filters import FilterPolicy
from visitreport.services.visits.models import VisitRecord

# Saturday 17 October 2026, 09:23 UTC (14:53 in Asia/Kolkata)
NOW = datetime(2026, 10, 17, 9, 23, tzinfo=timezone.utc)
IST = ZoneInfo("Asia/Kolkata")


class FakeStore:
    """In-memory visit store returning fixed documents."""

    def __init__(self, documents=None, error=None):
        self.documents = documents or []
        self.error = error
        self.calls = 0

    async def fetch_documents(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.documents)


def make_visit(index: int, hours_ago=1, status="Not Booked", **overrides) -> VisitRecord:
    """Visit row `index`, `hours_ago` hours before NOW (None for no timestamp)."""
    fields = {
        "visitor_name": f"Visitor {index:02d}",
        "contact_number": f"98765432{index:02d}",
        "visit_time": "11:30 AM",
        "channel_partner": "Acme Realty",
        "property_types": "2BHK, 3BHK",
        "remark": "Wants a corner unit",
        "status": status,
    }
    if hours_ago is not None:
        stamp = NOW - timedelta(hours=hours_ago)
        fields["visit_timestamp"] = stamp
        local = stamp.astimezone(IST)
        fields["visit_date"] = f"{local.day}/{local.month}/{local.year}"
    fields.update(overrides)
    return VisitRecord(**fields)


def make_document(index: int, hours_ago: float = 1, **overrides) -> dict:
    """Raw store document shaped like the portal writes it."""
    stamp = NOW - timedelta(hours=hours_ago)
    document = {
        "visitor": {"name": f"Visitor {index:02d}", "phone": f"98765432{index:02d}"},
        "visitAt": {"_seconds": int(stamp.timestamp()), "_nanoseconds": 0},
        "visitTime": "11:30 AM",
        "channelPartner": {"name": "Acme Realty"},
        "propertyTypes": ["2BHK", "3BHK"],
        "remarks": "Wants a corner unit",
        "bookingStatus": "Booked",
    }
    document.update(overrides)
    return document


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def labels():
    return ReportLabels.for_policy(FilterPolicy.RECENT, 24)


@pytest.fixture
def report_config():
    return ReportConfig(
        sender_email="reports@example.com",
        report_email="owner@example.com",
        report_whatsapp_number="+919999999999",
        timezone="Asia/Kolkata",
        filter_policy=FilterPolicy.RECENT,
        recency_window_hours=24,
        chat_max_length=1500,
        chat_pacing_seconds=2.0,
    )


@pytest.fixture
def mail_transport():
    transport = AsyncMock()
    transport.send = AsyncMock(return_value="<msg-1@example.com>")
    return transport


@pytest.fixture
def messaging_client():
    client = AsyncMock()
    client.create_message = AsyncMock(side_effect=[f"SM{n:03d}" for n in range(1, 50)])
    return client


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def email_sender(mail_transport):
    return EmailSender(mail_transport, "reports@example.com")


@pytest.fixture
def whatsapp_sender(messaging_client, sleep):
    return WhatsAppSender(
        messaging_client,
        from_number="whatsapp:+14155238886",
        max_length=1500,
        pacing_seconds=2.0,
        sleep=sleep,
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def orchestrator(report_config, store, email_sender, whatsapp_sender):
    return ReportOrchestrator(
        config=report_config,
        store=store,
        email_sender=email_sender,
        whatsapp_sender=whatsapp_sender,
        clock=lambda: NOW,
    )
