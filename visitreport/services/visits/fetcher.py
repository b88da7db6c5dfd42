"""
Visit Data Fetcher
Reads site visit documents from the store and flattens them into VisitRecords
"""
import logging
from typing import Any, Dict, List, Optional, Protocol
from zoneinfo import ZoneInfo

from supabase import AsyncClient

from visitreport.core.exceptions import StoreError
from visitreport.services.reports.formatting import format_locale_date
from visitreport.services.visits.models import VisitRecord, parse_instant

logger = logging.getLogger(__name__)

VISITS_COLLECTION = "siteVisits"


class VisitStore(Protocol):
    """Anything that can return the raw visit documents."""

    async def fetch_documents(self) -> List[Dict[str, Any]]:
        ...


class SupabaseVisitStore:
    """Reads the visits collection from Supabase (one JSON document per row)."""

    def __init__(self, client: AsyncClient, table: str = VISITS_COLLECTION):
        self.client = client
        self.table = table

    async def fetch_documents(self) -> List[Dict[str, Any]]:
        try:
            result = await self.client.table(self.table).select("*").execute()
        except Exception as e:
            logger.error(f"❌ Failed to read {self.table}: {e}")
            raise StoreError(f"Failed to read visits from {self.table}: {e}") from e
        return list(result.data or [])


def _nested(document: Dict[str, Any], key: str, field: str) -> Optional[Any]:
    value = document.get(key)
    if isinstance(value, dict):
        return value.get(field)
    return None


def normalize_visit(document: Dict[str, Any], tz: ZoneInfo) -> VisitRecord:
    """
    Flatten one visit document.

    Missing or empty fields fall back to the VisitRecord defaults. The visit
    instant is kept raw for filtering and also rendered as a D/M/YYYY date
    in the report timezone.
    """
    visit_at = parse_instant(document.get("visitAt"))
    property_types = document.get("propertyTypes")

    return VisitRecord(
        visitor_name=_nested(document, "visitor", "name"),
        contact_number=_nested(document, "visitor", "phone"),
        visit_date=format_locale_date(visit_at, tz) if visit_at else None,
        visit_time=document.get("visitTime"),
        channel_partner=_nested(document, "channelPartner", "name"),
        property_types=property_types if isinstance(property_types, list) else None,
        remark=document.get("remarks"),
        status=document.get("bookingStatus"),
        visit_timestamp=visit_at,
    )


async def fetch_visits(store: VisitStore, tz: ZoneInfo) -> List[VisitRecord]:
    """Fetch every visit document and normalize it. Store errors propagate."""
    logger.info("🔍 Fetching site visits from store...")
    documents = await store.fetch_documents()
    rows = [normalize_visit(document, tz) for document in documents]
    logger.info(f"📊 Total site visits found: {len(rows)}")
    return rows
