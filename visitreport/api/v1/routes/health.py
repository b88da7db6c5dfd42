"""
Health Check Endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from visitreport.core.config import settings
from visitreport.services.reports.summary import ReportLabels

router = APIRouter(tags=["health"])


def _status(configured: bool) -> str:
    return "✅ Ready" if configured else "⚠️ Not configured"


@router.get("/health")
async def health_check():
    """Service readiness, based on configuration only (no upstream calls)."""
    labels = ReportLabels.for_policy(settings.filter_policy, settings.recency_window_hours)
    return {
        "status": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "email": _status(bool(settings.gmail_user)),
            "whatsapp": _status(bool(settings.twilio_sid and settings.twilio_auth_token)),
            "store": _status(bool(settings.supabase_url and settings.supabase_key)),
            "scheduler": f"{settings.report_cron} ({settings.report_timezone})" if settings.report_enabled else "disabled",
        },
        "dataFilter": labels.filter_description(),
    }
