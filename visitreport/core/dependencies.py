"""
Dependency Injection
Builds the report orchestrator and its clients at startup and hands it to
routes and the scheduler via FastAPI dependencies
"""
from typing import Any, Dict, List, Optional
import logging
import httpx
from supabase import AsyncClient, acreate_client

from visitreport.core.config import Settings, settings
from visitreport.core.exceptions import StoreError
from visitreport.services.delivery.email import EmailSender, SMTPMailTransport
from visitreport.services.delivery.whatsapp import TwilioClient, WhatsAppSender
from visitreport.services.orchestrator import ReportOrchestrator
from visitreport.services.visits.fetcher import SupabaseVisitStore, VisitStore

logger = logging.getLogger(__name__)

# ============================================================================
# GLOBAL CLIENTS (initialized at startup)
# ============================================================================

http_client: Optional[httpx.AsyncClient] = None
supabase_client: Optional[AsyncClient] = None
mail_transport: Optional[SMTPMailTransport] = None
orchestrator: Optional[ReportOrchestrator] = None


class UnconfiguredVisitStore:
    """Stands in when no store credentials are set; every read fails loudly."""

    async def fetch_documents(self) -> List[Dict[str, Any]]:
        raise StoreError("Document store is not configured (SUPABASE_URL / SUPABASE_KEY)")


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================

async def get_orchestrator() -> ReportOrchestrator:
    """Get the report orchestrator."""
    if not orchestrator:
        raise RuntimeError("Report orchestrator not initialized")
    return orchestrator


# ============================================================================
# FACTORIES
# ============================================================================

def build_mail_transport(config: Settings) -> Optional[SMTPMailTransport]:
    if not config.gmail_user:
        logger.warning("⚠️  GMAIL_USER not set - email delivery disabled")
        return None
    return SMTPMailTransport(
        host=config.smtp_host,
        port=config.smtp_port,
        username=config.gmail_user,
        password=config.gmail_app_password
    )


def build_whatsapp_sender(config: Settings, client: httpx.AsyncClient) -> Optional[WhatsAppSender]:
    if not (config.twilio_sid and config.twilio_auth_token):
        logger.warning("⚠️  TWILIO_SID / TWILIO_AUTH_TOKEN not set - WhatsApp delivery disabled")
        return None
    twilio = TwilioClient(
        client,
        account_sid=config.twilio_sid,
        auth_token=config.twilio_auth_token,
        api_base=config.twilio_api_base
    )
    return WhatsAppSender(
        twilio,
        from_number=config.twilio_whatsapp_from,
        max_length=config.chat_max_length,
        pacing_seconds=config.chat_pacing_seconds
    )


def build_orchestrator(
    config: Settings,
    client: httpx.AsyncClient,
    store: VisitStore,
    transport: Optional[SMTPMailTransport]
) -> ReportOrchestrator:
    """Wire the orchestrator from settings; no globals touched."""
    email_sender = EmailSender(transport, config.gmail_user) if transport else None
    return ReportOrchestrator(
        config=config.report_config(),
        store=store,
        email_sender=email_sender,
        whatsapp_sender=build_whatsapp_sender(config, client)
    )


# ============================================================================
# STARTUP/SHUTDOWN
# ============================================================================

async def initialize_clients():
    """Initialize all global clients at startup."""
    global http_client, supabase_client, mail_transport, orchestrator

    # HTTP client (Twilio)
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(30.0),
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
    )

    # Document store
    if settings.supabase_url and settings.supabase_key:
        supabase_client = await acreate_client(settings.supabase_url, settings.supabase_key)
        store = SupabaseVisitStore(supabase_client, settings.visits_table)
        logger.info(f"✅ Supabase connected (collection: {settings.visits_table})")
    else:
        logger.warning("⚠️  SUPABASE_URL / SUPABASE_KEY not set - visit fetches will fail")
        store = UnconfiguredVisitStore()

    # Email (verification failure is logged, not fatal)
    mail_transport = build_mail_transport(settings)
    if mail_transport:
        try:
            await mail_transport.verify()
            logger.info("✅ Email server is ready to send messages")
        except Exception as e:
            logger.error(f"❌ Email configuration error: {e}")

    orchestrator = build_orchestrator(settings, http_client, store, mail_transport)
    logger.info("✅ Report orchestrator initialized")


async def shutdown_clients():
    """Close all global clients at shutdown."""
    global http_client, supabase_client, mail_transport, orchestrator

    if http_client:
        await http_client.aclose()
        logger.info("✅ HTTP client closed")

    http_client = None
    supabase_client = None
    mail_transport = None
    orchestrator = None
