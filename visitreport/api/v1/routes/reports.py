"""
Visit Report API Routes

Manual (on-demand) delivery of the site visit report by email and/or WhatsApp.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from visitreport.core.config import settings
from visitreport.core.dependencies import get_orchestrator
from visitreport.core.exceptions import ReportValidationError
from visitreport.middleware.rate_limit import limiter
from visitreport.models.schemas.reports import SendReportRequest
from visitreport.services.orchestrator import ReportOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


@router.post("/send-report")
@limiter.limit(settings.send_rate_limit)
async def send_report(
    request: Request,
    body: SendReportRequest,
    orchestrator: ReportOrchestrator = Depends(get_orchestrator)
):
    """
    Send the visit report to the caller's destinations.

    - 400: missing/invalid destination or attachment (nothing was sent)
    - 500: fetch/render failed, or every selected channel failed
    - 200: at least one channel delivered; `ok` is false if another failed
    """
    logger.info(
        f"📧 Manual report request received: method={body.send_method.value} "
        f"recipient={body.to} hasHtml={bool(body.html)} visits={len(body.visits)} "
        f"attachments={len(body.attachments)}"
    )

    try:
        result = await orchestrator.run_manual(body)
    except ReportValidationError as e:
        logger.warning(f"Rejected send-report request: {e}")
        return JSONResponse(status_code=400, content={"ok": False, "error": str(e)})
    except Exception as e:
        logger.error(f"❌ Error in manual send-report: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})

    if result.all_failed:
        return JSONResponse(
            status_code=500,
            content={**result.to_response(), "error": result.message}
        )
    return result.to_response()
