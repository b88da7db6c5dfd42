"""
Site Visit Report Bridge
========================
FastAPI application that delivers site visit reports:
- Daily scheduled report (email with .xlsx attachment + WhatsApp)
- On-demand report via POST /send-report

Architecture:
- visitreport/core/: Configuration, dependencies, errors, logging
- visitreport/middleware/: Error handling, request logging, CORS, rate limiting
- visitreport/models/: Request schemas
- visitreport/services/: Pipeline (visits, reports, delivery, orchestrator, scheduler)
- visitreport/api/v1/routes/: API endpoints

Version: 1.0.0
"""
import sys
import logging
import traceback
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

# Startup error handling
try:
    # Import core components
    from visitreport.core.config import settings
    from visitreport.core.logging import configure_logging
    from visitreport.core import dependencies

    # Import middleware
    from visitreport.middleware.error_handler import ErrorHandlerMiddleware, request_validation_handler
    from visitreport.middleware.logging import RequestLoggingMiddleware
    from visitreport.middleware.cors import get_cors_middleware
    from visitreport.middleware.rate_limit import limiter

    # Import routes
    from visitreport.api.v1.routes import health_router, reports_router

    from visitreport.services.background.scheduler import create_report_scheduler
except Exception as e:
    print(f"🚨 FATAL STARTUP ERROR: {e}", file=sys.stderr)
    print(f"Traceback:\n{traceback.format_exc()}", file=sys.stderr)
    sys.exit(1)

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)

# ============================================================================
# SENTRY ERROR TRACKING
# ============================================================================

if settings.sentry_dsn:
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of requests for performance monitoring
            integrations=[
                FastApiIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
            ]
        )
        logger.info("✅ Sentry error tracking initialized")
    except Exception as e:
        logger.warning(f"⚠️  Failed to initialize Sentry: {e}")
else:
    logger.info("ℹ️  Sentry not configured (SENTRY_DSN not set)")


# ============================================================================
# LIFECYCLE MANAGEMENT
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    logger.info("=" * 80)
    logger.info("Starting Site Visit Report Bridge")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Port: {settings.port}")
    logger.info(f"Filter policy: {settings.filter_policy.value}")

    await dependencies.initialize_clients()

    scheduler = None
    if settings.report_enabled:
        scheduler = create_report_scheduler(
            await dependencies.get_orchestrator(),
            settings.report_cron,
            settings.report_timezone
        )
        scheduler.start()
        logger.info("✅ Daily report scheduler started")
    else:
        logger.info("⚠️ Daily report scheduler: Disabled")

    logger.info("=" * 80)
    logger.info("✅ Application started successfully")
    logger.info("=" * 80)

    yield

    # Shutdown
    logger.info("Shutting down application...")

    if scheduler:
        scheduler.shutdown(wait=False)
    await dependencies.shutdown_clients()
    logger.info("✅ Application shutdown complete")


# ============================================================================
# APP INITIALIZATION
# ============================================================================

app = FastAPI(
    title="Site Visit Report API",
    description="Scheduled and on-demand site visit reports by email and WhatsApp",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,  # Disable docs in production
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# ============================================================================
# RATE LIMITING
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
logger.info("✅ Rate limiting enabled")

# ============================================================================
# MIDDLEWARE
# ============================================================================

# CORS
cors_middleware, cors_config = get_cors_middleware()
app.add_middleware(cors_middleware, **cors_config)

# Request logging
app.add_middleware(RequestLoggingMiddleware)

# Global error handler (must be last)
app.add_middleware(ErrorHandlerMiddleware)

# ============================================================================
# ROUTES
# ============================================================================

app.include_router(health_router)
app.include_router(reports_router)

# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
