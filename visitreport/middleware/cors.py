"""
CORS Configuration
Cross-Origin Resource Sharing settings for the site visit portal

Origins come from ALLOWED_ORIGINS (comma-separated). No "null" origin.
"""
from fastapi.middleware.cors import CORSMiddleware as FastAPICORSMiddleware
from visitreport.core.config import settings


def get_cors_middleware():
    """
    Returns configured CORS middleware with environment-based settings.
    """
    allowed_origins = [origin for origin in settings.cors_origins if origin != "null"]

    return FastAPICORSMiddleware, {
        "allow_origins": allowed_origins,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST"],
        "allow_headers": ["Content-Type", "Authorization", "X-Request-ID"],
        "max_age": 600,  # Cache preflight requests for 10 minutes
    }
