"""
Report pipeline errors.

Routes map ReportValidationError to 400 and everything else to 500.
"""
from typing import Optional


class ReportError(Exception):
    """Base class for report pipeline failures."""


class ReportValidationError(ReportError):
    """Caller supplied a missing or malformed field. Never retried."""


class StoreError(ReportError):
    """Reading visits from the document store failed."""


class DeliveryError(ReportError):
    """An email or WhatsApp send was rejected upstream."""

    def __init__(self, channel: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.channel = channel
        self.status_code = status_code
