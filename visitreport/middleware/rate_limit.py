"""
Rate Limiting Middleware
Keeps the manual report endpoint from flooding the mail and WhatsApp providers
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

# Create limiter instance
# Uses client IP address as key for rate limiting
limiter = Limiter(key_func=get_remote_address)
