"""
Per-client rate limiting for OTP issuance

Codes cost an SMS each, so /otp/generate and /otp/resend are capped per
remote address. Storage is in-process by default; point
RATE_LIMIT_STORAGE_URI at redis:// or memcached:// when running several workers.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    default_limits=["1000/hour"]
)
