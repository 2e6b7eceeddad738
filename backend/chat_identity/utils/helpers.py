import asyncio
import logging

import requests

from ..config import settings

logger = logging.getLogger(__name__)


async def send_otp_sms(phone_number: str, otp_code: str) -> dict:
    """Send OTP via the configured SMS provider"""
    message = (
        f"Your verification code is: {otp_code}. "
        f"Valid for {max(settings.OTP_TTL_SECONDS // 60, 1)} minutes. Do not share this code."
    )

    if settings.SMS_PROVIDER == "console":
        # Development provider: the code only goes to the log
        logger.info(f"[OTP SMS] {phone_number} => {message}")
        return {"success": True, "provider": "console", "mobile": phone_number}

    if not settings.SMS_API_URL or not settings.SMS_API_KEY:
        raise RuntimeError("SMS gateway configuration is missing (SMS_API_URL/SMS_API_KEY)")

    payload = {
        "recipient": phone_number,
        "sender_id": settings.SMS_SENDER_ID,
        "message": message,
    }
    headers = {
        "Accept": "application/json",
        "Authorization": f"Bearer {settings.SMS_API_KEY}",
        "Content-Type": "application/json",
    }

    # Use asyncio to make non-blocking request
    loop = asyncio.get_running_loop()
    response = await loop.run_in_executor(
        None,
        lambda: requests.post(
            settings.SMS_API_URL,
            json=payload,
            headers=headers,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        ),
    )

    if response.status_code >= 400:
        raise RuntimeError(f"SMS gateway error {response.status_code}: {response.text}")

    logger.debug(f"SMS gateway accepted message for {phone_number}")
    return {"success": True, "provider": "http", "mobile": phone_number, "response": response.text}
