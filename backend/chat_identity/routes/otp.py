from fastapi import APIRouter, Depends, Request

from ..config import settings
from ..deps import get_auth_service, get_current_account, get_otp_service
from ..limiter import limiter
from ..models.account import Account
from ..schemas.otp import ApiResponse, OTPRequest, OTPResponse, OTPVerify
from ..services.auth_service import AuthService
from ..services.otp_service import OTPService

router = APIRouter(prefix="/otp", tags=["OTP"])


def _otp_response(message: str, code: str) -> OTPResponse:
    echo = settings.OTP_ECHO_CODE and not settings.is_production
    return OTPResponse(
        success=True,
        message=message,
        expires_in=settings.OTP_TTL_SECONDS,
        code=code if echo else None,
    )


@router.post("/generate", response_model=OTPResponse)
@limiter.limit(settings.OTP_RATE_LIMIT)
async def generate_otp(request: Request, data: OTPRequest, otp_service: OTPService = Depends(get_otp_service)):
    """Send a fresh OTP to the phone number, replacing any earlier one"""
    code = await otp_service.generate(data.phone_number)
    return _otp_response(f"OTP sent successfully to {data.phone_number}", code)


@router.post("/resend", response_model=OTPResponse)
@limiter.limit(settings.OTP_RATE_LIMIT)
async def resend_otp(request: Request, data: OTPRequest, otp_service: OTPService = Depends(get_otp_service)):
    code = await otp_service.resend(data.phone_number)
    return _otp_response("OTP resent successfully", code)


@router.post("/verify", response_model=ApiResponse)
async def verify_otp(data: OTPVerify, otp_service: OTPService = Depends(get_otp_service)):
    """Check a code without consuming it; signup/login consume it afterwards"""
    await otp_service.verify(data.phone_number, data.otp_code)
    return ApiResponse(status=True, message="OTP verified successfully")


@router.post("/verify-for-user", response_model=ApiResponse)
async def verify_otp_for_user(
    data: OTPVerify,
    current_account: Account = Depends(get_current_account),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Link a verified phone number to the signed-in account"""
    await auth_service.link_phone(current_account, data.phone_number, data.otp_code)
    return ApiResponse(status=True, message="OTP verified successfully. Phone number updated.")
