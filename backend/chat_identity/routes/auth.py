from fastapi import APIRouter, Depends, Header, status

from ..deps import get_auth_service, get_current_account
from ..models.account import Account
from ..schemas.account import AccountResponse
from ..schemas.auth import (
    LoginRequest,
    LoginResponse,
    OTPSignupRequest,
    SignupRequest,
    SignupResponse,
)
from ..services.auth_service import AuthService
from ..services.identity_service import is_profile_complete

router = APIRouter(prefix="/auth", tags=["Authentication"])


# Email signup
@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_202_ACCEPTED)
async def signup(data: SignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.signup_with_password(data.email, data.password, data.full_name)
    return SignupResponse(
        token=result.token,
        user_id=result.account_id,
        requires_otp_verification=result.requires_otp_verification,
    )


# Email signin
@router.post("/signin", response_model=LoginResponse, status_code=status.HTTP_202_ACCEPTED)
async def signin(data: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.login_with_password(data.email, data.password)
    return LoginResponse(
        token=result.access_token,
        refresh_token=result.refresh_token,
        is_profile_complete=result.profile_complete,
    )


# Phone signup (OTP must have been requested first)
@router.post("/signup/otp", response_model=LoginResponse, status_code=status.HTTP_202_ACCEPTED)
async def signup_with_otp(data: OTPSignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.signup_with_otp(data.phone_number, data.full_name, data.otp_code)
    return LoginResponse(
        token=result.access_token,
        refresh_token=result.refresh_token,
        is_profile_complete=result.profile_complete,
    )


# Phone login
@router.post("/login/otp", response_model=LoginResponse, status_code=status.HTTP_202_ACCEPTED)
async def login_with_otp(data: OTPSignupRequest, auth_service: AuthService = Depends(get_auth_service)):
    result = await auth_service.login_with_otp(data.phone_number, data.otp_code)
    return LoginResponse(
        token=result.access_token,
        refresh_token=result.refresh_token,
        is_profile_complete=result.profile_complete,
    )


# Exchange a refresh token for a new access token
@router.post("/refresh", response_model=LoginResponse)
async def refresh_token(
    refresh_token: str = Header(..., alias="Refresh-Token"),
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.refresh(refresh_token)
    return LoginResponse(
        token=result.access_token,
        refresh_token=result.refresh_token,
        is_profile_complete=True,  # a valid refresh implies a finished signup
    )


# Get current user info
@router.get("/me", response_model=AccountResponse)
async def get_me(current_account: Account = Depends(get_current_account)):
    return account_response(current_account)


def account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        email=account.email,
        phone_number=account.phone_number,
        full_name=account.full_name,
        profile_picture=account.profile_picture,
        otp_verified=account.otp_verified,
        is_online=bool(account.is_online),
        is_profile_complete=is_profile_complete(account),
        last_login=account.last_login,
        created_at=account.created_at,
    )
