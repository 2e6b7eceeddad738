from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models.account import Account
from .services.auth_service import AuthService
from .services.otp_service import OTPService
from .utils.errors import UnauthorizedError
from .utils.security import TokenConfig, TokenIssuer


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built once from settings."""
    return TokenIssuer(TokenConfig.from_settings(settings))


def get_otp_service(db: Session = Depends(get_db)) -> OTPService:
    return OTPService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, otp_service, token_issuer)


def get_current_account(
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Account:
    """Resolve the Authorization header to the calling account"""
    if not authorization:
        raise UnauthorizedError("Not authenticated")
    return auth_service.resolve_bearer(authorization)
