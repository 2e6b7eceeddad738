from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, validator

from ..config import Settings
from ..services.identity_service import IdentifierKind, resolve_identifier
from .errors import InvalidError, InvalidTokenError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_CLAIM = "email"
PHONE_CLAIM = "phone"

_CLAIM_FOR_KIND = {
    IdentifierKind.EMAIL: EMAIL_CLAIM,
    IdentifierKind.PHONE: PHONE_CLAIM,
}


def hash_password(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against hashed password, False when no hash is stored"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


class TokenConfig(BaseModel):
    """Signing key and lifetimes shared by access and refresh tokens."""

    secret_key: str
    algorithm: str = "HS256"
    issuer: str = "chat-identity"
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=30)
    bearer_prefix: str = "Bearer "

    class Config:
        frozen = True

    @validator("secret_key")
    def validate_secret_key(cls, v):
        if not v:
            raise ValueError("secret_key must not be empty")
        return v

    @validator("refresh_ttl")
    def validate_ttl_ratio(cls, v, values):
        access_ttl = values.get("access_ttl")
        if access_ttl is not None and access_ttl * 10 > v:
            raise ValueError("access_ttl must be at least ten times shorter than refresh_ttl")
        return v

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            bearer_prefix=settings.TOKEN_PREFIX,
        )


class TokenIssuer:
    """
    Mints and validates signed tokens carrying exactly one identity claim.

    Expiry is checked against wall-clock time by python-jose; the injected
    clock only drives issued-at and expiry at issuance.
    """

    def __init__(self, config: TokenConfig, clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue_access_token(self, identifier: str) -> str:
        return self._issue(identifier, self.config.access_ttl)

    def issue_refresh_token(self, identifier: str) -> str:
        return self._issue(identifier, self.config.refresh_ttl)

    def renew_from_refresh(self, refresh_token: str) -> str:
        identifier = self.decode_claim(refresh_token)
        return self.issue_access_token(identifier)

    def decode_claim(self, token: str) -> str:
        claims = self.decode(token)
        identifier = claims.get(EMAIL_CLAIM) or claims.get(PHONE_CLAIM)
        if not identifier:
            raise InvalidTokenError("Token carries no identity claim")
        return identifier

    def decode(self, token: str) -> dict:
        raw = self.strip_prefix(token)
        if not raw:
            raise InvalidTokenError("Missing token")
        try:
            return jwt.decode(
                raw,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
            )
        except JWTError as e:
            raise InvalidTokenError(f"Invalid or expired token: {e}") from e

    def strip_prefix(self, token: Optional[str]) -> str:
        token = (token or "").strip()
        prefix = self.config.bearer_prefix
        if prefix and token.lower().startswith(prefix.lower()):
            token = token[len(prefix):].strip()
        return token

    def _issue(self, identifier: str, ttl: timedelta) -> str:
        try:
            resolved = resolve_identifier(identifier)
        except InvalidError as e:
            raise InvalidTokenError("Cannot issue a token without an identifier") from e

        now = self._clock()
        to_encode = {
            "iss": self.config.issuer,
            "iat": now,
            "exp": now + ttl,
            _CLAIM_FOR_KIND[resolved.kind]: resolved.value,
        }
        return jwt.encode(to_encode, self.config.secret_key, algorithm=self.config.algorithm)
