"""
Authentication Service
Session facade used by the API and by other subsystems: password and OTP
signup/login, token refresh and bearer token resolution.
"""

import logging
from datetime import datetime, timezone
from typing import NamedTuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.account import Account
from ..utils.errors import (
    ConflictError,
    InvalidError,
    InvalidTokenError,
    NotFoundError,
    OTPError,
    UnauthorizedError,
)
from ..utils.security import TokenIssuer, hash_password, verify_password
from .identity_service import IdentifierKind, IdentityResolver, resolve_identifier
from .otp_service import OTPService

logger = logging.getLogger(__name__)


class SignupResult(NamedTuple):
    token: str
    account_id: str
    requires_otp_verification: bool = False


class LoginResult(NamedTuple):
    access_token: str
    refresh_token: str
    profile_complete: bool


class RefreshResult(NamedTuple):
    access_token: str
    refresh_token: str


class AuthService:
    def __init__(self, db: Session, otp_service: OTPService, token_issuer: TokenIssuer):
        self.db = db
        self.otp_service = otp_service
        self.token_issuer = token_issuer
        self.resolver = IdentityResolver(db)

    # ------------------------ Email + password ------------------------

    async def signup_with_password(self, email: str, password: str, full_name: str) -> SignupResult:
        email = self._require_identifier(email, IdentifierKind.EMAIL)
        self._require(password, "Password")
        self._require(full_name, "Full name")

        if self.db.query(Account).filter(Account.email == email).first():
            raise ConflictError(f"Account with email {email} already exists")

        account = Account(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name.strip(),
            otp_verified=True,  # email accounts skip OTP
        )
        self._save_new(account, f"Account with email {email} already exists")

        token = self.token_issuer.issue_access_token(email)
        logger.info(f"User {email} successfully signed up")
        return SignupResult(token=token, account_id=account.id, requires_otp_verification=False)

    async def login_with_password(self, email: str, password: str) -> LoginResult:
        email = self._require_identifier(email, IdentifierKind.EMAIL)

        try:
            account = self.resolver.find_by_email(email)
        except NotFoundError as e:
            logger.info(f"Sign in refused for unknown email {email}")
            raise UnauthorizedError("Invalid email or password") from e

        if not verify_password(password or "", account.password_hash):
            logger.info(f"Sign in refused for {email}: password mismatch")
            raise UnauthorizedError("Invalid email or password")

        account.last_login = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"User {email} successfully signed in")
        return self._login_result(email, account)

    # ------------------------ Phone + OTP ------------------------

    async def signup_with_otp(self, phone_number: str, full_name: str, otp_code: str) -> LoginResult:
        phone_number = self._require_identifier(phone_number, IdentifierKind.PHONE)
        self._require(full_name, "Full name")

        await self._verify_otp(phone_number, otp_code)

        if self.resolver.get_by_phone(phone_number):
            raise ConflictError(f"User with phone number {phone_number} already exists")

        account = Account(
            phone_number=phone_number,
            full_name=full_name.strip(),
            is_online=True,
            otp_verified=True,
            last_login=datetime.now(timezone.utc),
        )
        self._save_new(account, f"User with phone number {phone_number} already exists")
        self.otp_service.delete_verified(phone_number)

        logger.info(f"User {phone_number} successfully signed up with OTP")
        return LoginResult(
            access_token=self.token_issuer.issue_access_token(phone_number),
            refresh_token=self.token_issuer.issue_refresh_token(phone_number),
            profile_complete=False,
        )

    async def login_with_otp(self, phone_number: str, otp_code: str) -> LoginResult:
        phone_number = self._require_identifier(phone_number, IdentifierKind.PHONE)

        await self._verify_otp(phone_number, otp_code)

        account = self.resolver.get_by_phone(phone_number)
        if not account:
            raise NotFoundError("User not found. Please sign up first.")

        account.is_online = True
        account.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.otp_service.delete_verified(phone_number)

        logger.info(f"User {phone_number} successfully logged in with OTP")
        return self._login_result(phone_number, account)

    async def link_phone(self, account: Account, phone_number: str, otp_code: str) -> Account:
        """Attach an OTP-verified phone number to an existing account."""
        phone_number = self._require_identifier(phone_number, IdentifierKind.PHONE)

        await self._verify_otp(phone_number, otp_code)

        owner = self.resolver.get_by_phone(phone_number)
        if owner and owner.id != account.id:
            raise ConflictError("Phone number already registered to another user")

        account.phone_number = phone_number
        self.otp_service.mark_phone_verified(account)
        self.db.commit()
        self.otp_service.delete_verified(phone_number)

        logger.info(f"Account {account.id} phone number updated and OTP verified")
        return account

    # ------------------------ Tokens ------------------------

    async def refresh(self, refresh_token: str) -> RefreshResult:
        """Mint a new access token. Failures are final: the caller must sign in again."""
        try:
            access_token = self.token_issuer.renew_from_refresh(refresh_token)
        except InvalidTokenError as e:
            logger.warning(f"Error refreshing token: {e.message}")
            raise UnauthorizedError("Invalid refresh token") from e

        return RefreshResult(
            access_token=access_token,
            refresh_token=self.token_issuer.strip_prefix(refresh_token),
        )

    def resolve_bearer(self, authorization: str) -> Account:
        """Turn a bearer header value into the Account it identifies."""
        try:
            identifier = self.token_issuer.decode_claim(authorization)
        except InvalidTokenError as e:
            raise UnauthorizedError("Could not validate credentials") from e
        return self.resolver.find_by_identifier(identifier)

    # ------------------------ Internals ------------------------

    async def _verify_otp(self, phone_number: str, otp_code: str) -> None:
        try:
            await self.otp_service.verify(phone_number, otp_code)
        except OTPError as e:
            logger.warning(f"OTP check failed for {phone_number}: {e.reason} ({e.message})")
            raise UnauthorizedError(f"Invalid or expired OTP: {e.message}") from e

    def _login_result(self, identifier: str, account: Account) -> LoginResult:
        return LoginResult(
            access_token=self.token_issuer.issue_access_token(identifier),
            refresh_token=self.token_issuer.issue_refresh_token(identifier),
            profile_complete=self.resolver.is_profile_complete(account),
        )

    def _save_new(self, account: Account, conflict_message: str) -> None:
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same identifier
            self.db.rollback()
            raise ConflictError(conflict_message) from e
        self.db.refresh(account)

    @staticmethod
    def _require(value: str, field: str) -> None:
        if not value or not value.strip():
            raise InvalidError(f"{field} is required")

    @staticmethod
    def _require_identifier(raw: str, kind: IdentifierKind) -> str:
        identifier = resolve_identifier(raw)
        if identifier.kind is not kind:
            raise InvalidError(f"Expected {kind.value} but got a {identifier.kind.value}")
        return identifier.value
