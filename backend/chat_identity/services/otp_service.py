"""
OTP Service
Owns the one-time-passcode challenge lifecycle for phone numbers:
generate, verify, resend, consume and expire.
"""

import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models.account import Account
from ..models.otp import OTPChallenge
from ..utils.errors import (
    InvalidOTPCodeError,
    OTPExpiredError,
    OTPNotFoundError,
    OTPThrottledError,
)
from ..utils.helpers import send_otp_sms
from .identity_service import IdentityResolver

logger = logging.getLogger(__name__)

SmsSender = Callable[[str, str], Awaitable[object]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp_code() -> str:
    # 6-digit numeric, zero padded
    return f"{secrets.randbelow(1_000_000):06d}"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class OTPService:
    def __init__(
        self,
        db: Session,
        sms_sender: Optional[SmsSender] = None,
        clock: Optional[Callable[[], datetime]] = None,
        code_generator: Optional[Callable[[], str]] = None,
        ttl_seconds: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.sms_sender = sms_sender or send_otp_sms
        self.clock = clock or utc_now
        self.code_generator = code_generator or generate_otp_code
        self.ttl = timedelta(
            seconds=settings.OTP_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        )
        self.max_attempts = settings.OTP_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.resolver = IdentityResolver(db)

    # ------------------------ Issuing ------------------------

    async def generate(self, phone_number: str) -> str:
        """
        Replace any challenge for the phone with a fresh one and dispatch the code.

        The code is returned for internal callers only. SMS failures are logged,
        the challenge stays in place and can be resent.
        """
        code = self.code_generator()
        self._replace_challenge(phone_number, code)

        try:
            await self.sms_sender(phone_number, code)
        except Exception as e:
            logger.error(f"Failed to dispatch OTP to {phone_number}: {e}")

        logger.info(f"OTP generated for phone number: {phone_number}")
        return code

    async def resend(self, phone_number: str) -> str:
        """Unconditionally restart the challenge. No cooldown is applied here."""
        return await self.generate(phone_number)

    def _replace_challenge(self, phone_number: str, code: str) -> None:
        # One retry covers a concurrent generate slipping its insert in between
        for attempt in range(2):
            now = self.clock()
            self.db.query(OTPChallenge).filter(
                OTPChallenge.phone_number == phone_number
            ).delete(synchronize_session=False)
            self.db.add(OTPChallenge(
                phone_number=phone_number,
                code=code,
                created_at=now,
                expires_at=now + self.ttl,
                verified=False,
                attempts=0,
                max_attempts=self.max_attempts,
            ))
            try:
                self.db.commit()
                return
            except IntegrityError:
                self.db.rollback()
                if attempt:
                    raise
                logger.warning(f"Concurrent OTP issue for {phone_number}, retrying")

    # ------------------------ Verification ------------------------

    async def verify(self, phone_number: str, code: str) -> bool:
        """
        Check a code against the live challenge.

        Raises OTPNotFoundError, OTPExpiredError, OTPThrottledError or
        InvalidOTPCodeError. Every verify that reaches the comparison is charged
        an attempt, including successful ones. A challenge replaced by a
        concurrent generate/resend after it was read counts as not found.
        """
        challenge = self.get_challenge(phone_number)
        if not challenge:
            raise OTPNotFoundError()

        challenge_id = challenge.id
        expected_code = challenge.code
        max_attempts = challenge.max_attempts

        if self.clock() > _as_utc(challenge.expires_at):
            self._delete(challenge_id, expected_code)
            logger.info(f"OTP for {phone_number} expired")
            raise OTPExpiredError()

        if challenge.attempts >= max_attempts:
            self._delete(challenge_id, expected_code)
            logger.info(f"OTP for {phone_number} exhausted its attempts")
            raise OTPThrottledError()

        attempts = self._charge_attempt(challenge_id, expected_code)

        if hmac.compare_digest(expected_code.encode(), (code or "").encode()):
            marked = self._same_challenge(challenge_id, expected_code).update(
                {OTPChallenge.verified: True}, synchronize_session=False
            )
            if not marked:
                self.db.rollback()
                raise OTPNotFoundError()
            account = self.resolver.get_by_phone(phone_number)
            if account:
                self.mark_phone_verified(account)
            self.db.commit()
            logger.info(f"OTP verified successfully for phone number: {phone_number}")
            return True

        account = self.resolver.get_by_phone(phone_number)
        if account:
            self.revoke_phone_verification(account)

        if attempts >= max_attempts:
            self._same_challenge(challenge_id, expected_code).delete(synchronize_session=False)
            self.db.commit()
            logger.warning(f"OTP for {phone_number} terminated after {attempts} failed attempts")
            raise OTPThrottledError()

        self.db.commit()
        logger.info(f"Invalid OTP for {phone_number} (attempt {attempts}/{max_attempts})")
        raise InvalidOTPCodeError()

    def _same_challenge(self, challenge_id: int, code: str):
        # Pin both id and code so a replacement row is never touched
        return self.db.query(OTPChallenge).filter(
            OTPChallenge.id == challenge_id,
            OTPChallenge.code == code,
        )

    def _charge_attempt(self, challenge_id: int, code: str) -> int:
        """Atomically increment the attempt counter and return the new value."""
        updated = self._same_challenge(challenge_id, code).filter(
            OTPChallenge.attempts < OTPChallenge.max_attempts,
        ).update(
            {OTPChallenge.attempts: OTPChallenge.attempts + 1},
            synchronize_session=False,
        )
        self.db.commit()

        attempts = self.db.query(OTPChallenge.attempts).filter(
            OTPChallenge.id == challenge_id,
            OTPChallenge.code == code,
        ).scalar()

        if attempts is None:
            # Swept or replaced while we were looking at it
            raise OTPNotFoundError()
        if not updated:
            # A racing verify used up the last attempt
            self._delete(challenge_id, code)
            raise OTPThrottledError()
        return attempts

    # ------------------------ Account transitions ------------------------

    def mark_phone_verified(self, account: Account) -> None:
        """Correct code: the owning account's phone counts as verified."""
        account.otp_verified = True
        logger.info(f"Account {account.id} OTP verified")

    def revoke_phone_verification(self, account: Account) -> None:
        """Wrong code: any earlier verification of the owning account is revoked."""
        account.otp_verified = False
        logger.info(f"Account {account.id} OTP verification revoked after a wrong code")

    # ------------------------ Housekeeping ------------------------

    def get_challenge(self, phone_number: str) -> Optional[OTPChallenge]:
        # Always re-read the row; another session may have charged attempts
        return self.db.query(OTPChallenge).filter(
            OTPChallenge.phone_number == phone_number
        ).populate_existing().first()

    def delete_verified(self, phone_number: str) -> None:
        """Remove a consumed challenge. Safe to call when nothing is left."""
        self.db.query(OTPChallenge).filter(
            OTPChallenge.phone_number == phone_number
        ).delete(synchronize_session=False)
        self.db.commit()

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every challenge past its expiry, return how many went."""
        now = now or self.clock()
        deleted = self.db.query(OTPChallenge).filter(
            OTPChallenge.expires_at < now
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def _delete(self, challenge_id: int, code: str) -> None:
        self._same_challenge(challenge_id, code).delete(synchronize_session=False)
        self.db.commit()
