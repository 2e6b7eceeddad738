"""
OTP Cleanup Service - Periodically removes expired OTP challenges
"""
import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal
from .otp_service import OTPService

logger = logging.getLogger(__name__)


class OTPCleanupService:
    """Background service that sweeps expired rows out of otp_challenges"""

    def __init__(
        self,
        cleanup_interval: Optional[int] = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.is_running = False
        self.cleanup_interval = cleanup_interval or settings.OTP_CLEANUP_INTERVAL_SECONDS
        self.session_factory = session_factory
        self._task = None

    async def start(self):
        """Start the cleanup loop in the background"""
        if self.is_running:
            logger.warning("OTP cleanup service already running")
            return

        self.is_running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info(f"🧹 OTP Cleanup Service: Started (every {self.cleanup_interval}s)")

    async def stop(self):
        """Stop the cleanup loop"""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("🧹 OTP Cleanup Service: Stopped")

    async def _cleanup_loop(self):
        while self.is_running:
            await self._cleanup_expired_challenges()
            await asyncio.sleep(self.cleanup_interval)

    async def _cleanup_expired_challenges(self) -> int:
        db = self.session_factory()
        try:
            deleted = OTPService(db).sweep_expired()
            if deleted:
                logger.info(f"🧹 Cleaned up {deleted} expired OTP challenges")
            else:
                logger.debug("🧹 No expired OTP challenges to clean")
            return deleted
        except Exception as e:
            logger.error(f"Error cleaning up expired OTP challenges: {e}")
            db.rollback()
            return 0
        finally:
            db.close()

    async def cleanup_now(self) -> int:
        """Force immediate cleanup (for manual trigger)"""
        logger.info("🧹 Manual OTP cleanup triggered")
        return await self._cleanup_expired_challenges()


# Global instance
otp_cleanup_service = OTPCleanupService()
