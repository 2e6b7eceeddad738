"""
Models package - Import all SQLAlchemy models here
"""

from .account import Account
from .otp import OTPChallenge

__all__ = [
    "Account",
    "OTPChallenge",
]
