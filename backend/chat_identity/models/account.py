import uuid

from sqlalchemy import Column, String, Boolean, DateTime, CheckConstraint
from sqlalchemy.sql import func

from ..database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone_number = Column(String(20), unique=True, nullable=True, index=True)
    password_hash = Column(String(255), nullable=True)  # NULL for phone (OTP) accounts
    full_name = Column(String(255))
    profile_picture = Column(String(512), nullable=True)
    otp_verified = Column(Boolean, nullable=True)  # NULL = never went through OTP
    is_online = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "email IS NOT NULL OR phone_number IS NOT NULL",
            name="check_account_identifier",
        ),
    )

    def __repr__(self):
        return f"<Account {self.id} email={self.email} phone={self.phone_number}>"
