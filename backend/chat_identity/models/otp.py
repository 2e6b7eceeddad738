from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint

from ..database import Base


class OTPChallenge(Base):
    __tablename__ = "otp_challenges"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    verified = Column(Boolean, default=False, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    max_attempts = Column(Integer, default=5, nullable=False)

    __table_args__ = (
        CheckConstraint("attempts <= max_attempts", name="check_otp_attempts"),
        # A replaced challenge must never hand its id to the new row
        {"sqlite_autoincrement": True},
    )
