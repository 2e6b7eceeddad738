"""
Initialize the identity database
Run this script once to set up the tables, or again to sweep stale OTPs
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from chat_identity.config import settings
from chat_identity.database import SessionLocal, engine, Base
from chat_identity.models import Account, OTPChallenge
from chat_identity.services.otp_service import OTPService


def init_database():
    """Create tables and clear out expired OTP challenges"""

    print("=" * 60)
    print(f"{settings.APP_NAME} - Database Initialization")
    print("=" * 60)

    print("\n📦 Creating database tables...")
    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating tables: {str(e)}")
        return

    db = SessionLocal()

    try:
        swept = OTPService(db).sweep_expired()
        print(f"\n🧹 Removed {swept} expired OTP challenges")
        print(f"👤 Accounts: {db.query(Account).count()}")
        print(f"🔐 Live OTP challenges: {db.query(OTPChallenge).count()}")
        print("\n🚀 You can now start the backend server:")
        print("   uvicorn chat_identity.main:app --reload\n")

    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        db.rollback()

    finally:
        db.close()


if __name__ == "__main__":
    init_database()
