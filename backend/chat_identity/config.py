from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Chat Identity Service"
    APP_ENV: str = "development"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ENABLE_API_DOCS: bool = True

    # Database
    DATABASE_URL: str = "sqlite:///./chat_identity.db"

    # Security
    JWT_SECRET_KEY: str = "change-me-in-production-chat-identity-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "chat-identity"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60  # 1 hour
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    TOKEN_PREFIX: str = "Bearer "

    # OTP
    OTP_TTL_SECONDS: int = 120  # 2 minutes
    OTP_MAX_ATTEMPTS: int = 5
    OTP_CLEANUP_INTERVAL_SECONDS: int = 3600  # hourly sweep
    OTP_ECHO_CODE: bool = True  # never honoured when APP_ENV == "production"

    # SMS gateway (console | http)
    SMS_PROVIDER: str = "console"
    SMS_API_URL: str = ""
    SMS_API_KEY: str = ""
    SMS_SENDER_ID: str = "ChatApp"
    SMS_TIMEOUT_SECONDS: int = 10

    # Rate limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    OTP_RATE_LIMIT: str = "5/minute"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Create settings instance
settings = Settings()
