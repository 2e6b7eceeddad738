from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from . import __version__
from .config import settings
from .database import engine, Base
from .limiter import limiter
from .middleware.security import SecurityHeadersMiddleware
from .routes import auth, otp, users
from .services.otp_cleanup import otp_cleanup_service
from .utils.errors import IdentityError
from .utils.logger import configure_logging

# Import all models (required for SQLAlchemy to create tables)
from .models import Account, OTPChallenge  # noqa: F401

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Identity resolution and session issuance for the chat backend",
    version=__version__,
    docs_url="/api/docs" if settings.ENABLE_API_DOCS else None,
    redoc_url="/api/redoc" if settings.ENABLE_API_DOCS else None
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(IdentityError)
async def identity_error_handler(request: Request, exc: IdentityError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)
app.add_middleware(SecurityHeadersMiddleware)

# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(otp.router, prefix="/api")
app.include_router(users.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Configure logging, create tables and start the OTP sweeper"""
    configure_logging()
    Base.metadata.create_all(bind=engine)

    if settings.is_production and settings.JWT_SECRET_KEY == "change-me-in-production-chat-identity-secret":
        logger.error("JWT_SECRET_KEY is still the development default")

    print(f"✅ {settings.APP_NAME} Started Successfully")
    print(f"📍 Environment: {settings.APP_ENV}")
    print(f"📚 API Documentation: {'ENABLED' if settings.ENABLE_API_DOCS else 'DISABLED'}")

    await otp_cleanup_service.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    await otp_cleanup_service.stop()
    print(f"🛑 {settings.APP_NAME} Shutting Down...")


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": __version__,
        "status": "running",
        "docs": "/api/docs" if settings.ENABLE_API_DOCS else "disabled"
    }


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.APP_ENV,
    }
