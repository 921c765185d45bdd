from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select

from asha_assist.config import get_settings
from asha_assist.database import Base, async_session, engine
from asha_assist.exceptions import AshaAssistError
from asha_assist.logging_config import configure_logging
from asha_assist.middleware.security_gate import SecurityGateMiddleware
from asha_assist.routers import admin, patients, visits
from asha_assist.routers import auth as auth_router
from asha_assist.security.policy import default_policy
from asha_assist.security.principal import Role
from asha_assist.security.tokens import get_token_engine
from asha_assist.services.sms_service import get_sms_client

logger = structlog.get_logger(__name__)


async def seed_admin_user():
    """Create the configured admin account if it doesn't exist. Idempotent."""
    from asha_assist.models.user import User
    from asha_assist.security.passwords import hash_password

    settings = get_settings()
    username = settings.bootstrap_admin_username
    if not username or not settings.bootstrap_admin_password:
        return

    async with async_session() as session:
        existing = await session.scalar(select(User).where(User.username == username))
        if not existing:
            session.add(
                User(
                    username=username,
                    full_name="Administrator",
                    password_hash=hash_password(settings.bootstrap_admin_password),
                    role=Role.ADMIN.value,
                )
            )
            logger.info("admin_seeded", username=username)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    # Signing key and SMS credentials are resolved now so bad config aborts startup
    get_token_engine()
    get_sms_client()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin_user()
    yield
    await engine.dispose()


app = FastAPI(
    title="Asha Assist",
    description="Field health-worker backend: session tokens and OTP-verified visits",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AshaAssistError)
async def asha_assist_error_handler(request: Request, exc: AshaAssistError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Added first so it sits inside CORS; denials still carry CORS headers.
app.add_middleware(SecurityGateMiddleware, policy=default_policy)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(visits.router, prefix="/api/visits", tags=["Visits"])
app.include_router(patients.router, prefix="/api/patients", tags=["Patients"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "asha-assist"}
