"""
FastAPI application for the City Councilor citizen portal.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.admin import router as admin_router
from api.auth import router as auth_router
from api.handlers import register_exception_handlers
from auth.config import AuthConfig
from auth.dependencies import get_user_store
from auth.seed import seed_default_admin
from config import Config

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Validate configuration on startup
Config.validate()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    logger.info(
        "Starting auth API (environment=%s, user store=%s, sms provider=%s)",
        Config.ENVIRONMENT,
        AuthConfig.AUTH_STORE,
        AuthConfig.SMS_PROVIDER,
    )
    user_store = app.dependency_overrides.get(get_user_store, get_user_store)()
    await seed_default_admin(user_store)
    yield


app = FastAPI(
    title="City Councilor Portal API",
    description="Citizen registration and authentication with SMS one-time passwords",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in Config.CORS_ORIGINS if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(admin_router, prefix="/api/admin", tags=["admin"])


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy", "environment": Config.ENVIRONMENT}
