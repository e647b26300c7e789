import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dispensary.core.config import CORS_ORIGINS, DATABASE_URL, ENV
from dispensary.core.database import Base, engine
from dispensary.core.logging_setup import configure_logging
from dispensary.core.startup_checks import (
    ensure_migrations_applied,
    validate_database_environment,
    validate_session_secret,
)
from dispensary.middleware.chat_rate_limit import ChatRateLimitMiddleware
from dispensary.middleware.observability import ObservabilityMiddleware
from dispensary.middleware.user_session import UserSessionMiddleware
import dispensary.models  # garante que os models são importados antes do create_all

from dispensary.routers.age_verification import router as age_verification_router
from dispensary.routers.appointments import router as appointments_router
from dispensary.routers.auth import router as auth_router
from dispensary.routers.blog import router as blog_router
from dispensary.routers.chat import router as chat_router
from dispensary.routers.internal_metrics import router as internal_metrics_router
from dispensary.routers.notifications import router as notifications_router
from dispensary.routers.orders import router as orders_router
from dispensary.routers.preferences import router as preferences_router
from dispensary.routers.products import router as products_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Dispensary Storefront API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Ordem: o último adicionado roda primeiro (Observability -> UserSession -> RateLimit)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ChatRateLimitMiddleware)
app.add_middleware(UserSessionMiddleware)
app.add_middleware(ObservabilityMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL", "message": "Internal server error"}},
    )


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        validate_session_secret()
        if DATABASE_URL.startswith("sqlite"):
            # dev local: schema direto dos models, sem alembic
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        logger.info("%s ready env=%s", STARTUP_PREFIX, ENV)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(auth_router)
app.include_router(age_verification_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(appointments_router)
app.include_router(blog_router)
app.include_router(notifications_router)
app.include_router(preferences_router)
app.include_router(chat_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
