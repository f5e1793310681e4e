import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tuvung.core.config import settings
from tuvung.api.v1.api import api_router
from tuvung.db.base import Base
from tuvung.db.session import engine

# --- Logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.PROJECT_NAME.capitalize()} API",
    openapi_url="/api/v1/openapi.json",
)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    if not value.startswith("http"):
        value = f"https://{value}"
    return value.rstrip("/")


def _build_cors_origins() -> list[str]:
    origins = {_sanitize_origin(o) for o in settings.BACKEND_CORS_ORIGINS}

    origins.add(_sanitize_origin(os.getenv("VERCEL_URL")))

    additional = os.getenv("ADDITIONAL_CORS_ORIGINS")
    if additional:
        for origin in additional.split(","):
            origins.add(_sanitize_origin(origin))

    allow_origins = sorted({origin for origin in origins if origin})
    logger.info("CORS origins: %s", allow_origins)
    return allow_origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type", "X-Access-Token"],
)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup():
    if settings.GATEWAY_BACKEND != "sql":
        logger.info("Gateway backend '%s': skipping table creation.", settings.GATEWAY_BACKEND)
        return
    logger.info("Checking and creating database tables (%s)...", settings.ENVIRONMENT)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready.")


@app.get("/")
def read_root():
    return {"message": "Welcome to Tuvung API v1!"}
