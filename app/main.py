import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.db.base import Base
from app.api.v2.api import api_router
from app.db import session as db_session

# --- Logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Learning Paths API V2",
    openapi_url="/api/v2/openapi.json",
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
    origins.add(_sanitize_origin(settings.FRONTEND_BASE_URL))
    origins.add(_sanitize_origin(os.getenv("VERCEL_URL")))

    additional = os.getenv("ADDITIONAL_CORS_ORIGINS")
    if additional:
        origins.update(_sanitize_origin(origin) for origin in additional.split(","))

    allowed = sorted(origin for origin in origins if origin)
    logger.info("CORS origins: %s", allowed)
    return allowed


app.add_middleware(
    CORSMiddleware,
    allow_origins=_build_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(api_router, prefix="/api/v2")


@app.on_event("startup")
async def startup():
    logger.info("Creating database tables if needed...")
    async with db_session.async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables are ready.")


@app.get("/")
def read_root():
    return {"message": "Welcome to the Learning Paths API V2!"}
