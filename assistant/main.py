import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import api_router
from .api.deploy import router as deploy_router
from .config import get_settings
from .db import close_db, init_db
from .telegram.bot import init_bot, shutdown_bot

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    await init_bot()
    logger.info("%s started (%s)", settings.app_name, settings.environment)
    try:
        yield
    finally:
        await shutdown_bot()
        await close_db()


_docs_enabled = settings.environment.lower() != "production"
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
)
app.include_router(api_router, prefix="/api")
app.include_router(deploy_router, tags=["deploy"])


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
