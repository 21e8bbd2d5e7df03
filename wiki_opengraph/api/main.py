import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from wiki_opengraph.adapters.sqlite.migrator import SQLiteMigrator
from wiki_opengraph.api.deps import get_rules, get_settings
from wiki_opengraph.api.routes import public_ssr

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Fail fast on invalid rules
    try:
        get_rules(settings)
    except (FileNotFoundError, ValueError):
        logger.critical("Rules load failed from %s", settings.rules_path, exc_info=True)
        raise
    logger.info("Rules loaded from %s", settings.rules_path)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path).run_migrations()

    yield


app = FastAPI(
    title="Wiki OpenGraph",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(public_ssr.router, prefix="", tags=["SSR"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "wiki-opengraph"}
