"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from concerndesk.api.router import api_router
from concerndesk.config import get_settings
from concerndesk.db.engine import create_tables, engine
from concerndesk.errors import ConcernDeskError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await create_tables()
    logger.info("ConcernDesk API started")
    yield
    await engine.dispose()


app = FastAPI(
    title="ConcernDesk",
    description="Support-ticket (concern) backend for the scholarship management system.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(ConcernDeskError)
async def concerndesk_error_handler(request: Request, exc: ConcernDeskError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
