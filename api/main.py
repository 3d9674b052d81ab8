"""
api/main.py — FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atlas.config import settings
from atlas.db.session import check_connection
from atlas.qualification.errors import (
    GenerationFailure,
    MetricsUnavailable,
    ProspectNotFound,
    QualificationError,
    ValidationError,
)
from api.endpoints.prospect_routes import router as prospect_router
from api.endpoints.qualification_routes import router as qualification_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("api")


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown logic."""
    check_connection()
    yield
    logger.info("Application shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Atlas Social Studio CRM",
    description=(
        "Prospect qualification and lead scoring for a social-media marketing "
        "agency: AI and rule-based evaluation, rapid checklist scoring and "
        "outreach pipeline tracking."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error mapping ─────────────────────────────────────────────────────────────

_ERROR_STATUS = {
    ValidationError: 422,
    ProspectNotFound: 404,
    MetricsUnavailable: 424,
    GenerationFailure: 502,
}


@app.exception_handler(QualificationError)
async def qualification_error_handler(request: Request, exc: QualificationError):
    status_code = _ERROR_STATUS.get(type(exc), 500)
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})


# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(qualification_router, prefix="/qualification", tags=["Qualification"])
app.include_router(prospect_router, prefix="/prospects", tags=["Prospects"])


# ── Health check ─────────────────────────────────────────────────────────────

@app.get("/health", tags=["System"])
def health_check():
    """Returns service liveness status."""
    return {"status": "ok", "service": "atlas-crm"}


@app.get("/", tags=["System"])
def root():
    return {
        "message": "Atlas Social Studio CRM is running.",
        "docs": "/docs",
        "evaluator": settings.evaluator_backend,
    }
