import logging
from datetime import datetime, timezone
from pathlib import Path

import uvicorn
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from logical_brain.config import settings
from logical_brain.database import engine
from logical_brain.exceptions import LogicalBrainError, SynthesisValidationError
from logical_brain.models import biomarker, logical_analysis, protocol  # noqa: F401
from logical_brain.routers import analysis, medical_knowledge, validation
from logical_brain.seed.catalog_seed import seed_catalog

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Logical Brain API", version="0.1.0")
logger = logging.getLogger(__name__)

allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _assert_database_at_head() -> None:
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    script = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script.get_heads())

    with engine.connect() as connection:
        context = MigrationContext.configure(connection)
        current_heads = set(context.get_current_heads())

    if current_heads != expected_heads:
        raise RuntimeError(
            "Database schema is not at Alembic head. "
            "Run `alembic upgrade head` before starting the API. "
            f"Current revisions: {sorted(current_heads) or ['<none>']}, "
            f"expected: {sorted(expected_heads)}."
        )


@app.on_event("startup")
def startup_event():
    _assert_database_at_head()
    if settings.seed_catalog_on_startup:
        seed_catalog()


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": "logical-brain",
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _error_name(status_code: int) -> str:
    if status_code == 400:
        return "BadRequest"
    if status_code == 404:
        return "NotFound"
    if status_code == 422:
        return "ValidationError"
    if status_code >= 500:
        return "InternalServerError"
    return "HTTPError"


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "statusCode": exc.status_code,
            "message": str(exc.detail) if exc.detail else "Request failed",
            "error": _error_name(exc.status_code),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "statusCode": 422,
            "message": "Invalid request payload",
            "error": "ValidationError",
            "details": {"errors": exc.errors()},
        },
    )


@app.exception_handler(SynthesisValidationError)
async def synthesis_validation_handler(_: Request, exc: SynthesisValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "statusCode": 422,
            "message": exc.message,
            "error": exc.code,
            "details": exc.details,
        },
    )


@app.exception_handler(LogicalBrainError)
async def logical_brain_error_handler(_: Request, exc: LogicalBrainError):
    logger.error("%s: %s", exc.code, exc.message)
    return JSONResponse(
        status_code=500,
        content={
            "statusCode": 500,
            "message": exc.message,
            "error": exc.code,
            "details": exc.details,
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled server error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "statusCode": 500,
            "message": str(exc) or "An unexpected error occurred",
            "error": "InternalServerError",
        },
    )


app.include_router(medical_knowledge.router)
app.include_router(analysis.router)
app.include_router(validation.router)


def run():
    uvicorn.run("logical_brain.main:app", host=settings.app_host, port=settings.app_port, reload=settings.app_env == "dev")
