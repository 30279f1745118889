import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from trustie import __version__
from trustie.api.routes import router
from trustie.config import get_settings
from trustie.errors import ConfigurationError, ValidationError
from trustie.logging_config import configure_logging
from trustie.services.rankings import InMemoryRankingsStore
from trustie.services.trust.misconceptions import get_misconception_table

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Everything BEFORE 'yield' runs once on startup, everything after on shutdown.
#
# Startup:
# - Configure logging
# - Load the misconception table (a broken table should fail the boot,
#   not the first request)
# - Warn loudly if the API key is missing; the server still starts and
#   backend-dependent endpoints answer 500 until it is set
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)

    table = get_misconception_table()
    logger.info(f"Misconception table v{table.version} ready ({len(table)} entries)")

    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY is not set; verify/ask/search/rephrase will fail until it is configured")

    yield

    logger.info("Shutting down")


app = FastAPI(
    title="Trustie",
    description="Claim verification and trust scoring for AI-generated text",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rankings live for the lifetime of the process (reset on restart)
app.state.rankings_store = InMemoryRankingsStore(
    contradiction_penalty=get_settings().ranking_contradiction_penalty,
)

app.include_router(router)


# =============================================================================
# ERROR HANDLERS: every non-2xx response is {"error": "..."}
# =============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Malformed request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "API key not configured"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
