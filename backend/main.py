"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from DB2ERD.config import load_settings
from DB2ERD.utils.logging import setup_logging

from backend.config import settings
from backend.api.routes import analysis

# Same handlers and format as the DB2ERD library so analyzer logs interleave with request logs
_analyzer_settings = load_settings(settings.db2erd_config_path)
setup_logging(
    level=_analyzer_settings.log_level,
    format_type=_analyzer_settings.log_format,
    log_to_file=_analyzer_settings.log_to_file,
    log_file=_analyzer_settings.log_file,
)

# Disable uvicorn access logs (we use our own)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    logger.info(f"{settings.api_title} v{settings.api_version} ready")
    yield
    logger.info("Shutting down")

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and one per response with its duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "unknown"
        logger.debug(f"{request.method} {request.url.path} from {client}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
        return response


app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        workers=1,
        access_log=False
    )
