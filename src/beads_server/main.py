"""FastAPI application for beads-server"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.beads import router as beads_router
from .api.dependencies import router as dependencies_router
from .api.work import router as work_router
from .api.schemas import HealthResponse, VersionResponse
from .storage.errors import AmbiguousError, BeadError

VERSION = "0.1.0"
API_PREFIX = "/api/v1"

access_logger = logging.getLogger("beads_server.access")
logger = logging.getLogger(__name__)


def error_body(message: str, **extra) -> dict:
    body = {"error": message}
    body.update(extra)
    return body


async def handle_bead_error(request: Request, exc: BeadError):
    if isinstance(exc, AmbiguousError):
        body = error_body(exc.message, candidates=exc.candidates)
    else:
        body = error_body(exc.message)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content=error_body("; ".join(problems) or "invalid request"))


def create_app(registry) -> FastAPI:
    """Build the application serving the stores of ``registry``"""
    app = FastAPI(
        title="beads-server",
        description="Lightweight issue tracker for agents and humans",
        version=VERSION,
        docs_url="/api/docs",
        redoc_url=None,
    )
    app.state.registry = registry

    app.add_exception_handler(BeadError, handle_bead_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        access_logger.info(
            "%s %s %d %.1fms", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response

    app.include_router(beads_router, prefix=API_PREFIX, tags=["beads"])
    app.include_router(dependencies_router, prefix=API_PREFIX, tags=["dependencies"])
    app.include_router(work_router, prefix=API_PREFIX, tags=["work"])

    @app.get(f"{API_PREFIX}/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint"""
        return {"status": "ok"}

    @app.get(f"{API_PREFIX}/version", response_model=VersionResponse)
    def version():
        return {"version": VERSION}

    return app
