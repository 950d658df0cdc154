import logging
import time
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import error_response, http_exception_handler
from .observability import clear_context, get_logger, sanitize_headers, set_request_id, set_service, setup_logging
from .routers import video_analysis, video_link
from .settings import cors_origins_list, get_settings

settings = get_settings()
setup_logging(level=settings.log_level)
logger = get_logger(__name__)

app = FastAPI(title="Video Analysis Backend")
app.add_exception_handler(HTTPException, http_exception_handler)

# Register routers
app.include_router(video_analysis.router)
app.include_router(video_link.router)


async def request_validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response("validation_error", message=str(exc), status_code=422)


app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(settings),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    start = time.perf_counter()
    request_id = request.headers.get("X-Request-Id") or str(uuid4())
    set_service("web")
    set_request_id(request_id)

    logger.info(
        "http.request",
        extra={
            "event": "http.request",
            "http_method": request.method,
            "path": request.url.path,
            "query": str(request.url.query) if request.url.query else None,
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("User-Agent"),
            "headers": sanitize_headers(request.headers) if logger.isEnabledFor(logging.DEBUG) else None,
        },
    )

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.exception(
            "http.exception",
            extra={
                "event": "http.exception",
                "http_method": request.method,
                "path": request.url.path,
                "duration_ms": duration_ms,
            },
        )
        clear_context()
        raise

    duration_ms = int((time.perf_counter() - start) * 1000)
    response.headers["X-Request-Id"] = request_id
    logger.info(
        "http.response",
        extra={
            "event": "http.response",
            "http_method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    clear_context()
    return response


@app.get("/healthz", tags=["health"])
async def healthz():
    return {"status": "ok"}
