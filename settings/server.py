from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.gzip import GZipMiddleware
from datetime import datetime, timezone
import logging
from api.competency import catalog_router
from api.competency.exceptions import CatalogError
from settings.config import get_settings
from settings.datadog_logger import DatadogLogger
from settings.service_tracer import initialize_tracer
from middleware.request_logging_middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

description = """
#### Competency Catalog APIs:
   Lifecycle and query APIs for the curriculum competency taxonomy.
"""

catalog_app = FastAPI(
    title="Competency Catalog",
    description=description,
    version="1.0.0",
    root_path="/api",
    docs_url="/docs/catalog",
)


@catalog_app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "failure",
            "data": None,
            "errors": [exc.detail]
        }
    )


@catalog_app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "status": "failure",
            "data": None,
            "errors": errors,
            "error_code": "VALIDATION_FAILED"
        }
    )


@catalog_app.exception_handler(CatalogError)
async def catalog_exception_handler(request, exc: CatalogError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} rejected: {exc.error_code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "failure",
            "data": None,
            "errors": [exc.message],
            "error_code": exc.error_code,
            "details": exc.extra
        }
    )


catalog_app.add_middleware(GZipMiddleware, minimum_size=1000)
catalog_app.add_middleware(RequestLoggingMiddleware)

catalog_app.include_router(catalog_router)


@catalog_app.get('/')
def read_root():
    """
    Root endpoint to check if the Competency Catalog API is running.
    """
    return {"message": "Competency Catalog API is running successfully!"}


@catalog_app.get('/health')
def health_check():
    """
    Lightweight liveness probe; does not touch the database.
    """
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


def configure_logging():
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())
    if not root_logger.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        root_logger.addHandler(stream_handler)

    if settings.datadog_api_key:
        dd_handler = DatadogLogger(
            service=settings.service_name,
            api_key=settings.datadog_api_key,
            env=settings.environment,
            include_loggers=settings.datadog_logger_prefixes
        )
        dd_handler.setLevel(logging.INFO)
        root_logger.addHandler(dd_handler)

    # Ensure uvicorn.access logs propagate to root logger (no direct handler)
    uvicorn_access_logger = logging.getLogger("uvicorn.access")
    uvicorn_access_logger.setLevel(logging.INFO)
    uvicorn_access_logger.propagate = True


configure_logging()

if get_settings().enable_tracing:
    initialize_tracer(get_settings().service_name, catalog_app, get_settings().otlp_endpoint)
