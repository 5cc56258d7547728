"""
Web Vitals FastAPI Backend

Collects Core Web Vitals samples reported by the site front end and
serves aggregated summaries of them.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vitals_api.exceptions import MethodNotAllowedError, ValidationError, VitalsError
from vitals_api.models import IngestResponse, PeriodReportResponse, SummaryResponse
from vitals_api.services import VitalsService
from vitals_api.settings import settings
from vitals_api.storage import JsonFileDayLog

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global instances
service: VitalsService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global service

    logger.info(f"Starting {settings.app_name} with data directory {settings.data_dir}")

    service = VitalsService(
        JsonFileDayLog(settings.data_dir),
        default_range_days=settings.default_range_days,
        max_range_days=settings.max_range_days,
    )

    yield

    logger.info("Shutting down")
    service = None


app = FastAPI(
    title=settings.app_name,
    description="Collection and summaries of Core Web Vitals samples",
    version=settings.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# ============================================================================
# Error Handlers
# ============================================================================


def _error_response(error: VitalsError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"error": error.message}, headers=headers)


@app.exception_handler(VitalsError)
async def vitals_error_handler(request: Request, exc: VitalsError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        error: VitalsError = MethodNotAllowedError(f"Method {request.method} not allowed")
    else:
        error = VitalsError(str(exc.detail))
        error.status_code = exc.status_code
    return _error_response(error, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(ValidationError("Invalid request parameters"))


# ============================================================================
# Health & Status Routes
# ============================================================================


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


# ============================================================================
# Web Vitals Routes
# ============================================================================


@app.post("/api/vitals", response_model=IngestResponse)
async def collect_vital(request: Request):
    """
    Store one Web Vitals sample.

    The sample is appended to the store for the current UTC day.
    `name`, `id` and `value` are required; a missing `timestamp`
    is set to the time of ingestion.
    """
    if not service:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON") from e

    try:
        await service.record_event(payload)
    except VitalsError:
        raise
    except Exception as e:
        logger.error(f"Error storing metric: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e

    return IngestResponse(success=True)


@app.get("/api/vitals/summary", response_model=SummaryResponse)
async def get_vitals_summary(
    start: str | None = Query(None, description="Start date (ISO); defaults to 7 days before end"),
    end: str | None = Query(None, description="End date (ISO); defaults to now"),
    page: str | None = Query(None, description="Only include samples recorded on this page"),
):
    """
    Summarize the samples stored for a date range.

    Returns per-metric averages overall and per page. Days without
    data, or whose store cannot be read, contribute no samples.
    """
    if not service:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        return await service.summarize(start=start, end=end, page=page)
    except VitalsError:
        raise
    except Exception as e:
        logger.error(f"Error building summary: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e


@app.get("/api/analytics/web-vitals", response_model=PeriodReportResponse)
async def get_web_vitals_report(
    period: str = Query("7d", description="Reporting period: 7d, 30d or 90d"),
):
    """
    Report averages, rating shares and daily trends per metric
    for a recent period.
    """
    if not service:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        return await service.period_report(period)
    except VitalsError:
        raise
    except Exception as e:
        logger.error(f"Error building period report: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    import uvicorn

    uvicorn.run(
        "vitals_api.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
