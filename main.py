import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from exceptions import (
    ChartCalculationError,
    EphemerisUnavailableError,
    InvalidCoordinatesError,
    InvalidDateTimeError,
    InvalidTimezoneError,
)
from routers import router

logging.basicConfig(
    level=os.environ.get("JYOTISH_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Jyotish API",
    description="Vedic (sidereal) astrology calculations using Swiss Ephemeris",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(error: str, message: str, detail=None) -> dict:
    return {"error": error, "message": message, "detail": detail}


# Exception Handlers
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions from the calculators."""
    return JSONResponse(status_code=422, content=_error_body("ValidationError", str(exc)))


@app.exception_handler(InvalidDateTimeError)
@app.exception_handler(InvalidCoordinatesError)
@app.exception_handler(InvalidTimezoneError)
async def invalid_input_handler(request: Request, exc: ValueError):
    """Handle invalid birth data."""
    return JSONResponse(status_code=422, content=_error_body(type(exc).__name__, str(exc)))


@app.exception_handler(EphemerisUnavailableError)
async def ephemeris_unavailable_handler(request: Request, exc: EphemerisUnavailableError):
    """Handle ephemeris lookup and setup failures."""
    logger.error("Ephemeris unavailable: %s", exc)
    return JSONResponse(
        status_code=503,
        content=_error_body(type(exc).__name__, str(exc),
                            {"body": exc.body, "julian_day": exc.julian_day})
    )


@app.exception_handler(ChartCalculationError)
async def chart_calculation_error_handler(request: Request, exc: ChartCalculationError):
    """Handle chart calculation errors."""
    logger.error("Chart calculation failed: %s", exc)
    return JSONResponse(status_code=500, content=_error_body(type(exc).__name__, str(exc)))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content=_error_body("ValidationError", "Request validation failed", jsonable_encoder(exc.errors()))
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other unexpected exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body("InternalServerError", "An unexpected error occurred")
    )


# Include API router
app.include_router(router, prefix="/api/v1", tags=["API"])


# Root endpoints
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Jyotish API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("JYOTISH_HOST", "0.0.0.0"),
        port=int(os.environ.get("JYOTISH_PORT", "8000")),
    )
