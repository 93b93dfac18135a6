"""FastAPI application entry point."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.errors import InvalidArgument, SignalError
from app.core.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title="Signal API",
    description="AI enrichment gateway and relationship engine for the Signal product workspace",
    version="0.1.0",
)


@app.exception_handler(SignalError)
async def signal_error_handler(request: Request, exc: SignalError) -> JSONResponse:
    """Serialize caller-visible errors as ``{kind, message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed payloads as invalid_argument naming the first bad field."""
    field = "body"
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            field = ".".join(loc)
            break
    error = InvalidArgument(field, f"Invalid value for {field}")
    return JSONResponse(content=error.to_dict(), status_code=error.status_code)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# Include v1 API router
app.include_router(api_router, prefix="/v1", tags=["v1"])
