"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calorie_api.api.routes import analyze_food, food_log, images
from calorie_api.core.config import get_settings
from calorie_api.core.exceptions import APIError

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def error_body(message: str, details: Any = None, code: str | None = None) -> dict:
    """Build the `{success: false, error, details?}` error shape."""
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    if code is not None:
        body["code"] = code
    return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.api_version}")
    if not settings.is_llm_configured:
        logger.warning("OPENAI_API_KEY not set; /api/analyze-food will return 500")
    logger.info(f"Food log file: {settings.food_log_path}")

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        description="Photo-based calorie estimates and a daily food log",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom API errors."""
        code = getattr(exc, "error_code", None) or getattr(exc, "code", None)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                exc.message,
                exc.details,
                code.value if code is not None else None,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies in the same error shape."""
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content=error_body(
                "Invalid request body",
                "; ".join(
                    f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
                    for err in exc.errors()
                ),
                "INVALID_REQUEST",
            ),
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.api_version,
            "llm": {
                "provider": "openai",
                "model": settings.openai_model,
                "configured": settings.is_llm_configured,
            },
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": settings.app_name,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Include routers
    app.include_router(analyze_food.router, prefix="/api", tags=["Analysis"])
    app.include_router(images.router, prefix="/api", tags=["Images"])
    app.include_router(food_log.router, prefix="/api", tags=["Food Log"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("calorie_api.main:app", host="0.0.0.0", port=8000, reload=False)
