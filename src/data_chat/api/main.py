"""FastAPI application entry point.

Main application setup with CORS, startup hooks, and route registration.

To run:
    uvicorn data_chat.api.main:app --reload --port 8000
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from data_chat.api.dependencies import get_app_config, get_gemini_client
from data_chat.api.routes import datasets, questions, sessions
from data_chat.logging_config import configure_logging

logger = structlog.get_logger()

# GEMINI_API_KEY and overrides may come from a .env file
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup: configure logging, report whether Gemini is reachable.
    Datasets are loaded lazily on first use, not here.

    Args:
        app: FastAPI application instance

    Yields:
        None: Control returns to application during runtime
    """
    config = get_app_config()
    configure_logging(config["log_level"])

    if not get_gemini_client().is_available():
        logger.warning("gemini_api_key_missing", hint="set GEMINI_API_KEY in the environment or .env")
    logger.info("api_startup", model=config["gemini_model"])

    yield

    logger.info("api_shutdown")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Data Chat API",
    description="Question answering over the survey datasets with locally computed aggregates",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# ============================================================================
# CORS Middleware
# ============================================================================

ALLOWED_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",  # React dev server
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Route Registration
# ============================================================================


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "data-chat-api"}


app.include_router(questions.router, prefix="/api", tags=["questions"])
app.include_router(datasets.router, prefix="/api", tags=["datasets"])
app.include_router(sessions.router, prefix="/api", tags=["sessions"])


# ============================================================================
# Development Server
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "data_chat.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info",
    )
