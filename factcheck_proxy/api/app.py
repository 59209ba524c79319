"""FastAPI application for the fact-check gateway service."""

import contextlib
import logging

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env file
load_dotenv()

from ..infrastructure.config import AgentSettings, AppSettings
from .endpoints import gateways, health

app_settings = AppSettings.from_env()

# Configure logging
logging.basicConfig(
    level=getattr(logging, app_settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Own one HTTP client for all upstream agent calls."""
    settings = AgentSettings.from_env()
    if not settings.is_configured:
        logger.warning("⚠️ FLUO_API_KEY / FLUO_PROJECT_ID not set, gateways will answer 500")

    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout)
    logger.info("✅ Upstream HTTP client ready")

    yield  # Application runs here

    await app.state.http_client.aclose()
    app.state.http_client = None


# Create FastAPI application
app = FastAPI(
    title="Fact Check Gateway API",
    description="Proxy in front of hosted claim extraction and verification agents",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(gateways.router)
