"""
FastAPI Application for WagerLab.

REST API for:
    - Edge-bucket accuracy enrichment of a slate
    - Weighted model consensus

Features:
    - Rate limiting (slowapi, settings.RATE_LIMIT)
    - Request timing header
    - Input validation with Pydantic
"""

from datetime import datetime
import logging
import time

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from wagerlab import __version__
from wagerlab.core.config import settings
from wagerlab.api.endpoints import consensus, edge_accuracy

# Load environment variables from .env file
load_dotenv()


logger = logging.getLogger(__name__)

# ============================================================================
# Rate Limiting Configuration
# ============================================================================

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


app = FastAPI(
    title=settings.APP_NAME,
    description="Edge-bucket historical accuracy and weighted model consensus",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add X-Process-Time header for performance monitoring."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(round(process_time * 1000, 2)) + "ms"
    return response


app.include_router(edge_accuracy.router)
app.include_router(consensus.router)


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API root - basic info."""
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs",
        "status": "operational"
    }


@app.get("/health", response_model=HealthResponse, tags=["Info"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=__version__
    )


# ============================================================================
# Startup / Shutdown
# ============================================================================

@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.APP_NAME} API starting up...")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.APP_NAME} API shutting down...")


# ============================================================================
# Entry point for development
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
    uvicorn.run(app, host="0.0.0.0", port=8000)
