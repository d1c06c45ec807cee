"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator

from authdemo_server.api import chat, demos, environments, health, templates
from authdemo_server.config import settings
from authdemo_server.database import init_db
from authdemo_server.middleware.rate_limit import limiter
from authdemo_server.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    if settings.uses_sqlite:
        init_db()
    logger.info("AuthDemo backend starting up", extra={"action": "startup"})
    logger.info(
        f"Agent runtime: {'anthropic' if settings.ANTHROPIC_API_KEY else 'scripted'}, "
        f"rate limiting: {settings.RATE_LIMIT_ENABLED}, monitoring: {settings.METRICS_ENABLED}"
    )
    yield
    logger.info("AuthDemo backend shutting down", extra={"action": "shutdown"})


# Create FastAPI app
app = FastAPI(
    title="AuthDemo",
    description="Agent gateway and content store for identity-secured AI agent demos",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from authdemo_server.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[settings.METRICS_PATH, "/health", "/health/ready", "/health/live", "/health/stats"],
        inprogress_name="authdemo_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path}",
        extra={"request_id": getattr(request.state, "request_id", None)}
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Rate limits exceeded, please try again later.",
            "detail": str(exc.detail)
        }
    )

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(chat.router)
app.include_router(environments.router)
app.include_router(demos.router)
app.include_router(templates.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "AuthDemo",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={"request_id": getattr(request.state, "request_id", None)},
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again."
        }
    )
