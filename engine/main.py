"""
Main FastAPI application for the PromptSite generation engine
"""
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.datastructures import Headers

from config import settings, get_redis_client, validate_required_config
from logging_config import logger
from services.generation_errors import GenerationError

# Import routers
from routers import credits, generate_website
from routers.dependencies import limiter

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflights carry no body"""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting PromptSite engine", environment=settings.ENVIRONMENT)

    # Validate required configuration
    validate_required_config()

    # Initialize Sentry if DSN provided
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[FastApiIntegration()],
        )
        logger.info("Sentry initialized")

    # The credits ledger lives in Redis; generation returns 500 without it
    if get_redis_client():
        logger.info("Redis connected successfully")
    else:
        logger.error("Redis not available, generation requests will fail")

    logger.info(
        "PromptSite engine started",
        default_model=settings.DEFAULT_MODEL,
        rate_limit=settings.GENERATION_RATE_LIMIT if settings.RATE_LIMIT_ENABLED else None
    )

    yield

    logger.info("Shutting down PromptSite engine")


# Create FastAPI app
app = FastAPI(
    title="PromptSite Engine",
    description="AI-powered e-commerce store generation with metered credits",
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.CORS_ORIGINS.split(",")
    if origin.strip()
]

# Browser clients call the generation endpoint directly from any origin
app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=ALLOWED_ORIGINS or ["*"],
    allow_credentials=False,  # Cannot use credentials with wildcard origins
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=CORS_ALLOWED_HEADERS,
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "PromptSite Engine",
        "version": "1.0.0",
        "status": "running",
        "default_model": settings.DEFAULT_MODEL
    }


@app.get("/health")
async def health_check():
    """Comprehensive health check"""
    health = {
        "status": "healthy",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {}
    }

    health["checks"]["llm_api"] = {
        "configured": bool(settings.OPENROUTER_API_KEY),
        "status": "ok" if settings.OPENROUTER_API_KEY else "missing"
    }

    auth_configured = bool(settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY)
    health["checks"]["auth"] = {
        "configured": auth_configured,
        "status": "ok" if auth_configured else "missing"
    }

    try:
        redis_client = get_redis_client()
        if redis_client:
            redis_client.ping()
            health["checks"]["redis"] = {"status": "ok"}
        else:
            health["checks"]["redis"] = {"status": "unavailable"}
    except Exception as e:
        health["checks"]["redis"] = {"status": "error", "error": str(e)}

    # Overall status
    critical_checks = ["llm_api", "auth", "redis"]
    all_critical_ok = all(
        health["checks"].get(check, {}).get("status") == "ok"
        for check in critical_checks
    )

    health["status"] = "healthy" if all_critical_ok else "degraded"

    return health


@app.get("/readiness")
async def readiness_check():
    """Kubernetes readiness probe"""
    health = await health_check()

    if health["status"] == "healthy":
        return {"status": "ready"}
    else:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": health["checks"]}
        )


# Include routers
app.include_router(generate_website.router, prefix="/api", tags=["Store Generation"])
app.include_router(credits.router, prefix="/api", tags=["Credits"])


# Error handlers
@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    """Domain failures carry their own status and error body"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as invalid input"""
    logger.info("Rejected malformed request", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler with Sentry integration"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "details": str(exc) if settings.DEBUG else None
        }
    )


if __name__ == "__main__":
    import uvicorn
    # Only enable reload in development
    reload_enabled = settings.ENVIRONMENT == "development" or settings.DEBUG
    uvicorn.run("main:app", host="0.0.0.0", port=8001, reload=reload_enabled)
