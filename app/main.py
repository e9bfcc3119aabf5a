"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Builds the service container and registers routes (webhook, auth)
- Manages application lifecycle (startup/shutdown)
- No business logic should be written here
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from app.db.indexes import create_indexes
from app.services.container import build_container
from app.api import auth, webhook

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting ROSCA bot...")

    try:
        validate_settings()
        logger.info("✅ Configuration validated")

        database = await connect_to_mongo()
        await create_indexes(database)
        logger.info("✅ Database indexes created")

        app.state.container = build_container(database, settings)

        if await app.state.container.gateway.is_connected():
            logger.info(f"✅ RPC reachable (chain {settings.CHAIN_ID})")
        else:
            logger.warning(f"⚠️ RPC endpoint not reachable: {settings.RPC_URL}")

        logger.info(f"🎉 ROSCA bot started (environment={settings.ENVIRONMENT}, debug={settings.DEBUG})")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield

    logger.info("🛑 Shutting down ROSCA bot...")

    try:
        container = getattr(app.state, "container", None)
        if container is not None:
            await container.close()
            logger.info("✅ Outbound clients closed")

        await close_mongo_connection()
        logger.info("👋 ROSCA bot shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="ROSCA Bot",
    description="Telegram bot for on-chain rotating savings groups",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


add_exception_handlers(app)

app.include_router(webhook.router, prefix=settings.API_PREFIX, tags=["Webhook"])
app.include_router(auth.router, tags=["Auth"])


async def _rpc_reachable(request: Request) -> bool:
    container = getattr(request.app.state, "container", None)
    return container is not None and await container.gateway.is_connected()


@app.get("/", tags=["Health"])
async def root():
    return {
        "name": app.title,
        "version": APP_VERSION,
        "chain_id": settings.CHAIN_ID,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Database and RPC connectivity.

    Without the database the bot cannot serve anything (unhealthy); without
    RPC it still links wallets but cannot show groups (degraded).
    """
    db_ok = await check_database_health()
    rpc_ok = await _rpc_reachable(request)

    if not db_ok:
        status = "unhealthy"
    elif not rpc_ok:
        status = "degraded"
    else:
        status = "healthy"

    body = {
        "status": status,
        "timestamp": time.time(),
        "version": APP_VERSION,
        "checks": {
            "database": "healthy" if db_ok else "unhealthy",
            "rpc": "healthy" if rpc_ok else "unhealthy",
        },
    }
    return JSONResponse(content=body, status_code=200 if status == "healthy" else 503)


@app.get("/ready", tags=["Health"])
async def readiness_check(request: Request):
    if getattr(request.app.state, "container", None) is None:
        return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "starting"})
    if not await check_database_health():
        return JSONResponse(status_code=503, content={"status": "not_ready", "reason": "database_unavailable"})
    return {"status": "ready"}


@app.get("/live", tags=["Health"])
async def liveness_check():
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
