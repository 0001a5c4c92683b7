from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from exceptions import ShrinkrayError
from middleware import SecurityMiddleware, error_response
from routers import admin, estimate, health, jobs, metrics, process, user
from utils.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging, report codecs. Shutdown: log."""
    # --- Startup ---
    setup_logging()
    logger = get_logger("main")

    codecs = health.check_codecs()
    missing = [name for name, available in codecs.items() if not available]
    if missing:
        logger.warning(
            f"Missing codecs: {missing}",
            extra={"context": {"missing_codecs": missing}},
        )

    yield

    # --- Shutdown ---
    logger.info("Shrinkray shutting down")


app = FastAPI(
    title="Shrinkray",
    description="Image and PDF conversion, compression and restoration service",
    version=health.VERSION,
    lifespan=lifespan,
)

# CORS middleware
origins = [o.strip() for o in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)


# SecurityMiddleware handles: request ID, auth, ShrinkrayError responses
app.add_middleware(SecurityMiddleware)


@app.exception_handler(ShrinkrayError)
async def shrinkray_error_handler(request: Request, exc: ShrinkrayError):
    return error_response(exc)


# Routers
app.include_router(health.router)
app.include_router(estimate.router)
app.include_router(process.router)
app.include_router(jobs.router)
app.include_router(user.router)
app.include_router(admin.router)
app.include_router(metrics.router)
