"""Glucose monitor FastAPI application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from glucos.config import settings, validate_timezone
from glucos.core.numeric import OutOfDomainError
from glucos.database import close_database, get_session_maker, init_database
from glucos.logging_config import get_logger, setup_logging
from glucos.middleware import CorrelationIdMiddleware
from glucos.routers import events, glucose, health, monitor, stats
from glucos.services.monitor import PatientMonitor, build_monitor
from glucos.services.persistence import restore_store, save_store
from glucos.services.scheduler import start_scheduler, stop_scheduler

# Configure structured logging
setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


async def _restore_snapshot(patient_monitor: PatientMonitor) -> None:
    try:
        await init_database()
        async with get_session_maker()() as db:
            restored = await restore_store(db, patient_monitor.store)
        logger.info("Event store snapshot loaded", **restored)
    except Exception as e:
        logger.error("Failed to restore event store, starting empty", error=str(e))


async def _save_snapshot(patient_monitor: PatientMonitor) -> None:
    try:
        async with get_session_maker()() as db:
            saved = await save_store(db, patient_monitor.store)
        logger.info("Event store snapshot saved on shutdown", **saved)
    except Exception as e:
        logger.error("Failed to save event store on shutdown", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    validate_timezone()
    patient_monitor = build_monitor(settings)
    app.state.monitor = patient_monitor

    if settings.persistence_enabled:
        await _restore_snapshot(patient_monitor)

    app.state.scheduler = None
    if not settings.testing:
        app.state.scheduler = start_scheduler(patient_monitor)

    if settings.generator_autostart:
        patient_monitor.start()

    logger.info(
        "Glucose monitor API started",
        patient=patient_monitor.profile.name,
        generator_running=patient_monitor.is_running,
    )

    yield

    # Shutdown
    logger.info("Shutting down glucose monitor API...")
    patient_monitor.stop()
    stop_scheduler(app.state.scheduler)
    app.state.scheduler = None
    await patient_monitor.dispatcher.drain()
    if settings.persistence_enabled:
        await _save_snapshot(patient_monitor)
    await close_database()
    logger.info("Glucose monitor API shutdown complete")


app = FastAPI(
    title="Glucos Monitor API",
    description="Glucose monitoring, insulin on board and threshold alerts",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add correlation ID middleware for request tracing
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(OutOfDomainError)
async def out_of_domain_handler(
    request: Request, exc: OutOfDomainError
) -> JSONResponse:
    """Reject values outside a model's numeric domain."""
    logger.warning(
        "Rejected out-of-domain value", path=request.url.path, error=str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


# Include routers
app.include_router(health.router)
app.include_router(glucose.router)
app.include_router(events.router)
app.include_router(stats.router)
app.include_router(monitor.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Glucos Monitor API",
        "version": "0.1.0",
        "docs": "/docs",
    }
