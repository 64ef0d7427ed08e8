"""FastAPI application factory for IoT Hub"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from iothub.auth.service import AuthService
from iothub.scheduler.dispatch import Dispatcher, DispatchSink, build_dispatch_sink
from iothub.scheduler.matcher import ScheduleMatcher
from iothub.scheduler.trigger import MinuteTrigger
from iothub.services.registry import ResourceRegistry
from iothub.stores.database import Database
from iothub.utils.clock import Clock
from iothub.utils.config_loader import Config, load_config
from iothub.utils.logger import get_logger, setup_logging
from .auth_routes import router as auth_router
from .device_routes import router as device_router
from .errors import register_exception_handlers
from .schedule_routes import router as schedule_router

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    dispatch_sink: Optional[DispatchSink] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build the app and its services.

    With no config, settings are loaded from config/settings.yaml and
    logging is configured from them. Callers passing a Config own their
    logging setup.
    """
    if config is None:
        config = load_config()
        setup_logging(config.logging)

    db = Database(config.database.path)
    db.initialize()

    dispatcher = Dispatcher(
        dispatch_sink or build_dispatch_sink(config.dispatch),
        max_workers=config.scheduler.dispatch_workers,
    )
    matcher = ScheduleMatcher(db, dispatcher, clock=clock)
    trigger = MinuteTrigger(matcher)

    app = FastAPI(
        title=config.app.name,
        description="Device registry with daily ON/OFF schedules",
        version=config.app.version,
    )
    app.state.config = config
    app.state.db = db
    app.state.auth_service = AuthService(db, config.auth)
    app.state.registry = ResourceRegistry(db, config.registry)
    app.state.dispatcher = dispatcher
    app.state.matcher = matcher
    app.state.trigger = trigger

    if config.app.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.app.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(device_router)
    app.include_router(schedule_router)

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return f"Welcome to {config.app.name}. The API lives under /api."

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event():
        """Start the minute trigger unless disabled"""
        if config.scheduler.enabled:
            trigger.start()
        else:
            logger.info("Scheduler disabled, minute trigger not started")
        logger.info("IoT Hub started", environment=config.app.environment)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop background work"""
        try:
            trigger.stop()
        except Exception as e:
            logger.warning("Error stopping minute trigger", error=str(e))
        dispatcher.shutdown(wait=False)
        logger.info("IoT Hub stopped")

    return app
