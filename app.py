"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the road graph, in-memory store, allocation engine and the
persistence/notification collaborators, then registers the routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from bloodlink.controllers.donor_controller import router as donor_router
from bloodlink.controllers.inventory_controller import router as inventory_router
from bloodlink.controllers.network_controller import router as network_router
from bloodlink.controllers.request_controller import router as request_router
from bloodlink.domain.seed_data import DEMO_DONORS, opening_inventory
from bloodlink.repository.data_repository import DataRepository
from bloodlink.repository.memory_store import BloodStore
from bloodlink.services.event_service import EngineEventRelay
from bloodlink.services.matching_service import AllocationEngine
from bloodlink.services.notification_service import NotificationDispatcher
from bloodlink.services.registry_service import DonorRegistryService
from bloodlink.services.routing_service import LocationGraph
from bloodlink.utils.config import Settings, get_settings
from bloodlink.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every dependency is created here and exposed through app.state, so
    controllers never construct services themselves.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    # --- Static road network ---
    graph = LocationGraph.lahore()

    # --- In-memory snapshot the engine mutates ---
    if settings.seed_demo_data:
        store = BloodStore(
            donors=DEMO_DONORS,
            inventory=opening_inventory(settings.default_o_negative_reserve),
        )
    else:
        store = BloodStore()

    # --- Services ---
    engine = AllocationEngine(store=store, graph=graph)
    registry = DonorRegistryService(engine)

    # --- Collaborators, invoked only after the engine commits ---
    repository = DataRepository(settings) if settings.persistence_enabled else None
    dispatcher = NotificationDispatcher(settings=settings)
    event_relay = EngineEventRelay(repository=repository, dispatcher=dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(network_router)
    app.include_router(donor_router)
    app.include_router(request_router)
    app.include_router(inventory_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.engine = engine
    app.state.registry = registry
    app.state.repository = repository
    app.state.notification_dispatcher = dispatcher
    app.state.event_relay = event_relay

    return app


def _startup(app: FastAPI) -> None:
    """Idempotent startup sequence. Safe to re-run on server restarts."""
    repository: Optional[DataRepository] = app.state.repository
    engine: AllocationEngine = app.state.engine

    if repository is not None:
        logger.info("Startup: initializing database schema")
        repository.initialize_database()
    else:
        logger.info("Startup: persistence disabled; outcomes stay in memory")

    logger.info(
        "Startup complete | locations=%s | road_edges=%s | donors=%s",
        len(engine.graph.locations()),
        engine.graph.edge_count,
        len(engine.store.list_donors()),
    )


# Module-level app object for uvicorn
app = create_app()
