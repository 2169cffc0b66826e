"""
FastAPI backend for the Sensor Footprint Planning Web App.

Provides REST API endpoints for:
- Satellite/sensor tree and tri-state selection
- Planning area management and footprint planning runs
- TLE bulk paste, single-record update and site auto-update

One PlanningSession is constructed per app instance; nothing is held in
module-level mutable state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from backend.routers.planning import router as planning_router
from backend.routers.tle import router as tle_router
from backend.satellite_manager import SatelliteManager
from sensor_planner.config import PlanningConfig, load_planning_config
from sensor_planner.engine import FootprintEngine
from sensor_planner.engines import GroundTrackFootprintEngine
from sensor_planner.session import PlanningSession
from sensor_planner.tree import TreeSelectionModel
from sensor_planner.utils import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class PlannerState:
    """Per-app wiring of catalog, selection model and planning session."""

    satellite_manager: SatelliteManager
    session: PlanningSession

    def reload_tree(self) -> None:
        """Rebuild the tree from the catalog, keeping sensor selection."""
        previous = self.session.tree.selected_sensor_ids()
        tree = TreeSelectionModel.from_payload(self.satellite_manager.tree_payload())
        for sensor_id in previous:
            if sensor_id in tree:
                tree.toggle(sensor_id, True)
        self.session.tree = tree
        logger.info(f"Tree reloaded, {len(previous)} sensor selection(s) carried over")


def create_app(
    satellite_manager: Optional[SatelliteManager] = None,
    engine: Optional[FootprintEngine] = None,
    config: Optional[PlanningConfig] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        satellite_manager: Catalog source (defaults to config/satellites.yaml)
        engine: Footprint engine (defaults to the ground-track engine)
        config: Planning defaults (defaults to config/planning.yaml)
    """
    config = config or load_planning_config()
    satellite_manager = satellite_manager or SatelliteManager()
    if engine is None:
        engine = GroundTrackFootprintEngine(sample_step_seconds=config.sample_step_seconds)

    tree = TreeSelectionModel.from_payload(satellite_manager.tree_payload())
    session = PlanningSession(tree, engine, config)

    app = FastAPI(
        title="Sensor Footprint Planning API",
        description="REST API for satellite sensor selection and footprint planning",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,  # Must be False when using allow_origins=["*"]
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.planner = PlannerState(satellite_manager=satellite_manager, session=session)
    app.include_router(planning_router)
    app.include_router(tle_router)

    @app.get("/api/v1/health")
    async def health(request: Request) -> Dict[str, Any]:
        planner: PlannerState = request.app.state.planner
        satellites = list(planner.session.tree.satellites())
        return {
            "success": True,
            "data": {
                "satellites": len(satellites),
                "sensors": sum(len(sat.children) for sat in satellites),
                "satellites_with_tle": sum(1 for sat in satellites if sat.has_tle),
                "engine_ready": bool(planner.session.engine and planner.session.engine.is_ready()),
            },
        }

    logger.info(f"API ready with {len(satellite_manager.get_satellites())} satellites")
    return app


def get_app() -> FastAPI:
    """Entry point for ``uvicorn backend.main:get_app --factory``."""
    setup_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(get_app(), host="0.0.0.0", port=8000)
