"""
Planning API Router.

Provides the selection tree and footprint planning endpoints:
- GET    /api/v1/tree               - Satellite/sensor hierarchy with selection state
- POST   /api/v1/selection/toggle   - Toggle a satellite or sensor
- GET    /api/v1/selection/{id}     - Selection state of one node
- DELETE /api/v1/selection          - Clear all selection
- PUT    /api/v1/plan/area          - Set the drawn planning area
- DELETE /api/v1/plan/area          - Clear the planning area
- POST   /api/v1/plan               - Run footprint planning

Every planning run returns a complete replacement result; clients discard
responses from superseded requests.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request

from backend.schemas.planning import AreaModel, PlanningRequest, PlanningResponse
from backend.schemas.tree import SelectionResponse, ToggleRequest
from sensor_planner.errors import EngineUnavailable, InvalidReference, NoAreaDefined, NotFound
from sensor_planner.regions import RegionAggregator
from sensor_planner.session import PlanningArea, PlanningSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["planning"])


def _session(request: Request) -> PlanningSession:
    return request.app.state.planner.session


def _selection_response(session: PlanningSession) -> SelectionResponse:
    return SelectionResponse(
        selection=session.tree.selection_snapshot(),
        selected_sensor_ids=sorted(session.tree.selected_sensor_ids()),
    )


def _to_area(area: AreaModel) -> PlanningArea:
    return PlanningArea(
        min_lon=area.min_lon,
        min_lat=area.min_lat,
        max_lon=area.max_lon,
        max_lat=area.max_lat,
    )


@router.get("/tree")
async def get_tree(request: Request) -> Dict[str, Any]:
    """Get the satellite/sensor hierarchy with selection state."""
    return {"success": True, "tree": _session(request).tree.to_payload()}


@router.post("/selection/toggle", response_model=SelectionResponse)
async def toggle_node(request: Request, body: ToggleRequest) -> SelectionResponse:
    """Toggle a satellite (propagates to its sensors) or a single sensor."""
    session = _session(request)
    try:
        session.tree.toggle(body.node_id, body.checked)
    except InvalidReference as e:
        logger.error(f"Toggle rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return _selection_response(session)


@router.get("/selection/{node_id}")
async def get_node_state(request: Request, node_id: str) -> Dict[str, Any]:
    """Get the selection state of one satellite or sensor."""
    try:
        state = _session(request).tree.state(node_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"node_id": node_id, **state.to_dict()}


@router.delete("/selection", response_model=SelectionResponse)
async def clear_selection(request: Request) -> SelectionResponse:
    session = _session(request)
    session.tree.clear_selection()
    return _selection_response(session)


@router.put("/plan/area")
async def set_area(request: Request, area: AreaModel) -> Dict[str, Any]:
    """Replace the drawn planning area."""
    try:
        _session(request).set_area(_to_area(area))
    except NoAreaDefined as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "area": area.model_dump()}


@router.delete("/plan/area")
async def clear_area(request: Request) -> Dict[str, Any]:
    """Clear the planning area; clients drop any displayed regions."""
    _session(request).clear_area()
    return {"success": True, "area": None}


@router.post("/plan", response_model=PlanningResponse)
async def run_plan(request: Request, body: PlanningRequest) -> PlanningResponse:
    """Run footprint planning for the current selection."""
    session = _session(request)
    area = _to_area(body.area) if body.area else session.area

    try:
        result = await session.run(area, body.horizon_days)
    except NoAreaDefined as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EngineUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    data = result.to_dict()
    message = f"Computed {len(result.regions)} region(s)"
    if result.skipped_satellites:
        message += f" ({len(result.skipped_satellites)} satellite(s) skipped)"

    return PlanningResponse(
        success=True,
        message=message,
        regions=data["regions"],
        regions_by_satellite=RegionAggregator.index_by_satellite(result.regions),
        skipped_satellites=data["skipped_satellites"],
        horizon=data["horizon"],
    )
