"""
TLE API Router.

Provides TLE ingestion endpoints:
- POST /api/v1/tle/bulk         - Parse a 3-line batch and apply it (all-or-nothing)
- POST /api/v1/tle/update       - Apply a single record given as discrete fields
- POST /api/v1/tle/auto-update  - Refresh from the configured TLE sites

Applied records replace the catalog's TLE lines and the planning tree is
rebuilt so that later runs see them.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from backend.satellite_manager import TLEUpdateSummary
from backend.schemas.tle import (
    OrbitalElementRecordModel,
    TLEBulkRequest,
    TLESingleUpdateRequest,
    TLEUpdateResponse,
)
from sensor_planner.errors import TLEFormatError
from sensor_planner.tle_parser import OrbitalElementRecord, parse_bulk, validate_record
from sensor_planner.utils import get_current_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tle", tags=["tle"])


def _apply(
    request: Request, records: List[OrbitalElementRecord], discarded_lines: int = 0
) -> TLEUpdateResponse:
    planner = request.app.state.planner
    summary = planner.satellite_manager.apply_tle_records(records)
    return _response(request, summary, records, discarded_lines)


def _response(
    request: Request,
    summary: TLEUpdateSummary,
    records: List[OrbitalElementRecord],
    discarded_lines: int = 0,
) -> TLEUpdateResponse:
    if summary.inserted == 0:
        raise HTTPException(status_code=400, detail=summary.message)

    request.app.state.planner.reload_tree()
    return TLEUpdateResponse(
        success=True,
        message=summary.message,
        inserted=summary.inserted,
        skipped=summary.skipped,
        total=summary.total,
        discarded_lines=discarded_lines,
        not_found=summary.not_found,
        failed_sites=summary.failed_sites,
        records=[OrbitalElementRecordModel(**r.to_dict()) for r in records],
    )


@router.post("/bulk", response_model=TLEUpdateResponse)
async def bulk_update(request: Request, body: TLEBulkRequest) -> TLEUpdateResponse:
    """Parse pasted TLE text; any malformed group rejects the whole paste."""
    try:
        batch = parse_bulk(body.text)
    except TLEFormatError as e:
        logger.warning(f"Rejected TLE batch: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return _apply(request, batch.records, batch.discarded_lines)


@router.post("/update", response_model=TLEUpdateResponse)
async def single_update(request: Request, body: TLESingleUpdateRequest) -> TLEUpdateResponse:
    """Apply one record supplied as discrete fields."""
    epoch = body.epoch_seconds
    if epoch is None:
        epoch = int(get_current_utc().timestamp())
    try:
        record = validate_record(body.catalog_id, epoch, body.line1, body.line2)
    except TLEFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _apply(request, [record])


@router.post("/auto-update", response_model=TLEUpdateResponse)
async def auto_update(request: Request) -> TLEUpdateResponse:
    """Fetch TLEs from every configured site and apply them."""
    manager = request.app.state.planner.satellite_manager
    if not manager.tle_sites:
        raise HTTPException(status_code=400, detail="No TLE sites configured")

    # Only the download leaves the event loop; catalog and tree updates stay on it
    records, failed_sites = await run_in_threadpool(manager.fetch_site_records)
    summary = manager.apply_site_records(records, failed_sites)
    if summary.total == 0:
        message = "No TLE data fetched from any site"
        if summary.failed_sites:
            message += f". Failed sites: {summary.failed_sites}"
        raise HTTPException(status_code=400, detail=message)

    # Feed batches are large; only the summary is returned
    return _response(request, summary, [])
