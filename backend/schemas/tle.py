"""TLE (Two-Line Element) schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class TLEBulkRequest(BaseModel):
    """Pasted or uploaded text in the 3-line name/line1/line2 convention."""

    text: str = Field(description="Raw TLE text, one element set per 3 lines")


class TLESingleUpdateRequest(BaseModel):
    """Single-record update supplied as discrete fields."""

    catalog_id: str = ""
    epoch_seconds: Optional[int] = Field(
        default=None, description="Capture time; defaults to now"
    )
    line1: str
    line2: str

    @field_validator("line1", "line2")
    @classmethod
    def strip_line(cls, v: str) -> str:
        return v.strip()


class OrbitalElementRecordModel(BaseModel):
    catalog_id: str
    epoch_seconds: int
    line1: str
    line2: str


class TLEUpdateResponse(BaseModel):
    """Response from applying TLE records to the catalog."""

    success: bool
    message: str
    inserted: int = 0
    skipped: int = 0
    total: int = 0
    discarded_lines: int = 0
    not_found: List[str] = Field(default_factory=list)
    failed_sites: List[str] = Field(default_factory=list)
    records: List[OrbitalElementRecordModel] = Field(default_factory=list)
