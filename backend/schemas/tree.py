"""Selection tree schemas."""

from typing import Dict, List

from pydantic import BaseModel


class ToggleRequest(BaseModel):
    node_id: str
    checked: bool


class SelectionResponse(BaseModel):
    selection: Dict[str, Dict[str, bool]]
    selected_sensor_ids: List[str]
