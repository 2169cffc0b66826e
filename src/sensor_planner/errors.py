"""
Error taxonomy for the planning core.

Structural and precondition failures abort the whole operation and carry a
message suitable for showing to the operator as-is. ``NotFound`` is the only
recoverable lookup failure: callers skip the affected item and continue.
"""

from typing import Optional


class PlanningError(Exception):
    """Base class for all planning core errors."""


class NoAreaDefined(PlanningError):
    """Raised when a planning run has no usable area of interest."""

    def __init__(self, message: str = "No planning area defined") -> None:
        super().__init__(message)


class EngineUnavailable(PlanningError):
    """Raised when the footprint engine is missing or not initialized."""

    def __init__(self, message: str = "Footprint engine is not available") -> None:
        super().__init__(message)


class InvalidReference(PlanningError):
    """Raised for a node id that does not exist in the loaded hierarchy."""

    def __init__(self, node_id: str, message: Optional[str] = None) -> None:
        self.node_id = node_id
        super().__init__(message or f"Unknown tree node: {node_id}")


class NotFound(PlanningError, LookupError):
    """Raised by lookups that miss; callers treat it as a skip."""


class TLEFormatError(PlanningError):
    """Base class for orbital element batch failures."""


class MalformedElementBlock(TLEFormatError):
    """A group's element lines do not start with "1 " and "2 "."""

    def __init__(self, group_index: int, line_number: int) -> None:
        self.group_index = group_index
        self.line_number = line_number
        super().__init__(
            f"Invalid TLE format in group {group_index + 1} at line {line_number}. "
            f'Expected lines starting with "1 " and "2 ".'
        )


class MissingCatalogId(TLEFormatError):
    """The catalog number columns of line 1 are blank."""

    def __init__(self, group_index: int, line_number: int) -> None:
        self.group_index = group_index
        self.line_number = line_number
        super().__init__(
            f"Could not extract catalog id from TLE group {group_index + 1} "
            f"at line {line_number}."
        )


class EmptyBatch(TLEFormatError):
    """No complete element set was found in the input."""

    def __init__(self, message: str = "No valid TLE data found. Please check the format.") -> None:
        super().__init__(message)
