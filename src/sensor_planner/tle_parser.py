"""
Bulk parsing and validation of two-line element (TLE) text.

Three input conventions are handled:

- ``parse_bulk``: pasted/uploaded text in the 3-line "name, line1, line2"
  convention. All-or-nothing: one bad group rejects the whole batch.
- ``parse_pair`` / ``validate_record``: single-record update flows that
  supply a bare "line1, line2" pair or discrete fields.
- ``parse_feed``: lenient parsing of remote CelesTrak-style feeds, which
  resynchronizes on malformed groups instead of failing.

Records are stamped with the ingestion time, not the epoch encoded in the
element set.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import logging
import re

from .errors import EmptyBatch, MalformedElementBlock, MissingCatalogId
from .utils import get_current_utc

logger = logging.getLogger(__name__)

LINE1_PREFIX = "1 "
LINE2_PREFIX = "2 "

# Catalog number occupies columns 3-7 of line 1
CATALOG_ID_SLICE = slice(2, 7)

_FEED_CATALOG_RE = re.compile(r"^1\s+(\d+)")


@dataclass(frozen=True)
class OrbitalElementRecord:
    """One satellite's element set as captured at ``epoch_seconds``."""

    catalog_id: str
    epoch_seconds: int
    line1: str
    line2: str

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class TLEBatch:
    """Result of a bulk parse."""

    records: List[OrbitalElementRecord] = field(default_factory=list)
    discarded_lines: int = 0

    def __len__(self) -> int:
        return len(self.records)


def _ingestion_epoch(now: Optional[datetime]) -> int:
    return int((now or get_current_utc()).timestamp())


def _non_empty_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def extract_catalog_id(line1: str) -> str:
    """Return the trimmed catalog number field of a TLE line 1."""
    return line1[CATALOG_ID_SLICE].strip()


def _check_lines(line1: str, line2: str, group_index: int, first_line_number: int) -> None:
    if not line1.startswith(LINE1_PREFIX):
        raise MalformedElementBlock(group_index, first_line_number)
    if not line2.startswith(LINE2_PREFIX):
        raise MalformedElementBlock(group_index, first_line_number + 1)


def parse_bulk(text: str, now: Optional[datetime] = None) -> TLEBatch:
    """
    Parse text in the 3-line "name, line1, line2" convention.

    Args:
        text: Raw pasted or uploaded text
        now: Ingestion time (defaults to current UTC time)

    Returns:
        TLEBatch with records in input order and the number of trailing
        lines that did not form a complete group

    Raises:
        MalformedElementBlock: A group's lines do not start with "1 "/"2 "
        MissingCatalogId: A line 1 has blank catalog number columns
        EmptyBatch: No complete group was found
    """
    lines = _non_empty_lines(text)
    epoch = _ingestion_epoch(now)

    complete = len(lines) - len(lines) % 3
    discarded = len(lines) - complete
    if discarded:
        logger.warning(f"Discarding {discarded} trailing line(s) that do not form a complete TLE")

    records: List[OrbitalElementRecord] = []
    for group_index, start in enumerate(range(0, complete, 3)):
        line1 = lines[start + 1]
        line2 = lines[start + 2]
        # 1-based line numbers among the non-empty input lines
        _check_lines(line1, line2, group_index, start + 2)

        catalog_id = extract_catalog_id(line1)
        if not catalog_id:
            raise MissingCatalogId(group_index, start + 2)

        records.append(OrbitalElementRecord(catalog_id, epoch, line1, line2))

    if not records:
        raise EmptyBatch()

    logger.info(f"Parsed {len(records)} TLE record(s)")
    return TLEBatch(records=records, discarded_lines=discarded)


def validate_record(
    catalog_id: str, epoch_seconds: int, line1: str, line2: str
) -> OrbitalElementRecord:
    """
    Validate a single record supplied as discrete fields.

    A blank ``catalog_id`` falls back to the catalog number in ``line1``.
    """
    line1 = (line1 or "").strip()
    line2 = (line2 or "").strip()
    _check_lines(line1, line2, 0, 1)

    catalog_id = (catalog_id or "").strip() or extract_catalog_id(line1)
    if not catalog_id:
        raise MissingCatalogId(0, 1)

    return OrbitalElementRecord(catalog_id, int(epoch_seconds), line1, line2)


def parse_pair(text: str, now: Optional[datetime] = None) -> OrbitalElementRecord:
    """Parse exactly one bare "line1, line2" pair."""
    lines = _non_empty_lines(text)
    if len(lines) < 2:
        raise EmptyBatch("Expected a TLE line 1 and line 2")
    if len(lines) > 2:
        raise MalformedElementBlock(0, 3)
    return validate_record("", _ingestion_epoch(now), lines[0], lines[1])


def _normalize_feed_catalog_id(line1: str) -> str:
    match = _FEED_CATALOG_RE.match(line1)
    if not match:
        return ""
    return str(int(match.group(1)))


def parse_feed(text: str, now: Optional[datetime] = None) -> List[OrbitalElementRecord]:
    """
    Leniently parse a remote 3-line feed.

    Malformed groups are skipped and parsing resynchronizes on the next
    line. Catalog ids are normalized by dropping leading zeros.
    """
    epoch = _ingestion_epoch(now)
    records: List[OrbitalElementRecord] = []
    state = 0
    line1 = ""
    skipped = 0

    for line in _non_empty_lines(text):
        if state == 0:
            state = 1
        elif state == 1:
            if line.startswith(LINE1_PREFIX):
                line1 = line
                state = 2
            else:
                skipped += 1
                state = 0
        else:
            if line.startswith(LINE2_PREFIX):
                catalog_id = _normalize_feed_catalog_id(line1)
                if catalog_id:
                    records.append(OrbitalElementRecord(catalog_id, epoch, line1, line))
                else:
                    skipped += 1
            else:
                skipped += 1
            state = 0

    if skipped:
        logger.debug(f"Feed parse skipped {skipped} malformed group(s)")
    return records

