"""
Satellite/sensor hierarchy with tri-state selection.

The hierarchy is a strict two-level tree under a single root: the root owns
satellites, each satellite owns sensors. Selection state is kept per node id,
separate from any rendering:

- a sensor is checked or unchecked;
- a satellite is checked when all of its sensors are checked (and it has at
  least one), unchecked when none are, and indeterminate otherwise.

Node and catalog-id indices are built once at load time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set
import logging

from .colors import get_color_by_index, normalize_hex
from .errors import InvalidReference, NotFound

logger = logging.getLogger(__name__)

ROOT_ID = "root"


class NodeType(Enum):
    """Tree node kind."""
    ROOT = "root"
    SATELLITE = "satellite"
    SENSOR = "sensor"


@dataclass
class TreeNode:
    """A node of the satellite/sensor hierarchy."""

    id: str
    type: NodeType
    name: str
    parent_id: Optional[str] = None
    color_hex: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List[str] = field(default_factory=list)

    @property
    def catalog_id(self) -> Optional[str]:
        return self.attributes.get("catalog_id")

    @property
    def satellite_catalog_id(self) -> Optional[str]:
        return self.attributes.get("satellite_catalog_id")

    @property
    def tle1(self) -> str:
        return (self.attributes.get("tle1") or "").strip()

    @property
    def tle2(self) -> str:
        return (self.attributes.get("tle2") or "").strip()

    @property
    def has_tle(self) -> bool:
        return bool(self.tle1 and self.tle2)


@dataclass
class NodeState:
    """Observable selection state of a satellite or sensor node."""

    checked: bool = False
    indeterminate: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"checked": self.checked, "indeterminate": self.indeterminate}


def satellite_node_id(raw_id: Any) -> str:
    return f"satellite:{raw_id}"


def sensor_node_id(raw_id: Any) -> str:
    return f"sensor:{raw_id}"


class TreeSelectionModel:
    """
    Owns the hierarchy and its selection state.

    Not thread-safe: the model is mutated synchronously by a single caller.
    """

    def __init__(self, nodes: Iterable[TreeNode]) -> None:
        self._nodes: Dict[str, TreeNode] = {}
        self._satellite_by_catalog: Dict[str, str] = {}
        self._state: Dict[str, NodeState] = {}

        self._nodes[ROOT_ID] = TreeNode(id=ROOT_ID, type=NodeType.ROOT, name="root")
        for node in nodes:
            self._add_node(node)

        logger.info(
            f"Loaded tree with {len(self._satellite_by_catalog)} satellites "
            f"and {len(self._state) - len(self._satellite_by_catalog)} sensors"
        )

    def _add_node(self, node: TreeNode) -> None:
        if node.type == NodeType.ROOT:
            raise InvalidReference(node.id, "Tree payload must not contain a root node")
        if node.id in self._nodes:
            raise InvalidReference(node.id, f"Duplicate tree node id: {node.id}")

        if node.type == NodeType.SATELLITE:
            node.parent_id = ROOT_ID
            catalog_id = node.catalog_id
            if not catalog_id:
                raise InvalidReference(node.id, f"Satellite {node.id} has no catalog id")
            if catalog_id in self._satellite_by_catalog:
                raise InvalidReference(node.id, f"Duplicate satellite catalog id: {catalog_id}")
            self._satellite_by_catalog[catalog_id] = node.id
        else:
            parent = self._nodes.get(node.parent_id or "")
            if parent is None or parent.type != NodeType.SATELLITE:
                raise InvalidReference(
                    node.id, f"Sensor {node.id} references unknown satellite {node.parent_id}"
                )
            if not node.satellite_catalog_id:
                node.attributes["satellite_catalog_id"] = parent.catalog_id
            elif node.satellite_catalog_id != parent.catalog_id:
                raise InvalidReference(
                    node.id,
                    f"Sensor {node.id} links to satellite {node.satellite_catalog_id} "
                    f"but sits under {parent.catalog_id}",
                )

        self._nodes[node.id] = node
        self._nodes[node.parent_id].children.append(node.id)
        self._state[node.id] = NodeState()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TreeSelectionModel":
        """
        Build the model from the combined tree payload.

        Expected shape::

            {"satellites": [{"id", "catalog_id", "name", "color_hex",
                             "tle1", "tle2",
                             "sensors": [{"id", "name", "satellite_catalog_id",
                                          "left_side_angle", "observe_angle",
                                          "init_angle", "resolution", "width",
                                          "color_hex"}]}]}
        """
        nodes: List[TreeNode] = []
        for index, sat in enumerate(payload.get("satellites", []) or []):
            catalog_id = str(sat.get("catalog_id") or "").strip()
            sat_id = satellite_node_id(sat.get("id", catalog_id))
            nodes.append(TreeNode(
                id=sat_id,
                type=NodeType.SATELLITE,
                name=sat.get("name", catalog_id),
                color_hex=normalize_hex(sat.get("color_hex")) or get_color_by_index(index),
                attributes={
                    "catalog_id": catalog_id,
                    "tle1": sat.get("tle1") or "",
                    "tle2": sat.get("tle2") or "",
                },
            ))
            for sensor in sat.get("sensors", []) or []:
                attributes = {
                    key: sensor.get(key)
                    for key in (
                        "left_side_angle", "observe_angle", "init_angle",
                        "resolution", "width",
                    )
                }
                attributes["satellite_catalog_id"] = str(
                    sensor.get("satellite_catalog_id") or catalog_id
                ).strip()
                nodes.append(TreeNode(
                    id=sensor_node_id(sensor["id"]),
                    type=NodeType.SENSOR,
                    name=sensor.get("name", str(sensor["id"])),
                    parent_id=sat_id,
                    color_hex=normalize_hex(sensor.get("color_hex")),
                    attributes=attributes,
                ))
        return cls(nodes)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, node_id: str) -> TreeNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFound(f"Tree node not found: {node_id}") from None

    def find_satellite_by_catalog_id(self, catalog_id: str) -> TreeNode:
        node_id = self._satellite_by_catalog.get(catalog_id)
        if node_id is None:
            raise NotFound(f"No satellite with catalog id {catalog_id}")
        return self._nodes[node_id]

    def satellites(self) -> Iterator[TreeNode]:
        """Satellites in load order."""
        for node_id in self._nodes[ROOT_ID].children:
            yield self._nodes[node_id]

    def sensors_of(self, satellite_id: str) -> List[TreeNode]:
        satellite = self.find_by_id(satellite_id)
        return [self._nodes[child] for child in satellite.children]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle(self, node_id: str, checked: bool) -> None:
        """
        Set a node's checked flag and propagate through the hierarchy.

        Raises:
            InvalidReference: Unknown id or the root node
        """
        node = self._nodes.get(node_id)
        if node is None or node.type == NodeType.ROOT:
            raise InvalidReference(node_id)

        if node.type == NodeType.SATELLITE:
            for child in node.children:
                self._state[child] = NodeState(checked=checked)
            self._recompute(node)
        else:
            self._state[node.id] = NodeState(checked=checked)
            self._recompute(self._nodes[node.parent_id])

        logger.debug(f"Toggled {node_id} -> {checked}")

    def _recompute(self, satellite: TreeNode) -> None:
        total = len(satellite.children)
        checked = sum(1 for child in satellite.children if self._state[child].checked)
        self._state[satellite.id] = NodeState(
            checked=total > 0 and checked == total,
            indeterminate=0 < checked < total,
        )

    def state(self, node_id: str) -> NodeState:
        """Copy of a node's selection state."""
        if node_id not in self._state:
            raise NotFound(f"No selection state for node: {node_id}")
        current = self._state[node_id]
        return NodeState(current.checked, current.indeterminate)

    def selected_sensor_ids(self) -> Set[str]:
        return {
            node_id for node_id, state in self._state.items()
            if state.checked and self._nodes[node_id].type == NodeType.SENSOR
        }

    def clear_selection(self) -> None:
        for node_id in self._state:
            self._state[node_id] = NodeState()

    def selection_snapshot(self) -> Dict[str, Dict[str, bool]]:
        return {node_id: state.to_dict() for node_id, state in self._state.items()}

    def to_payload(self) -> Dict[str, Any]:
        """Hierarchy with embedded selection state, for API consumers."""
        satellites = []
        for sat in self.satellites():
            satellites.append({
                "id": sat.id,
                "name": sat.name,
                "catalog_id": sat.catalog_id,
                "color_hex": sat.color_hex,
                "has_tle": sat.has_tle,
                **self._state[sat.id].to_dict(),
                "sensors": [
                    {
                        "id": sensor.id,
                        "name": sensor.name,
                        "color_hex": sensor.color_hex,
                        "attributes": dict(sensor.attributes),
                        **self._state[sensor.id].to_dict(),
                    }
                    for sensor in self.sensors_of(sat.id)
                ],
            })
        return {"id": ROOT_ID, "satellites": satellites}
