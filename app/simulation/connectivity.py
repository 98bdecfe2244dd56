"""
simulation/connectivity.py

Derives electrical nets from schematic geometry.

Every distinct integer-rounded coordinate (wire endpoint, junction, pin,
label) is mapped to a dense integer id once per call, and a union-find
over those ids groups transitively connected points. A pin joins a net
when it sits on a wire endpoint, along a wire, on another component's pin
or under a net label. Pins that attach to nothing are reported as floating
and get a singleton net of their own, so no pin ever resolves to None.

The analysis is a pure function of the schematic; ConnectivityCache lets a
caller reuse a result until the schematic's revision changes.
"""

import logging
from dataclasses import dataclass, field

from models.component import ComponentData
from models.geometry import points_equal, round_point
from models.net import GROUND_NET_NAME, NetData, NodeLabel, PinConnection

logger = logging.getLogger(__name__)


class UnionFind:
    """Disjoint-set forest over dense integer ids (path halving, union by size)."""

    def __init__(self):
        self._parent: list[int] = []
        self._size: list[int] = []

    def __len__(self):
        return len(self._parent)

    def add(self) -> int:
        node = len(self._parent)
        self._parent.append(node)
        self._size.append(1)
        return node

    def find(self, node: int) -> int:
        parent = self._parent
        while parent[node] != node:
            parent[node] = parent[parent[node]]
            node = parent[node]
        return node

    def union(self, a: int, b: int) -> int:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra
        if self._size[ra] < self._size[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        self._size[ra] += self._size[rb]
        return ra

    def connected(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)


class _PointArena:
    """Maps rounded coordinates to dense ids, in first-seen order."""

    def __init__(self, uf: UnionFind):
        self._uf = uf
        self._ids: dict[tuple, int] = {}
        self.points: list[tuple] = []

    def id_for(self, point) -> int:
        key = round_point(point)
        node = self._ids.get(key)
        if node is None:
            node = self._uf.add()
            self._ids[key] = node
            self.points.append(key)
        return node


@dataclass
class ConnectivityResult:
    """Nets, per-pin resolution and diagnostics for one schematic revision."""

    nets: list[NetData] = field(default_factory=list)
    pin_connections: list[PinConnection] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self):
        self._by_id = {net.net_id: net for net in self.nets}
        self._by_pin = {(pc.component_id, pc.pin_name): pc for pc in self.pin_connections}

    def net(self, net_id):
        return self._by_id.get(net_id)

    def net_for_pin(self, component_id: str, pin_name: str):
        """The NetData a pin resolved to, or None for an unknown pin."""
        pc = self._by_pin.get((component_id, pin_name))
        if pc is None:
            return None
        return self._by_id.get(pc.net_id)

    def node_names(self, component: ComponentData) -> list:
        """Net names for a component's pins in netlist pin order (None if unresolved)."""
        names = []
        for pin_name in component.definition.pin_order:
            net = self.net_for_pin(component.component_id, pin_name)
            names.append(net.name if net is not None else None)
        return names

    def floating_pins(self) -> list[PinConnection]:
        return [pc for pc in self.pin_connections if pc.floating]


def analyze_connectivity(schematic) -> ConnectivityResult:
    """
    Build nets from the schematic's wires, junctions, pins and labels.

    Args:
        schematic: SchematicModel (only read).

    Returns:
        ConnectivityResult. Diagonal wires are reported in ``errors`` and
        ignored; floating pins are reported in ``warnings``.
    """
    uf = UnionFind()
    arena = _PointArena(uf)
    errors = []
    warnings = []

    wires = []
    for wire in schematic.wires:
        if not wire.is_axis_aligned():
            errors.append(
                f"Wire {wire.wire_id or '?'} from ({wire.x1}, {wire.y1}) to ({wire.x2}, {wire.y2}) "
                f"is not horizontal or vertical; ignored"
            )
            continue
        wires.append(wire)

    # 1. Both endpoints of a wire are one conductor
    for wire in wires:
        uf.union(arena.id_for(wire.start), arena.id_for(wire.end))

    # 2. Junctions join every wire they sit on
    for junction in schematic.junctions:
        jid = arena.id_for(junction.position)
        for wire in wires:
            if wire.contains_point(junction.position):
                uf.union(jid, arena.id_for(wire.start))

    # 3. Coincident endpoints of distinct wires
    for i, w1 in enumerate(wires):
        for w2 in wires[i + 1:]:
            for p1 in w1.endpoints:
                for p2 in w2.endpoints:
                    if points_equal(p1, p2):
                        uf.union(arena.id_for(p1), arena.id_for(p2))

    # 4. Pins
    pin_entries = []  # (component, pin_name, position)
    position_counts: dict[tuple, int] = {}
    for component in schematic.components.values():
        for pin_name, position in component.get_pin_positions():
            pin_entries.append((component, pin_name, position))
            key = round_point(position)
            position_counts[key] = position_counts.get(key, 0) + 1

    label_points = {round_point(label.position) for label in schematic.net_labels}
    ground_ids = []
    pin_ids: dict[int, int] = {}  # index into pin_entries -> arena id

    for index, (component, pin_name, position) in enumerate(pin_entries):
        touching = [w for w in wires if _touches(position, w)]
        shared = position_counts[round_point(position)] > 1
        labelled = round_point(position) in label_points
        if not (touching or shared or labelled or component.is_ground):
            continue
        pid = arena.id_for(position)
        for wire in touching:
            uf.union(pid, arena.id_for(wire.start))
        pin_ids[index] = pid
        if component.is_ground:
            ground_ids.append(pid)

    # Ground symbols are global: every one of them is node 0
    for gid in ground_ids[1:]:
        uf.union(ground_ids[0], gid)

    # 5. Net labels: attach to the wire or pin under them, equal names join
    label_roots: dict[str, int] = {}
    for label in schematic.net_labels:
        attach = [w for w in wires if _touches(label.position, w)]
        on_pin = round_point(label.position) in position_counts
        if not attach and not on_pin:
            warnings.append(f"Net label '{label.name}' at ({label.x}, {label.y}) is not on a wire or pin")
            continue
        lid = arena.id_for(label.position)
        for wire in attach:
            uf.union(lid, arena.id_for(wire.start))
        if label.name in label_roots:
            uf.union(label_roots[label.name], lid)
        else:
            label_roots[label.name] = lid
        if label.is_ground:
            ground_ids.append(lid)
            if len(ground_ids) > 1:
                uf.union(ground_ids[0], lid)

    ground_root = uf.find(ground_ids[0]) if ground_ids else None

    # Names requested by labels, per root (first label wins)
    root_labels: dict[int, str] = {}
    for name, lid in label_roots.items():
        root = uf.find(lid)
        if root == ground_root:
            continue
        if root in root_labels:
            warnings.append(f"Net has multiple labels '{root_labels[root]}' and '{name}'; using '{root_labels[root]}'")
            continue
        root_labels[root] = name

    taken_names = set(root_labels.values())
    auto_number = 0

    def next_auto_name():
        nonlocal auto_number
        while True:
            auto_number += 1
            if str(auto_number) not in taken_names:
                return str(auto_number)

    # 6. One net per root, numbered in encounter order
    nets = []
    root_to_net: dict[int, NetData] = {}
    net_index = 0
    for node, point in enumerate(arena.points):
        root = uf.find(node)
        net = root_to_net.get(root)
        if net is None:
            if root == ground_root:
                net = NetData(net_id="net_0", name=GROUND_NET_NAME, is_ground=True)
            else:
                net_index += 1
                name = root_labels.get(root) or next_auto_name()
                net = NetData(net_id=f"net_{net_index}", name=name)
            root_to_net[root] = net
            nets.append(net)
        net.points.append(point)

    # 7. Resolve pins; floating pins get a synthesized singleton net
    pin_connections = []
    for index, (component, pin_name, position) in enumerate(pin_entries):
        pid = pin_ids.get(index)
        if pid is not None:
            net = root_to_net[uf.find(pid)]
            pin_connections.append(PinConnection(component.component_id, pin_name, position, net.net_id))
            continue
        net_index += 1
        net = NetData(net_id=f"net_{net_index}", name=next_auto_name(), points=[round_point(position)])
        nets.append(net)
        pin_connections.append(PinConnection(component.component_id, pin_name, position, net.net_id, floating=True))
        warnings.append(f"{component.inst_name} pin {pin_name} is floating (not connected)")

    logger.debug(
        "Connectivity: %d nets, %d pins, %d floating, %d errors",
        len(nets),
        len(pin_connections),
        sum(1 for pc in pin_connections if pc.floating),
        len(errors),
    )
    return ConnectivityResult(nets=nets, pin_connections=pin_connections, errors=errors, warnings=warnings)


def _touches(point, wire) -> bool:
    return points_equal(point, wire.start) or points_equal(point, wire.end) or wire.contains_point(point)


class ConnectivityCache:
    """Reuses one analysis per schematic revision.

    Owned by the caller; nothing is shared between cache instances.
    """

    def __init__(self):
        self._key = None
        self._result = None

    def get(self, schematic) -> ConnectivityResult:
        key = (id(schematic), schematic.revision)
        if key != self._key:
            self._result = analyze_connectivity(schematic)
            self._key = key
        return self._result

    def invalidate(self):
        self._key = None
        self._result = None


def generate_node_labels(schematic, result=None) -> list[NodeLabel]:
    """One display label per non-ground net that has a wire or pin point."""
    if result is None:
        result = analyze_connectivity(schematic)
    labels = []
    for net in result.nets:
        if net.is_ground or not net.points:
            continue
        x, y = net.points[0]
        labels.append(NodeLabel(net_id=net.net_id, name=net.name, x=x, y=y))
    return labels
