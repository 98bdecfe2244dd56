"""
layout/graph_builder.py

Builds the node-and-port graph handed to the layering step.

One node per parsed component, sized from the component catalogue, plus a
single synthetic ground node that every reference to node 0 folds into.
Ports sit at the catalogue pin offsets, converted from the component's
centre-origin frame to the node's top-left frame. Each net becomes a star
of edges from its first port to every other port, tagged with the net so
the router can tell nets apart.
"""

import logging
from dataclasses import dataclass, field

from models.component import COMPONENT_DEFS, ComponentType
from models.net import GROUND_NET_NAME

logger = logging.getLogger(__name__)

GROUND_NODE_ID = "GND1"
_GROUND_ALIASES = {GROUND_NET_NAME, "gnd"}


def is_ground_net(name) -> bool:
    return name.lower() in _GROUND_ALIASES


@dataclass
class LayoutPort:
    port_id: str
    node_id: str
    pin_name: str
    x: float          # relative to the node's top-left corner
    y: float
    net: str


@dataclass
class LayoutNode:
    node_id: str
    component_type: ComponentType
    width: int
    height: int
    value: str = ""
    ports: list[LayoutPort] = field(default_factory=list)

    @property
    def is_ground(self) -> bool:
        return self.component_type == ComponentType.GROUND


@dataclass
class LayoutEdge:
    edge_id: str
    source: LayoutPort
    target: LayoutPort
    net: str
    net_index: int


@dataclass
class LayoutGraph:
    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    # net name -> ports in encounter order
    nets: dict[str, list[LayoutPort]] = field(default_factory=dict)

    def node(self, node_id):
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        raise KeyError(node_id)

    def __repr__(self):
        return f"LayoutGraph({len(self.nodes)} nodes, {len(self.edges)} edges, {len(self.nets)} nets)"


def _make_node(node_id, component_type, value, nets):
    definition = COMPONENT_DEFS[component_type]
    node = LayoutNode(
        node_id=node_id,
        component_type=component_type,
        width=definition.width,
        height=definition.height,
        value=value,
    )
    for pin_name, net in zip(definition.pin_order, nets):
        pin = definition.pin(pin_name)
        node.ports.append(
            LayoutPort(
                port_id=f"{node_id}.{pin_name}",
                node_id=node_id,
                pin_name=pin_name,
                x=pin.x + definition.width / 2,
                y=pin.y + definition.height / 2,
                net=net,
            )
        )
    return node


def build_layout_graph(parsed) -> LayoutGraph:
    """
    Build the layout graph for a ParsedNetlist.

    Ground references ("0", "gnd") are folded into one net named "0"
    attached to a single synthetic ground node placed last.
    """
    graph = LayoutGraph()
    uses_ground = False
    used_ids = set()

    for comp in parsed.components:
        node_id = comp.name
        suffix = 1
        while node_id.upper() in used_ids:
            suffix += 1
            node_id = f"{comp.name}_{suffix}"
        if node_id != comp.name:
            logger.warning("Duplicate instance name %s renamed to %s", comp.name, node_id)
        used_ids.add(node_id.upper())

        nets = []
        for node_name in comp.nodes:
            if is_ground_net(node_name):
                uses_ground = True
                nets.append(GROUND_NET_NAME)
            else:
                nets.append(node_name)
        # MOSFET bulk is implied by the source pin, it is not a separate port
        graph.nodes.append(_make_node(node_id, comp.type, comp.value, nets))

    if uses_ground:
        graph.nodes.append(_make_node(GROUND_NODE_ID, ComponentType.GROUND, "", [GROUND_NET_NAME]))

    for node in graph.nodes:
        for port in node.ports:
            graph.nets.setdefault(port.net, []).append(port)

    for net_index, (net, ports) in enumerate(graph.nets.items()):
        hub = ports[0]
        for i, port in enumerate(ports[1:], start=1):
            graph.edges.append(
                LayoutEdge(edge_id=f"{net}#{i}", source=hub, target=port, net=net, net_index=net_index)
            )

    logger.debug("Layout graph: %r", graph)
    return graph
