"""
layout/engine.py

Netlist -> schematic: graph construction, layered placement, then channel
routing. The resulting schematic re-analyses to the same nets as the
netlist; non-ground net names are carried by net labels.
"""

import logging

from models.component import ComponentData
from models.directive import DirectiveData
from models.geometry import snap, snap_point
from models.junction import JunctionData
from models.net import GROUND_NET_NAME, NetLabelData
from models.schematic import SchematicModel
from models.wire import WireData
from settings.constants import GRID_SIZE
from settings.layout_options import LayoutOptions
from simulation.connectivity import generate_node_labels
from simulation.netlist_parser import parse_netlist

from .graph_builder import build_layout_graph
from .layered import layered_layout
from .router import ChannelRouter

logger = logging.getLogger(__name__)


def place_components(graph, positions) -> SchematicModel:
    """Create one component per layout node, centred on its layered box and snapped."""
    schematic = SchematicModel()
    for node in graph.nodes:
        left, top = positions[node.node_id]
        centre = snap_point((left + node.width / 2, top + node.height / 2))
        attributes = {"InstName": node.node_id}
        if node.value:
            attributes["Value"] = node.value
        schematic.add_component(
            ComponentData(
                component_id=node.node_id,
                component_type=node.component_type,
                position=centre,
                attributes=attributes,
            )
        )
    return schematic


def _net_pins(graph, schematic):
    nets = {}
    for net, ports in graph.nets.items():
        pins = []
        for port in ports:
            point = schematic.components[port.node_id].get_pin_position(port.pin_name)
            point = (snap(point[0]), snap(point[1]))
            if point not in pins:
                pins.append(point)
        nets[net] = pins
    return nets


def layout_netlist(parsed, options=None) -> SchematicModel:
    """
    Lay out a ParsedNetlist as a schematic.

    Args:
        parsed: ParsedNetlist from simulation.netlist_parser.
        options: LayoutOptions (defaults when None).

    Returns:
        SchematicModel with components, wires, junctions, net labels,
        node labels and the netlist's models, parameters and directives.

    Raises:
        RoutingError: If some pin cannot be routed.
        LayoutEngineError: If the dot engine is selected but cannot run.
    """
    options = (options or LayoutOptions()).validate()
    graph = build_layout_graph(parsed)
    positions = layered_layout(graph, options)
    schematic = place_components(graph, positions)

    nets = _net_pins(graph, schematic)
    boxes = [comp.get_bounding_box() for comp in schematic.components.values()]
    router = ChannelRouter(
        grid_size=GRID_SIZE,
        channel_margin=options.channel_margin,
        search_limit=options.route_search_limit,
    )
    routing = router.route(nets, boxes)

    for routed in routing.nets:
        for x1, y1, x2, y2 in routed.segments:
            schematic.add_wire(WireData(x1, y1, x2, y2))
        if routed.name == GROUND_NET_NAME:
            continue
        point = routed.label_point or nets[routed.name][0]
        schematic.add_net_label(NetLabelData(name=routed.name, x=point[0], y=point[1]))
    for x, y in routing.junctions:
        schematic.add_junction(JunctionData(x=x, y=y))

    for model in parsed.models.values():
        schematic.add_model(model)
    for name, value in parsed.parameters.items():
        schematic.set_parameter(name, value)
    for text in parsed.directives:
        schematic.add_directive(DirectiveData(text=text))

    schematic.node_labels = generate_node_labels(schematic)
    logger.info(
        "Laid out %d components with %d wires and %d junctions",
        len(schematic.components),
        len(schematic.wires),
        len(schematic.junctions),
    )
    return schematic


def import_netlist(text, options=None) -> SchematicModel:
    """Parse SPICE netlist text and lay it out."""
    return layout_netlist(parse_netlist(text), options)
