"""
layout/dot_layout.py

Graphviz ``dot`` as the layering engine.

The layout graph goes to dot as fixed-size boxes ranked top to bottom, one
edge per net star edge, each edge end attached to the side of the box its
pin sits on. Orthogonal splines and the spacing options leave room for the
router. Only node centres are read back (``pipe(format="json")``); the
edge paths dot computes are discarded.

Needs the Graphviz executables on PATH.
"""

import json
import logging

import graphviz

from settings.constants import POINTS_PER_INCH

logger = logging.getLogger(__name__)


class LayoutEngineError(RuntimeError):
    """Raised when the external layout engine cannot be run."""


def _inches(value) -> str:
    return f"{value / POINTS_PER_INCH:.4f}"


def port_side(port, node) -> str:
    """Compass point of the box side a port sits on (n, s, w or e)."""
    if port.y <= 0:
        return "n"
    if port.y >= node.height:
        return "s"
    return "w" if port.x < node.width / 2 else "e"


def build_dot_graph(graph, options) -> graphviz.Digraph:
    """Describe a LayoutGraph as a dot digraph."""
    dot = graphviz.Digraph(name="layout", engine="dot")
    dot.attr(
        rankdir="TB",
        splines="ortho",
        nodesep=_inches(options.node_spacing),
        ranksep=_inches(options.layer_spacing),
    )
    dot.attr("node", shape="box", fixedsize="true", label="")

    grounds = [node for node in graph.nodes if node.is_ground] if options.ground_layer else []
    for node in graph.nodes:
        if node in grounds:
            continue
        dot.node(node.node_id, width=_inches(node.width), height=_inches(node.height))
    if grounds:
        with dot.subgraph(name="ground") as sink:
            sink.attr(rank="sink")
            for node in grounds:
                sink.node(node.node_id, width=_inches(node.width), height=_inches(node.height))

    nodes = {node.node_id: node for node in graph.nodes}
    for edge in graph.edges:
        source, target = edge.source, edge.target
        if source.node_id == target.node_id:
            continue
        dot.edge(
            f"{source.node_id}:{port_side(source, nodes[source.node_id])}",
            f"{target.node_id}:{port_side(target, nodes[target.node_id])}",
            id=edge.edge_id,
        )
    return dot


def read_positions(data, graph) -> dict[str, tuple]:
    """
    Top-left corners from dot's JSON output.

    dot puts the origin at the bottom left with y growing upward; the result
    is flipped to y-down with the drawing's top edge at y = 0 and its
    horizontal middle at x = 0.
    """
    llx, _lly, urx, ury = (float(v) for v in data["bb"].split(","))
    middle = (llx + urx) / 2
    centres = {}
    for obj in data.get("objects", []):
        if "pos" in obj:
            x, y = (float(v) for v in obj["pos"].split(","))
            centres[obj["name"]] = (x - middle, ury - y)

    positions = {}
    for node in graph.nodes:
        if node.node_id not in centres:
            raise LayoutEngineError(f"dot returned no position for {node.node_id}")
        x, y = centres[node.node_id]
        positions[node.node_id] = (x - node.width / 2, y - node.height / 2)
    return positions


def dot_layout(graph, options) -> dict[str, tuple]:
    """Run dot on a LayoutGraph and return the top-left corner per node id."""
    if not graph.nodes:
        return {}
    dot = build_dot_graph(graph, options)
    try:
        output = dot.pipe(format="json", quiet=True)
    except graphviz.ExecutableNotFound as e:
        raise LayoutEngineError("the dot engine needs the Graphviz executables on PATH") from e
    except graphviz.CalledProcessError as e:
        raise LayoutEngineError(f"dot failed: {e}") from e
    positions = read_positions(json.loads(output), graph)
    logger.debug("dot layout: %d nodes", len(positions))
    return positions
