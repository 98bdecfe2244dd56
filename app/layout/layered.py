"""
layout/layered.py

Layer and coordinate assignment for the layout graph.

Two engines are available. The default hands the work to networkx: layers
are breadth-first distances from the first node (in netlist order) of each
connected component (``networkx.bfs_layers``), and the place of every node
inside its layer comes from ``networkx.multipartite_layout``. The ground
node gets a layer of its own at the bottom. The ``dot`` engine passes the
whole port graph to Graphviz instead (see layout/dot_layout.py).

Only node coordinates come out of here (top-left corners); edge paths are
left to the router.
"""

import logging

import networkx as nx

from .dot_layout import dot_layout

logger = logging.getLogger(__name__)


def build_nx_graph(graph) -> nx.Graph:
    """Undirected node graph; parallel net edges collapse, self loops are dropped."""
    g = nx.Graph()
    for order, node in enumerate(graph.nodes):
        g.add_node(node.node_id, order=order, width=node.width, height=node.height)
    for edge in graph.edges:
        a, b = edge.source.node_id, edge.target.node_id
        if a == b:
            continue
        if g.has_edge(a, b):
            g[a][b]["nets"].append(edge.net)
        else:
            g.add_edge(a, b, nets=[edge.net])
    return g


def assign_layers(g, ground_ids=(), ground_layer=True) -> list[list[str]]:
    """Group node ids into layers, top to bottom."""
    order = nx.get_node_attributes(g, "order")
    body = g.copy()
    separate = [n for n in ground_ids if n in body] if ground_layer else []
    body.remove_nodes_from(separate)

    layers: list[list[str]] = []
    seen = set()
    for source in sorted(body.nodes, key=order.get):
        if source in seen:
            continue
        for depth, layer in enumerate(nx.bfs_layers(body, source)):
            if depth == len(layers):
                layers.append([])
            members = sorted(layer, key=order.get)
            layers[depth].extend(members)
            seen.update(members)

    if separate:
        layers.append(sorted(separate, key=order.get))
    return layers


def _step(pos, subsets):
    """Length of one multipartite_layout step; the layout comes back rescaled."""
    for layer in subsets.values():
        if len(layer) > 1:
            return abs(pos[layer[1]][1] - pos[layer[0]][1])
    heads = [layer[0] for layer in subsets.values()]
    if len(heads) > 1:
        return abs(pos[heads[1]][0] - pos[heads[0]][0])
    return 1.0


def assign_coordinates(g, layers, node_spacing, layer_spacing) -> dict[str, tuple]:
    """
    Top-left corner per node: layers stack downward, each row centred on x = 0.

    Slots within a row are one widest-node-plus-spacing pitch apart.
    """
    subsets = {depth: list(layer) for depth, layer in enumerate(layers) if layer}
    if not subsets:
        return {}
    pos = nx.multipartite_layout(g, subset_key=subsets)
    step = _step(pos, subsets) or 1.0

    widths = nx.get_node_attributes(g, "width")
    heights = nx.get_node_attributes(g, "height")
    positions = {}
    top = 0
    for layer in subsets.values():
        pitch = max(widths[n] for n in layer) + node_spacing
        layer_height = max(heights[n] for n in layer)
        middle = sum(pos[n][1] for n in layer) / len(layer)
        for node in layer:
            centre_x = round((pos[node][1] - middle) / step * 2) / 2 * pitch
            positions[node] = (centre_x - widths[node] / 2, top + (layer_height - heights[node]) / 2)
        top += layer_height + layer_spacing
    return positions


def layered_layout(graph, options) -> dict[str, tuple]:
    """Top-left corner per node id of a LayoutGraph, using the configured engine."""
    if options.engine == "dot":
        return dot_layout(graph, options)

    g = build_nx_graph(graph)
    ground_ids = [node.node_id for node in graph.nodes if node.is_ground]
    layers = assign_layers(g, ground_ids, options.ground_layer)
    positions = assign_coordinates(g, layers, options.node_spacing, options.layer_spacing)
    logger.debug("Layered layout: %d nodes in %d layers", len(positions), len(layers))
    return positions
