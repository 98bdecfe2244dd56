"""
Netlist-to-schematic layout: layout graph, layered placement and channel routing.
"""

from .dot_layout import LayoutEngineError
from .engine import import_netlist, layout_netlist
from .graph_builder import LayoutGraph, build_layout_graph
from .router import ChannelRouter, RoutingError

__all__ = [
    "import_netlist",
    "layout_netlist",
    "LayoutGraph",
    "build_layout_graph",
    "LayoutEngineError",
    "ChannelRouter",
    "RoutingError",
]
