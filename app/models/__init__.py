"""
Pure Python data models for the schematic topology engine.

This package contains the data classes that describe a schematic: placed
components, wire segments, junctions, labels, directives and simulation
traces. None of them know about connectivity; that is derived on demand.
"""

from .component import COMPONENT_DEFS, ComponentData, ComponentType, PinDef
from .directive import DirectiveData, SpiceModel
from .junction import JunctionData
from .net import NetData, NetLabelData, NodeLabel, PinConnection
from .schematic import SchematicFormatError, SchematicModel
from .trace import TraceData, TraceType
from .wire import WireData

__all__ = [
    "COMPONENT_DEFS",
    "ComponentData",
    "ComponentType",
    "PinDef",
    "DirectiveData",
    "SpiceModel",
    "JunctionData",
    "NetData",
    "NetLabelData",
    "NodeLabel",
    "PinConnection",
    "SchematicFormatError",
    "SchematicModel",
    "TraceData",
    "TraceType",
    "WireData",
]
