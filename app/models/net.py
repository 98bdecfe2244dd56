"""
Net data - electrical equivalence classes derived from schematic geometry.

NetData and PinConnection are pure derived data produced by connectivity
analysis; they are never persisted with the schematic. NetLabelData is the
persisted, user-placed flag that names a net. NodeLabel is a display-only
annotation produced for canvases.
"""

from dataclasses import dataclass, field
from typing import Optional

GROUND_NET_NAME = "0"


@dataclass
class NetData:
    """
    A set of transitively connected points.

    Attributes:
        net_id: Stable identifier within one analysis ("net_0" for ground).
        name: SPICE node name ("0" for ground, a number or a label otherwise).
        points: Member coordinates in encounter order.
        is_ground: True if a ground pin or a "0" label belongs to the net.
    """

    net_id: str
    name: str
    points: list = field(default_factory=list)
    is_ground: bool = False

    def __repr__(self):
        kind = "ground" if self.is_ground else "net"
        return f"NetData({self.net_id} '{self.name}' {kind}, {len(self.points)} points)"


@dataclass
class PinConnection:
    """One component pin resolved against the nets of an analysis."""

    component_id: str
    pin_name: str
    position: tuple
    net_id: Optional[str] = None
    floating: bool = False


@dataclass
class NetLabelData:
    """A named flag placed on a wire or pin; equal names join their nets."""

    name: str
    x: float
    y: float

    @property
    def position(self) -> tuple:
        return (self.x, self.y)

    @property
    def is_ground(self) -> bool:
        return self.name == GROUND_NET_NAME

    def to_dict(self) -> dict:
        return {"name": self.name, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "NetLabelData":
        return cls(name=str(data["name"]), x=data["x"], y=data["y"])


@dataclass
class NodeLabel:
    """Display annotation showing a net's name at one of its points."""

    net_id: str
    name: str
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"netId": self.net_id, "name": self.name, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "NodeLabel":
        return cls(net_id=data.get("netId", ""), name=str(data["name"]), x=data["x"], y=data["y"])
