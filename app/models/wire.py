"""
WireData - Pure Python data model for schematic wires.

A wire is one straight segment between two points. Valid schematics only
contain horizontal or vertical wires; wires never reference components,
a wire connects whatever happens to sit on its endpoints or along it.
"""

from dataclasses import dataclass

from models.geometry import is_axis_aligned, point_on_segment
from settings.constants import CONNECTION_TOLERANCE


@dataclass
class WireData:
    """A single straight wire segment (x1, y1) -> (x2, y2)."""

    x1: float
    y1: float
    x2: float
    y2: float
    wire_id: str = ""

    @property
    def start(self) -> tuple:
        return (self.x1, self.y1)

    @property
    def end(self) -> tuple:
        return (self.x2, self.y2)

    @property
    def endpoints(self) -> list[tuple]:
        return [self.start, self.end]

    def is_horizontal(self) -> bool:
        return self.y1 == self.y2

    def is_vertical(self) -> bool:
        return self.x1 == self.x2

    def is_axis_aligned(self) -> bool:
        return is_axis_aligned(self.x1, self.y1, self.x2, self.y2)

    def length(self) -> float:
        return abs(self.x2 - self.x1) + abs(self.y2 - self.y1)

    def contains_point(self, point, tolerance=CONNECTION_TOLERANCE) -> bool:
        """True if point lies on this wire (endpoints included)."""
        return point_on_segment(point, self.start, self.end, tolerance)

    def translated(self, dx, dy) -> "WireData":
        return WireData(self.x1 + dx, self.y1 + dy, self.x2 + dx, self.y2 + dy, self.wire_id)

    def to_dict(self) -> dict:
        return {"id": self.wire_id, "x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}

    @classmethod
    def from_dict(cls, data: dict) -> "WireData":
        return cls(
            x1=data["x1"],
            y1=data["y1"],
            x2=data["x2"],
            y2=data["y2"],
            wire_id=data.get("id", ""),
        )

    def __repr__(self):
        return f"WireData({self.wire_id}: ({self.x1}, {self.y1})->({self.x2}, {self.y2}))"
