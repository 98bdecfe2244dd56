"""
JunctionData - explicit connection dot between crossing or meeting wires.
"""

from dataclasses import dataclass


@dataclass
class JunctionData:
    x: float
    y: float
    junction_id: str = ""

    @property
    def position(self) -> tuple:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"id": self.junction_id, "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "JunctionData":
        return cls(x=data["x"], y=data["y"], junction_id=data.get("id", ""))
