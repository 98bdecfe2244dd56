"""
SPICE directives and device models attached to a schematic.
"""

import re
from dataclasses import dataclass
from typing import Optional

DIRECTIVE_TYPES = ("tran", "ac", "dc", "op", "param", "model", "other")
ANALYSIS_TYPES = ("tran", "ac", "dc", "op")


def directive_type(text: str) -> str:
    """Classify a dot-command by its keyword."""
    match = re.match(r"^\s*\.(\w+)", text)
    if not match:
        return "other"
    keyword = match.group(1).lower()
    return keyword if keyword in DIRECTIVE_TYPES else "other"


@dataclass
class DirectiveData:
    """A dot-command line, optionally placed on the canvas at (x, y)."""

    text: str
    directive_id: str = ""
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def type(self) -> str:
        return directive_type(self.text)

    @property
    def is_analysis(self) -> bool:
        return self.type in ANALYSIS_TYPES

    def to_dict(self) -> dict:
        data = {"id": self.directive_id, "type": self.type, "text": self.text}
        if self.x is not None:
            data["x"] = self.x
            data["y"] = self.y
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DirectiveData":
        return cls(
            text=data["text"],
            directive_id=data.get("id", ""),
            x=data.get("x"),
            y=data.get("y"),
        )


@dataclass
class SpiceModel:
    """A .model card: name, device type (D, NPN, PNP, NMOS, PMOS) and raw parameters."""

    name: str
    type: str
    params: str = ""

    def to_spice(self) -> str:
        return f".model {self.name} {self.type}({self.params})"

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "params": self.params}

    @classmethod
    def from_dict(cls, data: dict) -> "SpiceModel":
        return cls(name=data["name"], type=str(data["type"]).upper(), params=data.get("params", ""))
