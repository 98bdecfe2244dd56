"""
TraceData - one named series from a simulation result.

Voltage series are named V(<net>), current series I(<instance>).
Values may be real or complex.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class TraceType(str, Enum):
    VOLTAGE = "voltage"
    CURRENT = "current"
    TIME = "time"
    FREQUENCY = "frequency"
    NOTYPE = "notype"


@dataclass
class TraceData:
    name: str
    type: TraceType
    values: np.ndarray

    def __post_init__(self):
        self.type = TraceType(self.type)
        self.values = np.asarray(self.values)

    def __len__(self):
        return len(self.values)

    def to_dict(self) -> dict:
        if np.iscomplexobj(self.values):
            values = [[float(v.real), float(v.imag)] for v in self.values]
        else:
            values = [float(v) for v in self.values]
        return {"name": self.name, "type": self.type.value, "values": values}

    @classmethod
    def from_dict(cls, data: dict) -> "TraceData":
        raw = data.get("values", [])
        if raw and isinstance(raw[0], (list, tuple)):
            values = np.array([complex(re_, im) for re_, im in raw])
        else:
            values = np.array(raw, dtype=float)
        return cls(name=data["name"], type=data.get("type", "notype"), values=values)


def voltage_trace_name(net_name: str) -> str:
    return f"V({net_name})"


def current_trace_name(instance_name: str) -> str:
    return f"I({instance_name})"


def find_trace(traces, name):
    """Case-insensitive lookup of a trace by name; None if absent."""
    target = name.lower()
    for trace in traces:
        if trace.name.lower() == target:
            return trace
    return None
