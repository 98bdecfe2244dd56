"""
ComponentData - Pure Python data model for circuit components.

All positions are represented as tuples (x, y). A component's geometry
(body size and pin offsets) is fixed by its ComponentType; nothing about a
component refers to wires, connectivity is purely positional.

Component types use display names as canonical identifiers:
'Resistor', 'Capacitor', 'Inductor', 'Diode', 'Voltage Source',
'Current Source', 'Ground', 'BJT NPN', 'BJT PNP', 'MOSFET NMOS', 'MOSFET PMOS'
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from models.geometry import VALID_ROTATIONS, transform_point


class ComponentType(str, Enum):
    RESISTOR = "Resistor"
    CAPACITOR = "Capacitor"
    INDUCTOR = "Inductor"
    DIODE = "Diode"
    VOLTAGE_SOURCE = "Voltage Source"
    CURRENT_SOURCE = "Current Source"
    GROUND = "Ground"
    BJT_NPN = "BJT NPN"
    BJT_PNP = "BJT PNP"
    MOSFET_NMOS = "MOSFET NMOS"
    MOSFET_PMOS = "MOSFET PMOS"

    @classmethod
    def from_string(cls, text):
        """Resolve a display name or short alias ('res', 'npn', ...)."""
        if isinstance(text, cls):
            return text
        key = str(text).strip()
        for member in cls:
            if member.value == key:
                return member
        alias = _TYPE_ALIASES.get(key.lower())
        if alias is None:
            raise ValueError(f"Unknown component type: {text!r}")
        return alias


_TYPE_ALIASES = {
    "resistor": ComponentType.RESISTOR,
    "res": ComponentType.RESISTOR,
    "capacitor": ComponentType.CAPACITOR,
    "cap": ComponentType.CAPACITOR,
    "inductor": ComponentType.INDUCTOR,
    "ind": ComponentType.INDUCTOR,
    "diode": ComponentType.DIODE,
    "voltage": ComponentType.VOLTAGE_SOURCE,
    "voltage source": ComponentType.VOLTAGE_SOURCE,
    "current": ComponentType.CURRENT_SOURCE,
    "current source": ComponentType.CURRENT_SOURCE,
    "ground": ComponentType.GROUND,
    "gnd": ComponentType.GROUND,
    "npn": ComponentType.BJT_NPN,
    "bjt npn": ComponentType.BJT_NPN,
    "pnp": ComponentType.BJT_PNP,
    "bjt pnp": ComponentType.BJT_PNP,
    "nmos": ComponentType.MOSFET_NMOS,
    "mosfet nmos": ComponentType.MOSFET_NMOS,
    "pmos": ComponentType.MOSFET_PMOS,
    "mosfet pmos": ComponentType.MOSFET_PMOS,
}


@dataclass(frozen=True)
class PinDef:
    """A named connection point in the component's local, centre-origin frame."""

    name: str
    x: int
    y: int

    @property
    def offset(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class ComponentDef:
    """Fixed geometry and netlist behaviour for one component type."""

    prefix: str
    width: int
    height: int
    pins: tuple
    pin_order: tuple
    default_value: str

    def pin(self, name):
        for pin in self.pins:
            if pin.name == name:
                return pin
        raise KeyError(name)


_TWO_TERMINAL = (PinDef("1", 0, -30), PinDef("2", 0, 30))
_DIODE_PINS = (PinDef("A", 0, -30), PinDef("K", 0, 30))
_SOURCE_PINS = (PinDef("+", 0, -40), PinDef("-", 0, 40))
_BJT_PINS = (PinDef("B", -30, 0), PinDef("C", 10, -30), PinDef("E", 10, 30))
_MOSFET_PINS = (PinDef("G", -30, 0), PinDef("D", 10, -30), PinDef("S", 10, 30))

COMPONENT_DEFS = {
    ComponentType.RESISTOR: ComponentDef("R", 20, 60, _TWO_TERMINAL, ("1", "2"), "1k"),
    ComponentType.CAPACITOR: ComponentDef("C", 24, 60, _TWO_TERMINAL, ("1", "2"), "1u"),
    ComponentType.INDUCTOR: ComponentDef("L", 16, 60, _TWO_TERMINAL, ("1", "2"), "1m"),
    ComponentType.DIODE: ComponentDef("D", 24, 60, _DIODE_PINS, ("A", "K"), "D"),
    ComponentType.VOLTAGE_SOURCE: ComponentDef("V", 40, 80, _SOURCE_PINS, ("+", "-"), "DC 5"),
    ComponentType.CURRENT_SOURCE: ComponentDef("I", 40, 80, _SOURCE_PINS, ("+", "-"), "DC 1m"),
    ComponentType.GROUND: ComponentDef("", 30, 20, (PinDef("0", 0, -10),), ("0",), ""),
    ComponentType.BJT_NPN: ComponentDef("Q", 40, 60, _BJT_PINS, ("C", "B", "E"), "2N3904"),
    ComponentType.BJT_PNP: ComponentDef("Q", 40, 60, _BJT_PINS, ("C", "B", "E"), "2N3906"),
    ComponentType.MOSFET_NMOS: ComponentDef("M", 40, 60, _MOSFET_PINS, ("D", "G", "S"), "NMOS"),
    ComponentType.MOSFET_PMOS: ComponentDef("M", 40, 60, _MOSFET_PINS, ("D", "G", "S"), "PMOS"),
}

_missing = [t.value for t in ComponentType if t not in COMPONENT_DEFS]
if _missing:
    raise RuntimeError(f"Component types without a definition: {_missing}")

# Mapping of SPICE prefix letters to the type assumed before model lookup
PREFIX_TO_TYPE = {
    "R": ComponentType.RESISTOR,
    "C": ComponentType.CAPACITOR,
    "L": ComponentType.INDUCTOR,
    "D": ComponentType.DIODE,
    "V": ComponentType.VOLTAGE_SOURCE,
    "I": ComponentType.CURRENT_SOURCE,
    "Q": ComponentType.BJT_NPN,
    "M": ComponentType.MOSFET_NMOS,
}

SEMICONDUCTOR_TYPES = frozenset(
    {
        ComponentType.DIODE,
        ComponentType.BJT_NPN,
        ComponentType.BJT_PNP,
        ComponentType.MOSFET_NMOS,
        ComponentType.MOSFET_PMOS,
    }
)


def component_def(component_type):
    """Return the ComponentDef for a type (display name or enum)."""
    return COMPONENT_DEFS[ComponentType.from_string(component_type)]


def next_instance_name(component_type, counters):
    """Allocate the next instance name for a type.

    Args:
        component_type: ComponentType (or its display name).
        counters: Mapping of prefix -> highest number used so far. Not mutated.

    Returns:
        (instance_name, new_counters)
    """
    ctype = ComponentType.from_string(component_type)
    prefix = COMPONENT_DEFS[ctype].prefix or "GND"
    new_counters = dict(counters)
    new_counters[prefix] = new_counters.get(prefix, 0) + 1
    return f"{prefix}{new_counters[prefix]}", new_counters


def bump_counter(counters, instance_name):
    """Return counters updated so future names never collide with instance_name."""
    match = re.match(r"^([A-Za-z]+)(\d+)$", instance_name)
    if not match:
        return dict(counters)
    prefix = match.group(1).upper()
    number = int(match.group(2))
    new_counters = dict(counters)
    new_counters[prefix] = max(new_counters.get(prefix, 0), number)
    return new_counters


@dataclass
class ComponentData:
    """
    Pure Python representation of a placed circuit component.

    Attributes must carry an instance name ("InstName") and a value
    string ("Value"); both are filled from defaults when absent.
    """

    component_id: str
    component_type: ComponentType
    position: tuple = (0, 0)
    rotation: int = 0
    mirror: bool = False
    attributes: dict = field(default_factory=dict)

    def __post_init__(self):
        self.component_type = ComponentType.from_string(self.component_type)
        if self.rotation % 360 not in VALID_ROTATIONS:
            raise ValueError(f"{self.component_id}: rotation must be 0, 90, 180 or 270, got {self.rotation}")
        self.rotation = self.rotation % 360
        self.attributes = dict(self.attributes)
        self.attributes.setdefault("InstName", self.component_id)
        self.attributes.setdefault("Value", self.definition.default_value)

    @property
    def definition(self) -> ComponentDef:
        return COMPONENT_DEFS[self.component_type]

    @property
    def inst_name(self) -> str:
        return self.attributes["InstName"]

    @property
    def value(self) -> str:
        return self.attributes["Value"]

    @value.setter
    def value(self, new_value):
        self.attributes["Value"] = new_value

    @property
    def is_ground(self) -> bool:
        return self.component_type == ComponentType.GROUND

    @property
    def pin_names(self) -> list[str]:
        return [pin.name for pin in self.definition.pins]

    def get_pin_position(self, pin_name):
        """Absolute position of one pin after mirror, rotation and translation."""
        pin = self.definition.pin(pin_name)
        return transform_point(pin.offset, self.position, self.rotation, self.mirror)

    def get_pin_positions(self):
        """Return [(pin_name, (x, y)), ...] in definition order."""
        return [
            (pin.name, transform_point(pin.offset, self.position, self.rotation, self.mirror))
            for pin in self.definition.pins
        ]

    def get_bounding_box(self):
        """Axis-aligned body box (min_x, min_y, max_x, max_y), pins included."""
        w, h = self.definition.width, self.definition.height
        if self.rotation in (90, 270):
            w, h = h, w
        cx, cy = self.position
        xs = [cx - w / 2, cx + w / 2]
        ys = [cy - h / 2, cy + h / 2]
        for _, (px, py) in self.get_pin_positions():
            xs.append(px)
            ys.append(py)
        return (min(xs), min(ys), max(xs), max(ys))

    def to_dict(self) -> dict:
        return {
            "id": self.component_id,
            "type": self.component_type.value,
            "x": self.position[0],
            "y": self.position[1],
            "rotation": self.rotation,
            "mirror": self.mirror,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentData":
        return cls(
            component_id=data["id"],
            component_type=data["type"],
            position=(data.get("x", 0), data.get("y", 0)),
            rotation=data.get("rotation", 0),
            mirror=bool(data.get("mirror", False)),
            attributes=data.get("attributes", {}),
        )

    def __repr__(self):
        return f"ComponentData({self.component_id}, {self.component_type.value}, {self.value!r} at {self.position})"
