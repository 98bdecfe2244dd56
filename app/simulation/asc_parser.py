"""
simulation/asc_parser.py

Parses LTspice .asc schematic files and converts them into SchematicModel
objects with positional wires.

LTspice .asc format is a plain-text format with lines like:
    Version 4
    SHEET 1 880 680
    WIRE 192 192 80 192
    FLAG 80 256 0
    SYMBOL res 80 96 R0
    SYMATTR InstName R1
    SYMATTR Value 1k
    TEXT -32 280 Left 2 !.tran 10m

LTspice symbols have their own pin spacing. Each imported component is
placed so that its first pin sits exactly on the LTspice pin; the other pins
are stitched to their LTspice positions with short axis-aligned wires, so
the imported nets match what LTspice would netlist.
"""

import logging

from models.component import ComponentData, ComponentType
from models.directive import DirectiveData
from models.geometry import sub_points, transform_offset
from models.junction import JunctionData
from models.net import NetLabelData
from models.schematic import SchematicModel
from models.wire import WireData

from .spice_values import parse_model_directive, parse_param_directive

logger = logging.getLogger(__name__)


class AscParseError(ValueError):
    """Raised when an .asc file cannot be parsed."""


# LTspice symbol name -> component type
_SYMBOL_TO_TYPE = {
    "res": ComponentType.RESISTOR,
    "res2": ComponentType.RESISTOR,
    "cap": ComponentType.CAPACITOR,
    "cap2": ComponentType.CAPACITOR,
    "polcap": ComponentType.CAPACITOR,
    "ind": ComponentType.INDUCTOR,
    "ind2": ComponentType.INDUCTOR,
    "voltage": ComponentType.VOLTAGE_SOURCE,
    "current": ComponentType.CURRENT_SOURCE,
    "diode": ComponentType.DIODE,
    "schottky": ComponentType.DIODE,
    "zener": ComponentType.DIODE,
    "led": ComponentType.DIODE,
    "npn": ComponentType.BJT_NPN,
    "npn2": ComponentType.BJT_NPN,
    "pnp": ComponentType.BJT_PNP,
    "pnp2": ComponentType.BJT_PNP,
    "nmos": ComponentType.MOSFET_NMOS,
    "nmos3": ComponentType.MOSFET_NMOS,
    "pmos": ComponentType.MOSFET_PMOS,
    "pmos3": ComponentType.MOSFET_PMOS,
}

# LTspice pin offsets relative to the SYMBOL origin at R0, keyed by our pin names
_LT_PINS = {
    ComponentType.RESISTOR: {"1": (16, 16), "2": (16, 96)},
    ComponentType.CAPACITOR: {"1": (16, 0), "2": (16, 64)},
    ComponentType.INDUCTOR: {"1": (16, 16), "2": (16, 96)},
    ComponentType.DIODE: {"A": (16, 0), "K": (16, 64)},
    ComponentType.VOLTAGE_SOURCE: {"+": (0, 16), "-": (0, 96)},
    ComponentType.CURRENT_SOURCE: {"+": (0, 0), "-": (0, 80)},
    ComponentType.BJT_NPN: {"C": (64, 0), "B": (0, 48), "E": (64, 96)},
    ComponentType.BJT_PNP: {"C": (64, 96), "B": (0, 48), "E": (64, 0)},
    ComponentType.MOSFET_NMOS: {"D": (48, 0), "G": (0, 80), "S": (48, 96)},
    ComponentType.MOSFET_PMOS: {"D": (48, 96), "G": (0, 16), "S": (48, 0)},
}

_RECORDS = ("WIRE", "SYMBOL", "SYMATTR", "FLAG", "TEXT", "SHEET", "VERSION")


def looks_like_asc(text):
    """Cheap sniff: does the text start like an LTspice schematic?"""
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        keyword = stripped.split()[0].upper()
        return keyword in _RECORDS
    return False


def _parse_orientation(code):
    """Convert an LTspice orientation code (R0..R270, M0..M270) to (rotation, mirror)."""
    code = (code or "R0").upper()
    mirrored = code.startswith("M")
    try:
        angle = int(code[1:]) if len(code) > 1 else 0
    except ValueError:
        raise AscParseError(f"Bad orientation '{code}'") from None
    if angle not in (0, 90, 180, 270):
        raise AscParseError(f"Bad orientation '{code}'")
    return angle, mirrored


def _symbol_type(name):
    base = name.rsplit("\\", 1)[-1]
    return _SYMBOL_TO_TYPE.get(base) or _SYMBOL_TO_TYPE.get(base.lower())


def parse_asc(text):
    """Parse LTspice .asc schematic text into raw records.

    Args:
        text: The full text content of a .asc file.

    Returns:
        dict with keys:
            symbols: list of symbol dicts (name, x, y, orientation, attributes)
            wires: list of (x1, y1, x2, y2) wire segments
            flags: list of (x, y, label) flag entries
            texts: list of (x, y, directive_text) for '!' TEXT records
            warnings: list of warning messages

    Raises:
        AscParseError: If the file is empty or has no recognizable content.
    """
    if not text or not text.strip():
        raise AscParseError("Empty .asc file.")

    symbols = []
    wires = []
    flags = []
    texts = []
    warnings = []
    current_symbol = None

    for number, line in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
        stripped = line.strip()
        if not stripped:
            continue
        keyword = stripped.split(None, 1)[0].upper()

        if keyword == "WIRE":
            parts = stripped.split()
            try:
                wires.append(tuple(int(p) for p in parts[1:5]))
            except ValueError:
                warnings.append(f"Line {number}: malformed WIRE record skipped")
                continue
            if len(wires[-1]) != 4:
                wires.pop()
                warnings.append(f"Line {number}: malformed WIRE record skipped")

        elif keyword == "FLAG":
            parts = stripped.split()
            if len(parts) < 4:
                warnings.append(f"Line {number}: malformed FLAG record skipped")
                continue
            try:
                flags.append((int(parts[1]), int(parts[2]), parts[3]))
            except ValueError:
                warnings.append(f"Line {number}: malformed FLAG record skipped")

        elif keyword == "SYMBOL":
            parts = stripped.split()
            current_symbol = None
            if len(parts) < 4:
                warnings.append(f"Line {number}: malformed SYMBOL record skipped")
                continue
            try:
                current_symbol = {
                    "name": parts[1],
                    "x": int(parts[2]),
                    "y": int(parts[3]),
                    "orientation": parts[4] if len(parts) > 4 else "R0",
                    "attributes": {},
                }
            except ValueError:
                warnings.append(f"Line {number}: malformed SYMBOL record skipped")
                continue
            symbols.append(current_symbol)

        elif keyword == "SYMATTR":
            if current_symbol is None:
                continue
            # Split only into 3 parts: SYMATTR key value
            parts = stripped.split(None, 2)
            if len(parts) >= 3:
                current_symbol["attributes"][parts[1]] = parts[2]

        elif keyword == "TEXT":
            # TEXT x y alignment size content; SPICE directives start with '!'
            parts = stripped.split(None, 5)
            if len(parts) < 6 or not parts[5].startswith("!"):
                continue
            try:
                x, y = int(parts[1]), int(parts[2])
            except ValueError:
                x = y = None
            for directive in parts[5][1:].split("\\n"):
                directive = directive.strip()
                if directive:
                    texts.append((x, y, directive))

    if not symbols and not wires and not flags:
        raise AscParseError("No components, wires, or flags found in .asc file.")

    return {
        "symbols": symbols,
        "wires": wires,
        "flags": flags,
        "texts": texts,
        "warnings": warnings,
    }


def _stitch(start, end):
    """One or two axis-aligned wires from start to end (none if equal)."""
    if start == end:
        return []
    if start[0] == end[0] or start[1] == end[1]:
        return [WireData(start[0], start[1], end[0], end[1])]
    corner = (start[0], end[1])
    return [
        WireData(start[0], start[1], corner[0], corner[1]),
        WireData(corner[0], corner[1], end[0], end[1]),
    ]


def _junction_points(wires):
    """Points where three or more wire ends meet, or an end lands mid-wire."""
    counts = {}
    for wire in wires:
        for point in wire.endpoints:
            counts[point] = counts.get(point, 0) + 1

    points = [p for p, n in counts.items() if n >= 3]
    for point in counts:
        if point in points:
            continue
        for wire in wires:
            if point in wire.endpoints:
                continue
            if wire.contains_point(point):
                points.append(point)
                break
    return points


def import_asc(text):
    """Parse an LTspice .asc schematic and build a SchematicModel.

    Args:
        text: The full text content of a .asc file.

    Returns:
        tuple of (SchematicModel, warnings_list)

    Raises:
        AscParseError: If the .asc file cannot be parsed.
    """
    parsed = parse_asc(text)
    warnings = list(parsed["warnings"])
    model = SchematicModel()

    for x1, y1, x2, y2 in parsed["wires"]:
        wire = WireData(x1, y1, x2, y2)
        if not wire.is_axis_aligned():
            warnings.append(f"Diagonal wire ({x1}, {y1})-({x2}, {y2}) skipped")
            continue
        model.add_wire(wire)

    for sym in parsed["symbols"]:
        comp_type = _symbol_type(sym["name"])
        if comp_type is None:
            warnings.append(f"Unsupported LTspice component '{sym['name']}' skipped")
            logger.warning("Unsupported LTspice symbol '%s'", sym["name"])
            continue
        _add_symbol(model, comp_type, sym, warnings)

    for x, y, label in parsed["flags"]:
        if label == "0":
            model.place_component(ComponentType.GROUND, _ground_position((x, y)))
        else:
            model.add_net_label(NetLabelData(name=label, x=x, y=y))

    for x, y, directive in parsed["texts"]:
        _add_directive(model, x, y, directive, warnings)

    for point in _junction_points(model.wires):
        model.add_junction(JunctionData(x=point[0], y=point[1]))

    logger.debug(
        "Imported .asc: %d components, %d wires, %d junctions, %d warnings",
        len(model.components),
        len(model.wires),
        len(model.junctions),
        len(warnings),
    )
    return model, warnings


def _ground_position(pin_point):
    """Ground symbol origin whose single pin lands on pin_point."""
    ground = ComponentData("_probe", ComponentType.GROUND)
    return sub_points(pin_point, ground.definition.pins[0].offset)


def _add_symbol(model, comp_type, sym, warnings):
    try:
        rotation, mirror = _parse_orientation(sym["orientation"])
    except AscParseError as e:
        warnings.append(f"{sym['name']} at ({sym['x']}, {sym['y']}): {e}; skipped")
        return

    attrs = sym["attributes"]
    value = attrs.get("Value") or attrs.get("SpiceModel")
    if attrs.get("Value2"):
        value = f"{value} {attrs['Value2']}" if value else attrs["Value2"]

    inst_name = attrs.get("InstName")
    origin = (sym["x"], sym["y"])
    lt_pins = {
        name: tuple(o + d for o, d in zip(origin, transform_offset(offset, rotation, mirror)))
        for name, offset in _LT_PINS[comp_type].items()
    }

    probe = ComponentData("_probe", comp_type, rotation=rotation, mirror=mirror)
    first_pin = probe.definition.pins[0]
    position = sub_points(lt_pins[first_pin.name], transform_offset(first_pin.offset, rotation, mirror))

    if inst_name and inst_name not in model.components:
        attributes = {"InstName": inst_name}
        if value is not None:
            attributes["Value"] = value
        component = ComponentData(
            component_id=inst_name,
            component_type=comp_type,
            position=position,
            rotation=rotation,
            mirror=mirror,
            attributes=attributes,
        )
        model.add_component(component)
    else:
        if inst_name:
            warnings.append(f"Duplicate instance name '{inst_name}' renamed")
        component = model.place_component(comp_type, position, rotation, mirror, value)

    for pin_name, position in component.get_pin_positions():
        target = lt_pins[pin_name]
        for wire in _stitch(position, target):
            model.add_wire(wire)


def _add_directive(model, x, y, text, warnings):
    lower = text.lower()
    if lower.startswith(".param"):
        pairs = parse_param_directive(text)
        if not pairs:
            warnings.append(f"Malformed .param directive: {text}")
        for name, value in pairs:
            model.set_parameter(name, value)
    elif lower.startswith(".model"):
        spice_model = parse_model_directive(text)
        if spice_model is None:
            warnings.append(f"Malformed .model directive: {text}")
        else:
            model.add_model(spice_model)
    elif text.startswith("."):
        model.add_directive(DirectiveData(text=text, x=x, y=y))
