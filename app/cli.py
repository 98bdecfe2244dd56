"""
Command-line interface for the schematic topology engine.

Generate netlists, import netlists and LTspice schematics as laid-out
schematics, inspect nets and derive currents without a GUI.

Usage::

    python -m cli netlist circuit.json
    python -m cli netlist circuit.json --title "Divider" --output divider.cir
    python -m cli validate circuit.json
    python -m cli layout divider.cir --output divider.json
    python -m cli import-asc amp.asc --output amp.json
    python -m cli nets circuit.json
    python -m cli currents circuit.json traces.json --output all_traces.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from layout import LayoutEngineError, RoutingError, layout_netlist
from models.schematic import SchematicFormatError, SchematicModel
from models.trace import TraceData
from settings.constants import DEFAULT_TITLE, LAYOUT_ENGINES
from settings.layout_options import LayoutOptions, LayoutOptionsError, load_layout_options
from simulation.asc_parser import AscParseError, import_asc
from simulation.circuit_validator import validate_schematic
from simulation.connectivity import analyze_connectivity
from simulation.current_calculator import calculate_missing_currents
from simulation.netlist_generator import generate_netlist, netlist_to_text
from simulation.netlist_parser import NetlistParseError, parse_netlist

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def try_load_schematic(filepath: str) -> tuple[SchematicModel | None, str]:
    """Load and validate a schematic JSON file without exiting.

    Args:
        filepath: Path to the schematic JSON file.

    Returns:
        (model, "") on success, or (None, error_message) on failure.
    """
    path = Path(filepath)
    if not path.exists():
        return None, f"file not found: {filepath}"

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        return None, f"invalid JSON in {filepath}: {e}"

    try:
        return SchematicModel.from_dict(data), ""
    except SchematicFormatError as e:
        return None, f"invalid schematic file: {e}"


def load_schematic(filepath: str) -> SchematicModel:
    """Load a schematic JSON file.

    Raises:
        SystemExit: On file read or validation errors.
    """
    model, error = try_load_schematic(filepath)
    if model is None:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)
    return model


def _read_text(filepath):
    path = Path(filepath)
    if not path.exists():
        print(f"Error: file not found: {filepath}", file=sys.stderr)
        return None
    try:
        return path.read_text()
    except OSError as e:
        print(f"Error reading {filepath}: {e}", file=sys.stderr)
        return None


def _write_output(text, output, what):
    if output:
        Path(output).write_text(text)
        print(f"{what} written to {output}", file=sys.stderr)
    else:
        print(text)


def cmd_netlist(args: argparse.Namespace) -> int:
    """Generate a SPICE netlist from a schematic."""
    model = load_schematic(args.schematic)
    netlist = generate_netlist(model, args.title)

    for warning in netlist.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    for error in netlist.errors:
        print(f"Error: {error}", file=sys.stderr)

    _write_output(netlist_to_text(netlist).rstrip("\n"), args.output, "Netlist")
    return 1 if netlist.errors else 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a schematic without generating anything."""
    model = load_schematic(args.schematic)
    is_valid, errors, warnings = validate_schematic(model)

    if is_valid:
        print(f"Schematic is valid: {args.schematic}")
        for warning in warnings:
            print(f"  Warning: {warning}")
        return 0

    print(f"Schematic has errors: {args.schematic}", file=sys.stderr)
    for err in errors:
        print(f"  - {err}", file=sys.stderr)
    return 1


def _layout_options(args) -> LayoutOptions:
    options = load_layout_options(args.config) if args.config else LayoutOptions()
    if args.node_spacing is not None:
        options.node_spacing = args.node_spacing
    if args.layer_spacing is not None:
        options.layer_spacing = args.layer_spacing
    if args.engine is not None:
        options.engine = args.engine
    return options.validate()


def cmd_layout(args: argparse.Namespace) -> int:
    """Import a SPICE netlist and lay it out as a schematic JSON file."""
    text = _read_text(args.netlist)
    if text is None:
        return 1

    try:
        options = _layout_options(args)
        parsed = parse_netlist(text)
        model = layout_netlist(parsed, options)
    except (NetlistParseError, LayoutOptionsError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (RoutingError, LayoutEngineError) as e:
        print(f"Error: layout failed: {e}", file=sys.stderr)
        return 1

    for warning in parsed.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    for error in parsed.errors:
        print(f"Warning: skipped: {error}", file=sys.stderr)

    out_path = Path(args.output) if args.output else Path(args.netlist).with_suffix(".json")
    with open(out_path, "w") as f:
        json.dump(model.to_dict(), f, indent=2)

    print(f"Imported {Path(args.netlist).name} -> {out_path}", file=sys.stderr)
    return 0


def cmd_import_asc(args: argparse.Namespace) -> int:
    """Import an LTspice .asc schematic as schematic JSON."""
    text = _read_text(args.asc)
    if text is None:
        return 1

    try:
        model, warnings = import_asc(text)
    except AscParseError as e:
        print(f"Error parsing .asc file: {e}", file=sys.stderr)
        return 1

    for warning in warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    out_path = Path(args.output) if args.output else Path(args.asc).with_suffix(".json")
    with open(out_path, "w") as f:
        json.dump(model.to_dict(), f, indent=2)

    print(f"Imported {Path(args.asc).name} -> {out_path}", file=sys.stderr)
    return 0


def cmd_nets(args: argparse.Namespace) -> int:
    """Print the nets of a schematic and the pins on each."""
    model = load_schematic(args.schematic)
    result = analyze_connectivity(model)

    pins_by_net = {}
    for pc in result.pin_connections:
        component = model.components[pc.component_id]
        suffix = " (floating)" if pc.floating else ""
        pins_by_net.setdefault(pc.net_id, []).append(f"{component.inst_name}.{pc.pin_name}{suffix}")

    for net in result.nets:
        pins = ", ".join(pins_by_net.get(net.net_id, [])) or "-"
        kind = " [ground]" if net.is_ground else ""
        print(f"{net.name}{kind}: {pins}")

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    return 1 if result.errors else 0


def _load_traces(filepath):
    with open(filepath, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("traces", [])
    if not isinstance(data, list):
        raise ValueError("trace file must hold a list of traces")
    return [TraceData.from_dict(item) for item in data]


def cmd_currents(args: argparse.Namespace) -> int:
    """Append derived resistor/capacitor/diode currents to a trace list."""
    model = load_schematic(args.schematic)
    try:
        traces = _load_traces(args.traces)
    except OSError as e:
        print(f"Error reading {args.traces}: {e}", file=sys.stderr)
        return 1
    except (ValueError, KeyError, TypeError) as e:
        print(f"Error: invalid trace file {args.traces}: {e}", file=sys.stderr)
        return 1

    derived = calculate_missing_currents(model, traces)
    logger.info("Derived %d current traces", len(derived))
    output = json.dumps([t.to_dict() for t in traces + derived], indent=2)
    _write_output(output, args.output, "Traces")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="spice-topology",
        description="Schematic topology engine: netlist generation, netlist/LTspice import and derived currents.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # netlist
    net_parser = subparsers.add_parser("netlist", help="Generate a SPICE netlist from a schematic")
    net_parser.add_argument("schematic", help="Path to schematic JSON file")
    net_parser.add_argument("--title", default=DEFAULT_TITLE, help="Netlist title line")
    net_parser.add_argument("--output", "-o", help="Write netlist to file instead of stdout")

    # validate
    val_parser = subparsers.add_parser("validate", help="Check a schematic for errors")
    val_parser.add_argument("schematic", help="Path to schematic JSON file")

    # layout
    layout_parser = subparsers.add_parser("layout", help="Import a SPICE netlist as a laid-out schematic")
    layout_parser.add_argument("netlist", help="Path to SPICE netlist file (.cir, .spice, .sp)")
    layout_parser.add_argument("--output", "-o", help="Output JSON file path (default: same name with .json extension)")
    layout_parser.add_argument("--config", help="Layout options JSON file")
    layout_parser.add_argument("--node-spacing", type=int, help="Horizontal gap between components")
    layout_parser.add_argument("--layer-spacing", type=int, help="Vertical gap between layers")
    layout_parser.add_argument("--engine", choices=LAYOUT_ENGINES, help="Layering engine (dot needs Graphviz installed)")

    # import-asc
    asc_parser = subparsers.add_parser("import-asc", help="Import an LTspice .asc schematic")
    asc_parser.add_argument("asc", help="Path to .asc file")
    asc_parser.add_argument("--output", "-o", help="Output JSON file path (default: same name with .json extension)")

    # nets
    nets_parser = subparsers.add_parser("nets", help="List nets and pin connections")
    nets_parser.add_argument("schematic", help="Path to schematic JSON file")

    # currents
    cur_parser = subparsers.add_parser("currents", help="Derive missing component currents from node voltages")
    cur_parser.add_argument("schematic", help="Path to schematic JSON file")
    cur_parser.add_argument("traces", help="Trace list JSON ([{name, type, values}, ...])")
    cur_parser.add_argument("--output", "-o", help="Write traces to file instead of stdout")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "netlist": cmd_netlist,
        "validate": cmd_validate,
        "layout": cmd_layout,
        "import-asc": cmd_import_asc,
        "nets": cmd_nets,
        "currents": cmd_currents,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
