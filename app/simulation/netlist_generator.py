"""
simulation/netlist_generator.py

Handles SPICE netlist generation from schematic geometry.

Connectivity is analysed first; ground symbols only define node "0" and
are not emitted. Problems never abort generation: they are collected in
``errors``/``warnings`` and written into the netlist as comments so the
user still sees partial results.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from models.component import SEMICONDUCTOR_TYPES, ComponentType
from settings.constants import DEFAULT_TITLE, DEFAULT_TRAN_DIRECTIVE

from .connectivity import analyze_connectivity
from .model_library import find_model
from .spice_values import expand_parameters, format_spice_value, parse_spice_value

logger = logging.getLogger(__name__)

UNRESOLVED_NODE = "?"

_TRAN_RE = re.compile(r"^\.tran\s+(\S+)\s+(\S+)(?:\s+(\S+))?(?:\s+(\S+))?(.*)$", re.IGNORECASE)


@dataclass
class SpiceComponent:
    """One element line: <name> <node...> <value> [extra]."""

    prefix: str
    name: str
    nodes: list[str]
    value: str
    extra: Optional[str] = None

    def to_line(self) -> str:
        parts = [self.name, *self.nodes]
        if self.value:
            parts.append(self.value)
        if self.extra:
            parts.append(self.extra)
        return " ".join(parts)


@dataclass
class GeneratedNetlist:
    title: str
    components: list[SpiceComponent] = field(default_factory=list)
    directives: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_text(self) -> str:
        return netlist_to_text(self)


def fix_tran_directive(text: str) -> str:
    """
    Make a .tran line acceptable to ngspice.

    LTspice allows Tstep=0 (auto), ngspice does not:
        ".tran 0 2 0 1m" -> ".tran 1m 2 0 1m"   (use dTmax when positive)
        ".tran 0 10m"    -> ".tran 10u 10m"     (otherwise Tstop/1000)
    """
    match = _TRAN_RE.match(text.strip())
    if not match:
        return text
    tstep, tstop, tstart, dtmax, rest = match.groups()
    try:
        step_value = parse_spice_value(tstep)
    except ValueError:
        return text
    if step_value > 0:
        return text

    new_step = None
    if dtmax is not None:
        try:
            if parse_spice_value(dtmax) > 0:
                new_step = dtmax
        except ValueError:
            new_step = None
    if new_step is None:
        try:
            new_step = format_spice_value(parse_spice_value(tstop) / 1000)
        except ValueError:
            return text

    parts = [".tran", new_step, tstop]
    if tstart is not None:
        parts.append(tstart)
    if dtmax is not None:
        parts.append(dtmax)
    result = " ".join(parts)
    if rest and rest.strip():
        result += rest
    return result


class NetlistGenerator:
    """Generates SPICE netlists from a SchematicModel."""

    def __init__(self, schematic, title=DEFAULT_TITLE):
        self.schematic = schematic
        self.title = title

    def generate(self) -> GeneratedNetlist:
        """Build the structured netlist (components, directives, diagnostics)."""
        schematic = self.schematic
        result = GeneratedNetlist(title=self.title)
        parameters = dict(schematic.parameters)

        connectivity = analyze_connectivity(schematic)
        result.errors.extend(connectivity.errors)
        result.warnings.extend(connectivity.warnings)

        for comp in schematic.components.values():
            if comp.component_type == ComponentType.GROUND:
                continue
            spice_comp = self._component_to_spice(comp, connectivity, parameters, result.errors)
            if spice_comp is None:
                result.errors.append(f"Failed to generate SPICE for {comp.inst_name}")
                continue
            result.components.append(spice_comp)

        for name, value in parameters.items():
            result.directives.append(f".param {name}={value}")

        result.directives.extend(self._model_directives(result.warnings))
        result.directives.extend(self._simulation_directives())
        result.directives.append(".end")

        logger.debug(
            "Generated netlist '%s': %d components, %d directives, %d errors, %d warnings",
            self.title,
            len(result.components),
            len(result.directives),
            len(result.errors),
            len(result.warnings),
        )
        return result

    def _component_to_spice(self, comp, connectivity, parameters, errors):
        definition = comp.definition
        prefix = definition.prefix
        if not prefix:
            return None

        name = comp.inst_name or f"{prefix}?"
        if not name.upper().startswith(prefix):
            name = prefix + name

        nodes = []
        for pin_name in definition.pin_order:
            net = connectivity.net_for_pin(comp.component_id, pin_name)
            if net is None:
                errors.append(f"{name} pin {pin_name} has no net")
                nodes.append(UNRESOLVED_NODE)
            else:
                nodes.append(net.name)

        # Bulk terminal tied to source
        if comp.component_type in (ComponentType.MOSFET_NMOS, ComponentType.MOSFET_PMOS):
            nodes.append(nodes[-1])

        raw_value = comp.value or definition.default_value
        value = expand_parameters(raw_value, parameters)
        return SpiceComponent(prefix=prefix, name=name, nodes=nodes, value=value)

    def _model_directives(self, warnings):
        lines = []
        defined = set()
        for model in self.schematic.models:
            lines.append(model.to_spice())
            defined.add(model.name.upper())

        referenced = []
        for comp in self.schematic.components.values():
            if comp.component_type in SEMICONDUCTOR_TYPES and comp.value and comp.value not in referenced:
                referenced.append(comp.value)

        for model_name in referenced:
            if model_name.upper() in defined:
                continue
            library_model = find_model(model_name)
            if library_model is None:
                warnings.append(f'Model "{model_name}" not found in library')
                continue
            spice_model = library_model.to_spice_model()
            # Keep the name the component refers to (alias or canonical)
            spice_model.name = model_name
            lines.append(spice_model.to_spice())
            defined.add(model_name.upper())
        return lines

    def _simulation_directives(self):
        lines = []
        has_analysis = False
        for directive in self.schematic.directives:
            kind = directive.type
            if kind in ("param", "model"):
                continue
            text = directive.text.strip()
            if text.lower() == ".end":
                continue
            if kind == "tran":
                text = fix_tran_directive(text)
            if directive.is_analysis:
                has_analysis = True
            lines.append(text)
        if not has_analysis:
            lines.append(DEFAULT_TRAN_DIRECTIVE)
        return lines


def generate_netlist(schematic, title=DEFAULT_TITLE) -> GeneratedNetlist:
    return NetlistGenerator(schematic, title).generate()


def netlist_to_text(netlist: GeneratedNetlist) -> str:
    """Serialize a GeneratedNetlist; the first line is always the title comment."""
    lines = [f"* {netlist.title}", ""]

    for warning in netlist.warnings:
        lines.append(f"* Warning: {warning}")
    if netlist.warnings:
        lines.append("")

    for error in netlist.errors:
        lines.append(f"* ERROR: {error}")
    if netlist.errors:
        lines.append("")

    for comp in netlist.components:
        lines.append(comp.to_line())
    if netlist.components:
        lines.append("")

    lines.extend(netlist.directives)
    return "\n".join(lines) + "\n"


def schematic_to_netlist(schematic, title=DEFAULT_TITLE) -> str:
    """Generate netlist text directly from a schematic."""
    return netlist_to_text(generate_netlist(schematic, title))
