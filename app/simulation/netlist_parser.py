"""
simulation/netlist_parser.py

Parses SPICE netlist text (.cir, .spice) into a ParsedNetlist: title,
components in file order, .model cards, .param values and the remaining
dot-commands. Malformed or unsupported lines are skipped and reported in
``errors``/``warnings``; only empty input is fatal.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from models.component import COMPONENT_DEFS, PREFIX_TO_TYPE, ComponentType
from models.directive import SpiceModel

from .model_library import find_model as find_library_model
from .spice_values import expand_parameters, parse_model_directive, parse_param_directive

logger = logging.getLogger(__name__)

# Number of node tokens after the instance name, per prefix
NODE_COUNT = {
    "R": 2,
    "C": 2,
    "L": 2,
    "V": 2,
    "I": 2,
    "D": 2,
    "Q": 3,
    "M": 4,
}

_MODEL_PREFIXES = ("D", "Q", "M")


class NetlistParseError(ValueError):
    """Raised when a netlist cannot be parsed."""


@dataclass
class ParsedComponent:
    name: str
    type: ComponentType
    prefix: str
    nodes: list[str]
    value: str
    model: Optional[str] = None
    extra: Optional[str] = None

    def __repr__(self):
        return f"ParsedComponent({self.name} {self.type.value} {self.nodes} {self.value!r})"


@dataclass
class ParsedNetlist:
    title: str = ""
    components: list[ParsedComponent] = field(default_factory=list)
    models: dict[str, SpiceModel] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)
    directives: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def find_model(self, name):
        if not name:
            return None
        lowered = name.lower()
        for model_name, model in self.models.items():
            if model_name.lower() == lowered:
                return model
        return None

    def net_names(self) -> list[str]:
        """Distinct node names in first-use order."""
        seen = []
        for comp in self.components:
            for node in comp.nodes:
                if node not in seen:
                    seen.append(node)
        return seen


def _tokenize_spice_line(line):
    """Tokenize a SPICE line, keeping parenthesized expressions as single tokens.

    E.g. 'Vin 1 0 SIN(0 5 1k)' -> ['Vin', '1', '0', 'SIN(0 5 1k)']
    """
    tokens = []
    current = ""
    paren_depth = 0

    for ch in line:
        if ch == "(":
            paren_depth += 1
            current += ch
        elif ch == ")":
            paren_depth -= 1
            current += ch
        elif ch in (" ", "\t") and paren_depth <= 0:
            if current:
                tokens.append(current)
                current = ""
        else:
            current += ch

    if current:
        tokens.append(current)

    return tokens


def _logical_lines(text):
    """Yield (line_number, text) with comments dropped and '+' continuations joined.

    Full-line '*' comments may sit between a line and its continuation.
    """
    pending = None
    pending_number = 0
    for number, raw in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
        stripped = raw.strip()
        if not stripped:
            continue
        if stripped.startswith("*"):
            continue
        if ";" in stripped:
            stripped = stripped[: stripped.index(";")].strip()
            if not stripped:
                continue
        if stripped.startswith("+"):
            if pending is None:
                logger.warning("Continuation line %d has nothing to continue", number)
                continue
            pending = f"{pending} {stripped[1:].strip()}"
            continue
        if pending is not None:
            yield pending_number, pending
        pending = stripped
        pending_number = number
    if pending is not None:
        yield pending_number, pending


def parse_netlist(text) -> ParsedNetlist:
    """Parse SPICE netlist text into a ParsedNetlist.

    The first line is the title unless it is a dot-command; a leading
    ``* title`` comment is also accepted.

    Raises:
        NetlistParseError: If the text is empty.
    """
    if not text or not text.strip():
        raise NetlistParseError("Empty netlist file.")

    result = ParsedNetlist()
    component_lines = []
    in_control_block = False
    in_subckt = False

    # The title is the first non-blank line, whatever follows it
    first_line = next(raw.strip() for raw in text.splitlines() if raw.strip())
    if first_line.startswith("*"):
        result.title = first_line[1:].strip()
    title_pending = not first_line.startswith(("*", ".", ";"))

    # First pass: title, models, parameters and directives
    for number, line in _logical_lines(text):
        if title_pending:
            title_pending = False
            result.title = line
            continue

        lower = line.lower()

        if lower.startswith(".control"):
            in_control_block = True
            continue
        if lower.startswith(".endc"):
            in_control_block = False
            continue
        if in_control_block:
            continue

        if lower.startswith(".subckt"):
            in_subckt = True
            tokens = line.split()
            name = tokens[1] if len(tokens) > 1 else "?"
            result.warnings.append(f"Line {number}: subcircuit '{name}' skipped")
            continue
        if lower.startswith(".ends"):
            in_subckt = False
            continue
        if in_subckt:
            continue

        if lower == ".end":
            break

        if lower.startswith(".param"):
            pairs = parse_param_directive(line)
            if not pairs:
                result.errors.append(f"Line {number}: malformed .param directive: {line}")
            for name, value in pairs:
                result.parameters[name] = expand_parameters(value, result.parameters)
            continue
        if lower.startswith(".model"):
            model = parse_model_directive(line)
            if model is None:
                result.errors.append(f"Line {number}: malformed .model directive: {line}")
            else:
                result.models[model.name] = model
            continue
        if lower.startswith((".include", ".inc ", ".lib")):
            result.warnings.append(f"Line {number}: '{line.split()[0]}' not followed")
            continue
        if lower.startswith("."):
            result.directives.append(line)
            continue

        component_lines.append((number, line))

    # Second pass: components, with every model and parameter known
    for _number, line in component_lines:
        comp = _parse_component_line(line, result)
        if comp is None:
            continue
        result.components.append(comp)

    if not result.components:
        result.warnings.append("No components found in netlist.")

    logger.debug(
        "Parsed netlist '%s': %d components, %d models, %d parameters, %d errors",
        result.title,
        len(result.components),
        len(result.models),
        len(result.parameters),
        len(result.errors),
    )
    return result


def _parse_component_line(line, result):
    """Parse a single SPICE component line; None (plus an error) if unusable."""
    tokens = _tokenize_spice_line(line)
    comp_name = tokens[0]
    prefix = comp_name[0].upper()

    comp_type = PREFIX_TO_TYPE.get(prefix)
    if comp_type is None:
        result.errors.append(f"Unsupported component '{comp_name}' (prefix {prefix}); skipped")
        logger.warning("Unknown SPICE prefix '%s' - skipping %s", prefix, comp_name)
        return None

    num_nodes = NODE_COUNT[prefix]
    if len(tokens) < num_nodes + 1:
        result.errors.append(f"Not enough nodes for {comp_name}: {line}")
        logger.warning("Not enough tokens for %s: %s", comp_name, line)
        return None

    node_names = tokens[1 : 1 + num_nodes]
    # Parameters only ever stand in for values, never for node names
    rest = [expand_parameters(token, result.parameters) for token in tokens[1 + num_nodes :]]

    model_name = None
    extra = None
    if prefix in _MODEL_PREFIXES:
        if not rest:
            value = _default_value(comp_type)
            model_name = value
        elif prefix == "Q" and len(rest) >= 2 and "=" not in rest[-1]:
            # Q c b e [substrate] model
            model_name = rest[-1]
            value = model_name
        else:
            model_name = rest[0]
            value = model_name
            extra = " ".join(rest[1:]) or None
        model = result.find_model(model_name) or find_library_model(model_name)
        comp_type = _resolve_device_type(comp_type, model)
    else:
        value = " ".join(rest)
        if not value:
            value = _default_value(comp_type)
            result.warnings.append(f"{comp_name} has no value; using {value}")

    return ParsedComponent(
        name=comp_name,
        type=comp_type,
        prefix=prefix,
        nodes=node_names,
        value=value,
        model=model_name,
        extra=extra,
    )


def _default_value(comp_type):
    return COMPONENT_DEFS[comp_type].default_value


def _resolve_device_type(comp_type, model):
    """Pick PNP/PMOS variants when the referenced .model says so."""
    if model is None:
        return comp_type
    model_type = model.type.upper()
    if comp_type == ComponentType.BJT_NPN and "PNP" in model_type:
        return ComponentType.BJT_PNP
    if comp_type == ComponentType.MOSFET_NMOS and "PMOS" in model_type:
        return ComponentType.MOSFET_PMOS
    return comp_type
