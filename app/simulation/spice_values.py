"""
simulation/spice_values.py

SI-suffixed SPICE values, .param/.model directive parsing and textual
``{name}`` parameter expansion. No Qt dependencies.

SPICE scale factors are case-insensitive, so ``1M`` is one milli; the
three-letter ``meg`` is the only multi-letter factor and is checked first.
Trailing unit letters are ignored (``10uF`` is 10e-6, ``5V`` is 5).
"""

import logging
import re

from models.directive import SpiceModel

logger = logging.getLogger(__name__)

_SI_MULTIPLIERS = {
    "t": 1e12,
    "g": 1e9,
    "k": 1e3,
    "m": 1e-3,
    "u": 1e-6,
    "n": 1e-9,
    "p": 1e-12,
    "f": 1e-15,
}
_MEG = 1e6

_VALUE_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z]*)")

# .param name=value [name2=value2 ...]
_PARAM_ASSIGN_RE = re.compile(r"(\w+)\s*=\s*(\{[^}]*\}|\S+)")
_PARAM_LINE_RE = re.compile(r"^\s*\.param\s+(.*)$", re.IGNORECASE)

# .model name type(params) | .model name type params | .model name type
_MODEL_LINE_RE = re.compile(r"^\s*\.model\s+(\S+)\s+([A-Za-z]+)\s*(?:\((.*)\)|(.*))\s*$", re.IGNORECASE)

_BRACE_REF_RE = re.compile(r"\{\s*(\w+)\s*\}")


def scale_factor(suffix: str) -> float:
    """Multiplier for the letters following a number ('' -> 1)."""
    lowered = suffix.lower()
    if lowered.startswith("meg"):
        return _MEG
    if lowered and lowered[0] in _SI_MULTIPLIERS:
        return _SI_MULTIPLIERS[lowered[0]]
    return 1.0


def parse_spice_value(s: str) -> float:
    """
    Parse a SPICE value string with optional SI suffix.

    Examples:
        "1k"   -> 1000.0
        "4.7u" -> 4.7e-6
        "10"   -> 10.0
        "2.2MEG" -> 2.2e6
        "1e-3" -> 0.001

    Raises:
        ValueError: If the string does not start with a number.
    """
    if s is None:
        raise ValueError("Empty value string")
    match = _VALUE_RE.match(str(s))
    if not match:
        raise ValueError(f"Cannot parse SPICE value: {s!r}")
    return float(match.group(1)) * scale_factor(match.group(2))


def format_spice_value(value: float) -> str:
    """
    Format a number as a compact SPICE value string using SI suffixes.
    """
    if value == 0:
        return "0"

    abs_val = abs(value)
    suffixes = [("t", 1e12), ("g", 1e9), ("meg", 1e6), ("k", 1e3), ("", 1.0),
                ("m", 1e-3), ("u", 1e-6), ("n", 1e-9), ("p", 1e-12), ("f", 1e-15)]
    for suffix, mult in suffixes:
        if abs_val >= mult * (1 - 1e-12):
            scaled = value / mult
            if abs(scaled - round(scaled)) < 1e-9:
                return f"{int(round(scaled))}{suffix}"
            return f"{scaled:.4g}{suffix}"

    return f"{value:.4e}"


def parse_param_directive(line: str) -> list[tuple[str, str]]:
    """
    Extract name/value pairs from a ``.param`` line.

    ``.param R1=1k gain = {R2}`` -> [("R1", "1k"), ("gain", "{R2}")]
    Returns an empty list when the line is not a .param directive.
    """
    match = _PARAM_LINE_RE.match(line)
    if not match:
        return []
    return [(name, value.strip()) for name, value in _PARAM_ASSIGN_RE.findall(match.group(1))]


def parse_model_directive(line: str):
    """Parse ``.model NAME TYPE(params)`` into a SpiceModel, or None if malformed."""
    match = _MODEL_LINE_RE.match(line)
    if not match:
        return None
    params = match.group(3) if match.group(3) is not None else (match.group(4) or "")
    return SpiceModel(name=match.group(1), type=match.group(2).upper(), params=params.strip())


def parse_model_params(params: str) -> dict[str, str]:
    """Split a model parameter string into a lowercase-keyed dict.

    ``"IS=2.52n N = 1.752, RS=0.568"`` -> {"is": "2.52n", "n": "1.752", "rs": "0.568"}
    """
    return {name.lower(): value.rstrip(",") for name, value in _PARAM_ASSIGN_RE.findall(params or "")}


def expand_parameters(text: str, parameters: dict) -> str:
    """
    Replace ``{name}`` references with the parameter's value text.

    Lookup is case-insensitive. Unknown references are left untouched so
    the caller (or the simulator) can report them.
    """
    if not text or "{" not in text:
        return text
    lookup = {str(k).lower(): str(v) for k, v in parameters.items()}

    def _replace(m: re.Match) -> str:
        name = m.group(1).lower()
        if name in lookup:
            return lookup[name]
        logger.debug("Unresolved parameter reference %s", m.group(0))
        return m.group(0)

    return _BRACE_REF_RE.sub(_replace, text)


def is_parametric(value: str) -> bool:
    """Check if a value string references a parameter."""
    return bool(value) and bool(_BRACE_REF_RE.search(value))
