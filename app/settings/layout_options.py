"""
layout_options.py - Tunables for netlist-to-schematic layout.

Options can be read from a small JSON file:

    {"node_spacing": 120, "layer_spacing": 240, "engine": "dot"}

Unknown keys and wrongly typed values are rejected so a typo in a config
file does not silently fall back to a default.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields

from settings.constants import (
    DEFAULT_LAYER_SPACING,
    DEFAULT_LAYOUT_ENGINE,
    DEFAULT_NODE_SPACING,
    GRID_SIZE,
    LAYOUT_ENGINES,
    ROUTE_SEARCH_LIMIT,
)

logger = logging.getLogger(__name__)


class LayoutOptionsError(ValueError):
    """Raised when a layout options file is unreadable or invalid."""


@dataclass
class LayoutOptions:
    node_spacing: int = DEFAULT_NODE_SPACING
    layer_spacing: int = DEFAULT_LAYER_SPACING
    channel_margin: int = GRID_SIZE     # gap between the topmost body and the first channel
    ground_layer: bool = True           # put ground symbols in their own bottom layer
    engine: str = DEFAULT_LAYOUT_ENGINE  # "dot" needs the Graphviz executables on PATH
    route_search_limit: int = ROUTE_SEARCH_LIMIT

    def validate(self):
        for name in ("node_spacing", "layer_spacing", "channel_margin"):
            if getattr(self, name) <= 0:
                raise LayoutOptionsError(f"{name} must be positive, got {getattr(self, name)}")
        if self.engine not in LAYOUT_ENGINES:
            raise LayoutOptionsError(f"engine must be one of {', '.join(LAYOUT_ENGINES)}, got {self.engine!r}")
        if self.route_search_limit < 1:
            raise LayoutOptionsError("route_search_limit must be at least 1")
        return self

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutOptions":
        if not isinstance(data, dict):
            raise LayoutOptionsError("Layout options must be a JSON object")
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise LayoutOptionsError(f"Unknown layout option(s): {', '.join(unknown)}")

        values = {}
        for key, value in data.items():
            expected = known[key].type
            if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
                raise LayoutOptionsError(f"{key} must be an integer, got {value!r}")
            if expected is bool and not isinstance(value, bool):
                raise LayoutOptionsError(f"{key} must be true or false, got {value!r}")
            if expected is str and not isinstance(value, str):
                raise LayoutOptionsError(f"{key} must be a string, got {value!r}")
            values[key] = value
        return cls(**values).validate()


def load_layout_options(path) -> LayoutOptions:
    """Read LayoutOptions from a JSON file."""
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise LayoutOptionsError(f"Cannot read layout options {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LayoutOptionsError(f"Invalid JSON in {path}: {e}") from e
    options = LayoutOptions.from_dict(data)
    logger.debug("Loaded layout options from %s: %s", path, options)
    return options
