"""
constants.py - Centralized constants for the topology engine.

This file is the SINGLE SOURCE OF TRUTH for:
- GRID_SIZE: Used for snapping placed components and routed wires
- Tolerances used by connectivity analysis and routing overlap checks
- Simulation defaults emitted into generated netlists
"""

# Grid settings
GRID_SIZE = 10

# Connectivity
CONNECTION_TOLERANCE = 1       # Max distance for a point to count as "on" a wire
OVERLAP_TOLERANCE = 2          # Min clearance between runs of different nets

# Netlist generation
DEFAULT_TRAN_DIRECTIVE = ".tran 1u 10m"
DEFAULT_TITLE = "Untitled Circuit"

# Device physics
THERMAL_VOLTAGE = 0.02585      # kT/q at room temperature (V)
DIODE_VOLTAGE_CLAMP = 1.0      # Forward voltage clamp before exponentiation (V)
DIODE_EXPONENT_LIMIT = 40.0    # |V/(N*Vt)| beyond which the exponential is approximated

# Layout
DEFAULT_NODE_SPACING = 100     # Horizontal gap between nodes in a layer
DEFAULT_LAYER_SPACING = 200    # Vertical gap between layers
ROUTE_SEARCH_LIMIT = 200       # Column offsets tried per pin before falling back to A*
LAYOUT_ENGINES = ("networkx", "dot")
DEFAULT_LAYOUT_ENGINE = "networkx"
POINTS_PER_INCH = 72           # Graphviz sizes are in inches, positions in points
