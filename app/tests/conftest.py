"""
Shared test fixtures for the topology engine test suite.

All fixtures build plain model objects positioned on the 10-unit grid.
"""

import sys
from pathlib import Path

# Ensure app/ is on sys.path so bare imports (models, simulation, layout, settings)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import pytest
from models.component import ComponentData
from models.net import NetLabelData
from models.schematic import SchematicModel
from models.wire import WireData


def make_component(component_type, component_id, value=None, position=(0, 0), rotation=0, mirror=False):
    """Helper to create a ComponentData with minimal boilerplate."""
    attributes = {"InstName": component_id}
    if value is not None:
        attributes["Value"] = value
    return ComponentData(
        component_id=component_id,
        component_type=component_type,
        position=position,
        rotation=rotation,
        mirror=mirror,
        attributes=attributes,
    )


def make_wire(x1, y1, x2, y2):
    """Helper to create a WireData."""
    return WireData(x1, y1, x2, y2)


def build_schematic(components, wires=(), junctions=(), labels=()):
    model = SchematicModel()
    for comp in components:
        model.add_component(comp)
    for wire in wires:
        model.add_wire(wire)
    for junction in junctions:
        model.add_junction(junction)
    for label in labels:
        model.add_net_label(label)
    return model


@pytest.fixture
def series_divider():
    """
    V1(5V) -- R1(1k) -- R2(2k) -- GND

    V1+ (0,60) ---- R1.1 (100,60)
    R1.2 (100,120) | R2.1 (100,160)
    R2.2 (100,220) and V1- (0,140) both run to GND1 pin (50,250)

    Nets in encounter order: "1" = {V1+, R1.1}, "2" = {R1.2, R2.1}, "0".
    """
    components = [
        make_component("Voltage Source", "V1", "5", (0, 100)),
        make_component("Resistor", "R1", "1k", (100, 90)),
        make_component("Resistor", "R2", "2k", (100, 190)),
        make_component("Ground", "GND1", position=(50, 260)),
    ]
    wires = [
        make_wire(0, 60, 100, 60),
        make_wire(100, 120, 100, 160),
        make_wire(100, 220, 100, 250),
        make_wire(100, 250, 50, 250),
        make_wire(0, 140, 0, 250),
        make_wire(0, 250, 50, 250),
    ]
    return build_schematic(components, wires)


@pytest.fixture
def rc_lowpass():
    """
    V1 -- R1 -- node out -- C1 -- GND, with a "out" net label on the R1/C1 wire.

    V1 at (0,100): + (0,60), - (0,140)
    R1 rotated 90 at (100,60): pins (130,60) and (70,60)
    C1 at (200,100): pins (200,70), (200,130)
    """
    components = [
        make_component("Voltage Source", "V1", "PULSE(0 5 0 1n 1n 1m 2m)", (0, 100)),
        make_component("Resistor", "R1", "1k", (100, 60), rotation=90),
        make_component("Capacitor", "C1", "1u", (200, 100)),
        make_component("Ground", "GND1", position=(100, 170)),
    ]
    wires = [
        make_wire(0, 60, 70, 60),
        make_wire(130, 60, 200, 60),
        make_wire(200, 60, 200, 70),
        make_wire(0, 140, 0, 160),
        make_wire(0, 160, 200, 160),
        make_wire(200, 160, 200, 130),
    ]
    return build_schematic(components, wires, labels=[NetLabelData("out", 200, 60)])
