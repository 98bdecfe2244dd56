"""Tests for simulation/circuit_validator.py."""

from models.schematic import SchematicModel
from simulation.circuit_validator import validate_schematic
from tests.conftest import build_schematic, make_component, make_wire


class TestValidCircuits:
    def test_series_divider_is_valid(self, series_divider):
        is_valid, errors, warnings = validate_schematic(series_divider)
        assert is_valid
        assert errors == []
        assert warnings == []

    def test_rc_lowpass_is_valid(self, rc_lowpass):
        is_valid, errors, _ = validate_schematic(rc_lowpass)
        assert is_valid, errors


class TestErrors:
    def test_empty_circuit(self):
        is_valid, errors, _ = validate_schematic(SchematicModel())
        assert not is_valid
        assert errors == ["Circuit has no components. Add at least one component to simulate."]

    def test_ground_only(self):
        model = build_schematic([make_component("Ground", "GND1")])
        is_valid, errors, _ = validate_schematic(model)
        assert not is_valid
        assert "no components" in errors[0]

    def test_missing_ground(self):
        model = build_schematic(
            [
                make_component("Voltage Source", "V1", "5", (0, 100)),
                make_component("Resistor", "R1", "1k", (100, 90)),
            ],
            [make_wire(0, 60, 100, 60), make_wire(0, 140, 100, 140), make_wire(100, 120, 100, 140)],
        )
        is_valid, errors, _ = validate_schematic(model)
        assert not is_valid
        assert any("no ground node" in e for e in errors)

    def test_unconnected_component(self, series_divider):
        series_divider.add_component(make_component("Capacitor", "C1", "1u", (400, 400)))
        is_valid, errors, _ = validate_schematic(series_divider)
        assert not is_valid
        assert any(e.startswith("C1 (Capacitor) has no connections") for e in errors)

    def test_duplicate_instance_names(self, series_divider):
        dup = make_component("Resistor", "R3", "1k", (300, 300))
        dup.attributes["InstName"] = "r1"
        series_divider.add_component(dup)
        is_valid, errors, _ = validate_schematic(series_divider)
        assert not is_valid
        assert any("Duplicate instance name 'r1'" in e for e in errors)

    def test_diagonal_wire(self, series_divider):
        series_divider.add_wire(make_wire(0, 0, 30, 30))
        is_valid, errors, _ = validate_schematic(series_divider)
        assert not is_valid
        assert any("not horizontal or vertical" in e for e in errors)


class TestWarnings:
    def test_partially_connected(self, series_divider):
        # C1 pin 1 lands on V1+ / R1.1 wire, pin 2 hangs
        series_divider.add_component(make_component("Capacitor", "C1", "1u", (50, 90)))
        is_valid, errors, warnings = validate_schematic(series_divider)
        assert is_valid, errors
        assert "C1 (Capacitor) has unconnected pin(s): ['2']." in warnings
        assert not any("floating" in w for w in warnings)

    def test_no_sources(self):
        model = build_schematic(
            [
                make_component("Resistor", "R1", "1k", (0, 0)),
                make_component("Ground", "GND1", position=(0, 40)),
            ],
            [make_wire(0, -30, 0, -60)],
        )
        is_valid, _, warnings = validate_schematic(model)
        assert is_valid
        assert any("no voltage or current sources" in w for w in warnings)
