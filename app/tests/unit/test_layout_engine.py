"""Tests for layout/engine.py - netlist in, routed schematic out."""

import pytest
from layout import import_netlist, layout_netlist
from models.geometry import snap
from settings.layout_options import LayoutOptions
from simulation.connectivity import analyze_connectivity
from simulation.netlist_generator import generate_netlist
from simulation.netlist_parser import parse_netlist

DIVIDER = "* Divider\nV1 1 0 5\nR1 1 2 1k\nR2 2 0 2k\n.tran 1u 10m\n.end\n"


def _lines(schematic):
    return [c.to_line() for c in generate_netlist(schematic).components]


class TestDividerLayout:
    @pytest.fixture
    def schematic(self):
        return import_netlist(DIVIDER)

    def test_components_placed(self, schematic):
        assert list(schematic.components) == ["V1", "R1", "R2", "GND1"]
        assert schematic.components["R2"].value == "2k"
        for comp in schematic.components.values():
            assert comp.position == (snap(comp.position[0]), snap(comp.position[1]))

    def test_wires_axis_aligned_on_grid(self, schematic):
        assert schematic.wires
        for wire in schematic.wires:
            assert wire.is_axis_aligned()
            assert all(v == snap(v) for v in (wire.x1, wire.y1, wire.x2, wire.y2))

    def test_nets_survive_reanalysis(self, schematic):
        result = analyze_connectivity(schematic)
        assert result.errors == []
        assert result.floating_pins() == []
        assert _lines(schematic) == ["V1 1 0 5", "R1 1 2 1k", "R2 2 0 2k"]

    def test_labels_and_directives(self, schematic):
        assert sorted(label.name for label in schematic.net_labels) == ["1", "2"]
        assert [d.text for d in schematic.directives] == [".tran 1u 10m"]
        assert sorted(label.name for label in schematic.node_labels) == ["1", "2"]

    def test_ground_below_everything(self, schematic):
        ground_y = schematic.components["GND1"].position[1]
        assert all(c.position[1] < ground_y for c in schematic.components.values() if not c.is_ground)


class TestLayoutOptions:
    def test_layer_spacing_respected(self):
        near = import_netlist(DIVIDER, LayoutOptions(layer_spacing=100))
        far = import_netlist(DIVIDER, LayoutOptions(layer_spacing=300))
        gap_near = near.components["R1"].position[1] - near.components["V1"].position[1]
        gap_far = far.components["R1"].position[1] - far.components["V1"].position[1]
        assert gap_far - gap_near == 200

    @pytest.mark.parametrize("node_spacing, layer_spacing", [(100, 200), (95, 195), (130, 170)])
    def test_transistor_pins_stay_on_wires(self, node_spacing, layer_spacing):
        text = "* bjt\nV1 vcc 0 12\nR1 vcc c 4.7k\nR2 vcc b 47k\nQ1 c b 0 2N3904\n"
        schematic = import_netlist(text, LayoutOptions(node_spacing=node_spacing, layer_spacing=layer_spacing))
        result = analyze_connectivity(schematic)
        assert result.floating_pins() == []
        assert _lines(schematic) == ["V1 vcc 0 12", "R1 vcc c 4.7k", "R2 vcc b 47k", "Q1 c b 0 2N3904"]

    def test_invalid_options_rejected(self):
        with pytest.raises(ValueError):
            import_netlist(DIVIDER, LayoutOptions(node_spacing=0))


class TestCarriedContent:
    def test_models_parameters_directives(self):
        text = "* t\n.param rl=2k\n.model dx D(Is=1n)\nV1 a 0 5\nR1 a k {rl}\nD1 k 0 dx\n.op\n"
        schematic = layout_netlist(parse_netlist(text))
        assert schematic.parameters == {"rl": "2k"}
        assert schematic.find_model("dx").params == "Is=1n"
        assert [d.text for d in schematic.directives] == [".op"]
        assert _lines(schematic) == ["V1 a 0 5", "R1 a k 2k", "D1 k 0 dx"]

    def test_mosfet_bulk_reemitted(self):
        schematic = import_netlist("* t\nV1 d 0 5\nV2 g 0 1\nM1 d g 0 0 NMOS\n")
        assert "M1 d g 0 0 NMOS" in _lines(schematic)

    def test_single_pin_net_keeps_name(self):
        schematic = import_netlist("* t\nV1 in 0 1\nR1 in open 1k\n")
        result = analyze_connectivity(schematic)
        assert result.net_for_pin("R1", "2").name == "open"
        assert _lines(schematic) == ["V1 in 0 1", "R1 in open 1k"]

    def test_ground_alias(self):
        schematic = import_netlist("* t\nV1 a gnd 1\nR1 a 0 1k\n")
        assert _lines(schematic) == ["V1 a 0 1", "R1 a 0 1k"]
