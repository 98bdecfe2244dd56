"""
Integration: a mixed 14-component netlist through parse -> layout -> route,
then back through connectivity and netlist generation.
"""

from collections import Counter
from itertools import combinations

import pytest
from layout import import_netlist
from models.geometry import point_on_segment, round_point
from settings.layout_options import LayoutOptions
from simulation.connectivity import analyze_connectivity
from simulation.netlist_generator import generate_netlist
from simulation.netlist_parser import parse_netlist

# 14 components, 13 distinct nets (12 named + ground)
MIXED = """* Mixed topology
V1 vcc 0 12
V2 in 0 SIN(0 1 1k)
C1 in b1 10u
R1 vcc b1 47k
R2 b1 0 10k
Q1 c1 b1 e1 2N3904
R3 vcc c1 4.7k
R4 e1 f1 1k
C2 f1 y1 100u
C3 c1 g2 10u
M1 d2 g2 s2 s2 NMOS
R5 d2 y1 2.2k
R6 s2 x1 100
D1 x1 out 1N4148
.tran 10u 5m
.end
"""


def _wire_nets(schematic, result):
    """Net name for every wire, looked up through its start point."""
    by_point = {}
    for net in result.nets:
        for point in net.points:
            by_point[point] = net.name
    return [(by_point[round_point(w.start)], w) for w in schematic.wires]


def _touch(a, b):
    for p in a.endpoints:
        if point_on_segment(p, b.start, b.end):
            return True
    return any(point_on_segment(p, a.start, a.end) for p in b.endpoints)


@pytest.fixture(scope="module")
def parsed():
    return parse_netlist(MIXED)


@pytest.fixture(scope="module")
def schematic(parsed):
    return import_netlist(MIXED)


def test_netlist_shape(parsed):
    assert len(parsed.components) == 14
    assert len(parsed.net_names()) == 13


def test_one_component_per_instance_plus_ground(schematic):
    assert len(schematic.components) == 15
    assert sum(1 for c in schematic.components.values() if c.is_ground) == 1


def test_no_cross_net_contact(schematic):
    result = analyze_connectivity(schematic)
    assert result.errors == []
    wires = _wire_nets(schematic, result)
    for (net_a, wire_a), (net_b, wire_b) in combinations(wires, 2):
        if net_a != net_b:
            assert not _touch(wire_a, wire_b), f"{net_a} {wire_a} touches {net_b} {wire_b}"


def test_nets_reproduced(parsed, schematic):
    regenerated = generate_netlist(schematic)
    expected = Counter((c.name, tuple(c.nodes), c.value) for c in parsed.components)
    actual = Counter((c.name, tuple(c.nodes), c.value) for c in regenerated.components)
    assert actual == expected
    assert regenerated.errors == []
    assert not any("floating" in w for w in regenerated.warnings)


def test_single_pin_net_labelled(schematic):
    result = analyze_connectivity(schematic)
    assert result.net_for_pin("D1", "K").name == "out"


def test_layout_is_deterministic(schematic):
    again = import_netlist(MIXED)
    assert again.to_dict() == schematic.to_dict()


@pytest.mark.parametrize("options", [LayoutOptions(ground_layer=False), LayoutOptions(node_spacing=60)])
def test_other_options_still_reproduce(parsed, options):
    regenerated = generate_netlist(import_netlist(MIXED, options))
    expected = Counter((c.name, tuple(c.nodes), c.value) for c in parsed.components)
    assert Counter((c.name, tuple(c.nodes), c.value) for c in regenerated.components) == expected
