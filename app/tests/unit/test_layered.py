"""Tests for layout/layered.py - networkx layering and multipartite placement."""

import networkx as nx
from layout.graph_builder import build_layout_graph
import layout.layered as layered
from layout.layered import assign_coordinates, assign_layers, build_nx_graph, layered_layout
from settings.layout_options import LayoutOptions
from simulation.netlist_parser import parse_netlist

DIVIDER = "* d\nV1 1 0 5\nR1 1 2 1k\nR2 2 0 2k\n"


def _divider_graph():
    return build_nx_graph(build_layout_graph(parse_netlist(DIVIDER)))


def _ordered_graph(nodes, edges, widths=None):
    g = nx.Graph()
    for order, node in enumerate(nodes):
        g.add_node(node, order=order, width=(widths or {}).get(node, 20), height=60)
    g.add_edges_from(edges)
    return g


class TestBuildNxGraph:
    def test_edges_collapse_per_node_pair(self):
        g = _divider_graph()
        assert set(g.nodes) == {"V1", "R1", "R2", "GND1"}
        assert g.number_of_edges() == 4
        assert g["V1"]["R1"]["nets"] == ["1"]

    def test_self_loops_dropped(self):
        g = build_nx_graph(build_layout_graph(parse_netlist("* t\nR1 a a 1k\n")))
        assert g.number_of_edges() == 0


class TestAssignLayers:
    def test_ground_gets_bottom_layer(self):
        assert assign_layers(_divider_graph(), ["GND1"]) == [["V1"], ["R1", "R2"], ["GND1"]]

    def test_ground_layer_disabled(self):
        assert assign_layers(_divider_graph(), ["GND1"], ground_layer=False) == [["V1"], ["R1", "R2", "GND1"]]

    def test_disconnected_components_share_layers(self):
        g = _ordered_graph(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])
        assert assign_layers(g) == [["A", "C"], ["B", "D"]]


class TestAssignCoordinates:
    def test_rows_centred_and_stacked(self):
        g = _divider_graph()
        positions = assign_coordinates(g, [["V1"], ["R1", "R2"], ["GND1"]], 100, 200)
        assert positions["V1"] == (-20, 0)
        assert positions["R1"] == (-70, 280)
        assert positions["R2"] == (50, 280)
        assert positions["GND1"] == (-15, 540)

    def test_row_slots_one_pitch_apart(self):
        g = _ordered_graph(["A", "B", "C"], [])
        positions = assign_coordinates(g, [["A", "B", "C"]], 100, 200)
        assert [positions[n] for n in "ABC"] == [(-130, 0), (-10, 0), (110, 0)]

    def test_pitch_follows_widest_node(self):
        g = _ordered_graph(["A", "B"], [("A", "B")], widths={"A": 40})
        positions = assign_coordinates(g, [["A", "B"]], 100, 200)
        assert positions["A"] == (-90, 0)
        assert positions["B"] == (60, 0)

    def test_layer_order_kept(self):
        g = _ordered_graph(["A", "B", "C", "D"], [("A", "C"), ("A", "D"), ("B", "D")])
        positions = assign_coordinates(g, [["B", "A"], ["D", "C"]], 100, 200)
        assert positions["B"][0] < positions["A"][0]
        assert positions["D"][0] < positions["C"][0]
        assert positions["D"][1] == 260

    def test_single_node(self):
        g = _ordered_graph(["A"], [])
        assert assign_coordinates(g, [["A"]], 100, 200) == {"A": (-10, 0)}

    def test_no_layers(self):
        assert assign_coordinates(nx.Graph(), [], 100, 200) == {}


def test_layered_layout_places_every_node():
    graph = build_layout_graph(parse_netlist(DIVIDER))
    positions = layered_layout(graph, LayoutOptions())
    assert set(positions) == {"V1", "R1", "R2", "GND1"}
    assert positions["GND1"][1] > positions["R1"][1] > positions["V1"][1]


def test_dot_engine_selected(monkeypatch):
    calls = []

    def fake_dot_layout(graph, options):
        calls.append(options.engine)
        return {node.node_id: (0, 0) for node in graph.nodes}

    monkeypatch.setattr(layered, "dot_layout", fake_dot_layout)
    graph = build_layout_graph(parse_netlist(DIVIDER))
    assert set(layered_layout(graph, LayoutOptions(engine="dot"))) == {"V1", "R1", "R2", "GND1"}
    assert calls == ["dot"]
