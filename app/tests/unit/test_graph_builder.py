"""Tests for layout/graph_builder.py."""

from layout.graph_builder import GROUND_NODE_ID, build_layout_graph, is_ground_net
from models.component import ComponentType
from simulation.netlist_parser import parse_netlist

DIVIDER = "* d\nV1 1 0 5\nR1 1 2 1k\nR2 2 0 2k\n.end\n"


class TestBuildLayoutGraph:
    def test_nodes_in_netlist_order_with_ground_last(self):
        graph = build_layout_graph(parse_netlist(DIVIDER))
        assert [n.node_id for n in graph.nodes] == ["V1", "R1", "R2", GROUND_NODE_ID]
        assert graph.node("GND1").is_ground

    def test_ports_in_top_left_frame(self):
        graph = build_layout_graph(parse_netlist(DIVIDER))
        v1 = graph.node("V1")
        assert (v1.width, v1.height) == (40, 80)
        assert [(p.pin_name, p.x, p.y, p.net) for p in v1.ports] == [("+", 20, 0, "1"), ("-", 20, 80, "0")]

    def test_nets_and_star_edges(self):
        graph = build_layout_graph(parse_netlist(DIVIDER))
        assert list(graph.nets) == ["1", "0", "2"]
        assert [p.port_id for p in graph.nets["0"]] == ["V1.-", "R2.2", "GND1.0"]
        ground_edges = [(e.source.port_id, e.target.port_id) for e in graph.edges if e.net == "0"]
        assert ground_edges == [("V1.-", "R2.2"), ("V1.-", "GND1.0")]
        assert len(graph.edges) == 4
        assert {e.net_index for e in graph.edges if e.net == "0"} == {1}

    def test_ground_aliases_fold(self):
        graph = build_layout_graph(parse_netlist("* t\nR1 1 gnd 1k\nR2 1 GND 1k\nR3 1 0 1k\n"))
        assert [n.node_id for n in graph.nodes].count(GROUND_NODE_ID) == 1
        assert len(graph.nets["0"]) == 4
        assert "gnd" not in graph.nets

    def test_no_ground_node_without_reference(self):
        graph = build_layout_graph(parse_netlist("* t\nR1 a b 1k\n"))
        assert [n.node_id for n in graph.nodes] == ["R1"]
        assert graph.edges == []

    def test_duplicate_names_renamed(self):
        graph = build_layout_graph(parse_netlist("* t\nR1 1 0 1k\nR1 1 0 2k\n"))
        assert [n.node_id for n in graph.nodes][:2] == ["R1", "R1_2"]
        assert graph.node("R1_2").value == "2k"

    def test_mosfet_bulk_dropped(self):
        graph = build_layout_graph(parse_netlist("* t\nM1 d g s b NMOS\n"))
        m1 = graph.node("M1")
        assert m1.component_type == ComponentType.MOSFET_NMOS
        assert [p.pin_name for p in m1.ports] == ["D", "G", "S"]
        assert "b" not in graph.nets


def test_is_ground_net():
    assert is_ground_net("0")
    assert is_ground_net("GND")
    assert not is_ground_net("out")
