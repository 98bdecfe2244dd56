"""Tests for settings/layout_options.py."""

import json

import pytest
from settings.layout_options import LayoutOptions, LayoutOptionsError, load_layout_options


class TestLayoutOptions:
    def test_defaults(self):
        options = LayoutOptions()
        assert (options.node_spacing, options.layer_spacing, options.engine) == (100, 200, "networkx")
        assert options.validate() is options

    def test_from_dict_overrides(self):
        options = LayoutOptions.from_dict({"node_spacing": 120, "ground_layer": False})
        assert options.node_spacing == 120
        assert options.ground_layer is False
        assert options.layer_spacing == 200

    def test_to_dict_round_trip(self):
        options = LayoutOptions(node_spacing=80)
        assert LayoutOptions.from_dict(options.to_dict()) == options

    @pytest.mark.parametrize(
        "data",
        [
            {"node_spacng": 100},
            {"node_spacing": "100"},
            {"node_spacing": 1.5},
            {"grid_size": 20},
            {"engine": "elk"},
            {"engine": 1},
            {"ground_layer": 1},
            {"layer_spacing": 0},
            {"channel_margin": -10},
            {"route_search_limit": 0},
        ],
    )
    def test_rejected(self, data):
        with pytest.raises(LayoutOptionsError):
            LayoutOptions.from_dict(data)

    def test_grid_is_not_configurable(self):
        with pytest.raises(LayoutOptionsError, match="Unknown layout option"):
            LayoutOptions.from_dict({"grid_size": 20})

    def test_engine_from_dict(self):
        assert LayoutOptions.from_dict({"engine": "dot"}).engine == "dot"

    def test_not_an_object(self):
        with pytest.raises(LayoutOptionsError):
            LayoutOptions.from_dict([1, 2])


class TestLoadLayoutOptions:
    def test_load(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps({"layer_spacing": 240}))
        assert load_layout_options(path).layer_spacing == 240

    def test_missing_file(self, tmp_path):
        with pytest.raises(LayoutOptionsError, match="Cannot read"):
            load_layout_options(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text("{not json")
        with pytest.raises(LayoutOptionsError, match="Invalid JSON"):
            load_layout_options(path)
