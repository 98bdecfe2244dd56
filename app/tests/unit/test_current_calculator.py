"""Tests for simulation/current_calculator.py - derived R/C/D currents."""

import math

import numpy as np
import pytest
from models.directive import SpiceModel
from models.trace import TraceData, TraceType
from simulation.current_calculator import (
    DEFAULT_DIODE_IS,
    calculate_component_current,
    calculate_missing_currents,
    derivative,
    diode_current,
    diode_parameters,
)
from tests.conftest import build_schematic, make_component, make_wire

TIME = [0.0, 1e-3, 2e-3]


def _divider_traces():
    return [
        TraceData("time", TraceType.TIME, TIME),
        TraceData("V(1)", TraceType.VOLTAGE, [5.0, 5.0, 5.0]),
        TraceData("V(2)", TraceType.VOLTAGE, [2.0, 3.0, 4.0]),
    ]


class TestDerivative:
    def test_forward_central_backward(self):
        result = derivative([0.0, 1.0, 4.0, 9.0], [0.0, 1.0, 2.0, 3.0])
        assert result.tolist() == pytest.approx([1.0, 2.0, 4.0, 5.0])

    def test_non_positive_step_gives_zero(self):
        result = derivative([0.0, 1.0, 2.0], [0.0, 0.0, 0.0])
        assert result.tolist() == [0.0, 0.0, 0.0]

    def test_single_sample(self):
        assert derivative([3.0], [0.0]).tolist() == [0.0]


class TestDiodeCurrent:
    def test_shockley_at_0v7(self):
        expected = 1e-14 * (math.exp(0.7 / 0.02585) - 1)
        assert diode_current(np.array([0.7]))[0] == pytest.approx(expected)

    def test_zero_bias(self):
        assert diode_current(np.array([0.0]))[0] == 0.0

    def test_voltage_clamped(self):
        assert diode_current(np.array([5.0]))[0] == diode_current(np.array([1.0]))[0]

    def test_clamped_voltage_stays_exponential(self):
        # N=1 keeps the clamped exponent at 1.0 / 0.02585, just under 40
        expected = 1e-14 * (math.exp(1.0 / 0.02585) - 1)
        assert diode_current(np.array([1.0]))[0] == pytest.approx(expected)

    def test_linear_continuation_above_limit(self):
        # N=0.5 puts the exponent near 77
        x = 1.0 / (0.5 * 0.02585)
        expected = 1e-14 * (math.exp(40) * (1 + (x - 40)) - 1)
        assert diode_current(np.array([1.0]), emission=0.5)[0] == pytest.approx(expected)

    def test_continuation_is_continuous_at_limit(self):
        v_limit = 40 * 0.02585 * 0.5
        below = diode_current(np.array([v_limit * (1 - 1e-9)]), emission=0.5)[0]
        above = diode_current(np.array([v_limit * (1 + 1e-9)]), emission=0.5)[0]
        assert above == pytest.approx(below, rel=1e-6)

    def test_reverse_bias_saturates(self):
        assert diode_current(np.array([-5.0]))[0] == -DEFAULT_DIODE_IS

    def test_parameters_from_library(self, series_divider):
        i_s, n = diode_parameters("1N4148", series_divider)
        assert i_s == pytest.approx(2.52e-9)
        assert n == pytest.approx(1.752)

    def test_schematic_model_preferred(self, series_divider):
        series_divider.add_model(SpiceModel("1N4148", "D", "Is=1e-12"))
        assert diode_parameters("1N4148", series_divider) == (pytest.approx(1e-12), 1.0)

    def test_unknown_model_defaults(self, series_divider):
        assert diode_parameters("nope", series_divider) == (1e-14, 1.0)


class TestComponentCurrents:
    def test_resistor_ohms_law(self, series_divider):
        traces = _divider_traces()
        r1 = calculate_component_current(series_divider.components["R1"], series_divider, traces)
        r2 = calculate_component_current(series_divider.components["R2"], series_divider, traces)
        assert r1.name == "I(R1)"
        assert r1.type == TraceType.CURRENT
        assert r1.values.tolist() == pytest.approx([3e-3, 2e-3, 1e-3])
        assert r2.values.tolist() == pytest.approx([1e-3, 1.5e-3, 2e-3])

    def test_parameter_value(self, series_divider):
        series_divider.set_parameter("rtop", "2k")
        series_divider.set_component_value("R1", "{rtop}")
        r1 = calculate_component_current(series_divider.components["R1"], series_divider, _divider_traces())
        assert r1.values[0] == pytest.approx(1.5e-3)

    @pytest.mark.parametrize("value", ["0", "-1k", "abc"])
    def test_unusable_value(self, series_divider, value):
        series_divider.set_component_value("R1", value)
        assert calculate_component_current(series_divider.components["R1"], series_divider, _divider_traces()) is None

    def test_missing_voltage(self, series_divider):
        traces = [TraceData("time", TraceType.TIME, TIME), TraceData("V(1)", TraceType.VOLTAGE, [5.0] * 3)]
        assert calculate_component_current(series_divider.components["R1"], series_divider, traces) is None

    def test_sources_not_derived(self, series_divider):
        assert calculate_component_current(series_divider.components["V1"], series_divider, _divider_traces()) is None

    def test_complex_resistor(self, series_divider):
        traces = [
            TraceData("frequency", TraceType.FREQUENCY, [1.0, 10.0]),
            TraceData("V(1)", TraceType.VOLTAGE, [1 + 1j, 1 + 0j]),
            TraceData("V(2)", TraceType.VOLTAGE, [0j, 0j]),
        ]
        r1 = calculate_component_current(series_divider.components["R1"], series_divider, traces)
        assert r1.values[0] == pytest.approx(1e-3 + 1e-3j)

    def test_capacitor(self, rc_lowpass):
        traces = [
            TraceData("time", TraceType.TIME, TIME),
            TraceData("V(out)", TraceType.VOLTAGE, [0.0, 1.0, 1.5]),
            TraceData("V(1)", TraceType.VOLTAGE, [5.0, 5.0, 5.0]),
        ]
        c1 = calculate_component_current(rc_lowpass.components["C1"], rc_lowpass, traces)
        assert c1.values.tolist() == pytest.approx([1e-3, 0.75e-3, 0.5e-3])

    def test_diode(self):
        schematic = build_schematic(
            [
                make_component("Diode", "D1", "D", (100, 90)),
                make_component("Ground", "GND1", position=(100, 130)),
            ],
            [make_wire(100, 60, 100, 40)],
        )
        traces = [TraceData("time", TraceType.TIME, [0.0]), TraceData("V(1)", TraceType.VOLTAGE, [0.7])]
        d1 = calculate_component_current(schematic.components["D1"], schematic, traces)
        assert d1.values[0] == pytest.approx(1e-14 * (math.exp(0.7 / 0.02585) - 1))


class TestMissingCurrents:
    def test_skips_reported_and_unsupported(self, series_divider):
        traces = _divider_traces() + [TraceData("i(r2)", TraceType.CURRENT, [0.0, 0.0, 0.0])]
        names = [t.name for t in calculate_missing_currents(series_divider, traces)]
        assert names == ["I(R1)"]
