"""
simulation/current_calculator.py

Reconstructs per-component currents from simulated node voltages.

The simulator only reports currents through voltage sources and
inductors. Resistor, capacitor and diode currents are derived here from the
V(<net>) series of the component's two nodes, resolved with the same
connectivity analysis the netlist generator uses.
"""

import logging
from typing import Optional

import numpy as np

from models.component import ComponentType
from models.trace import TraceData, TraceType, current_trace_name, find_trace, voltage_trace_name
from settings.constants import DIODE_EXPONENT_LIMIT, DIODE_VOLTAGE_CLAMP, THERMAL_VOLTAGE

from .connectivity import analyze_connectivity
from .model_library import find_model
from .spice_values import expand_parameters, parse_model_params, parse_spice_value

logger = logging.getLogger(__name__)

# Fallback diode parameters (generic small-signal junction)
DEFAULT_DIODE_IS = 1e-14
DEFAULT_DIODE_N = 1.0

DERIVED_TYPES = (ComponentType.RESISTOR, ComponentType.CAPACITOR, ComponentType.DIODE)


def derivative(values, time) -> np.ndarray:
    """
    Numerical dv/dt.

    Forward difference at the first sample, backward difference at the
    last, central difference (v[i+1] - v[i-1]) / (t[i+1] - t[i-1])
    elsewhere. A zero or negative time step yields 0 for that sample.
    """
    v = np.asarray(values, dtype=float)
    t = np.asarray(time, dtype=float)
    n = len(v)
    result = np.zeros(n)
    if n < 2:
        return result

    def _safe_div(dv, dt):
        out = np.zeros_like(dv)
        np.divide(dv, dt, out=out, where=dt > 0)
        return out

    result[0] = _safe_div(np.array([v[1] - v[0]]), np.array([t[1] - t[0]]))[0]
    result[-1] = _safe_div(np.array([v[-1] - v[-2]]), np.array([t[-1] - t[-2]]))[0]
    if n > 2:
        result[1:-1] = _safe_div(v[2:] - v[:-2], t[2:] - t[:-2])
    return result


def diode_current(voltage, saturation_current=DEFAULT_DIODE_IS, emission=DEFAULT_DIODE_N) -> np.ndarray:
    """
    Shockley diode equation I = Is * (exp(V / (N * Vt)) - 1).

    V is clamped to DIODE_VOLTAGE_CLAMP first. Above an exponent of +40 the
    exponential continues as its tangent line; below -40 the current is -Is.
    """
    v = np.minimum(np.asarray(voltage, dtype=float), DIODE_VOLTAGE_CLAMP)
    x = v / (emission * THERMAL_VOLTAGE)
    limit = DIODE_EXPONENT_LIMIT
    exp_limit = np.exp(limit)

    current = saturation_current * (np.exp(np.clip(x, -limit, limit)) - 1.0)
    high = x > limit
    current[high] = saturation_current * (exp_limit * (1.0 + (x[high] - limit)) - 1.0)
    current[x < -limit] = -saturation_current
    return current


def diode_parameters(model_name, schematic) -> tuple[float, float]:
    """(Is, N) from the schematic's .model card, the built-in library, or defaults."""
    params = {}
    model = schematic.find_model(model_name) if model_name else None
    if model is None and model_name:
        library_model = find_model(model_name)
        if library_model is not None:
            model = library_model.to_spice_model()
    if model is not None:
        params = parse_model_params(model.params)

    def _param(key, default):
        raw = params.get(key)
        if raw is None:
            return default
        try:
            return parse_spice_value(raw)
        except ValueError:
            logger.warning("Bad %s=%s in model %s; using %s", key.upper(), raw, model_name, default)
            return default

    return _param("is", DEFAULT_DIODE_IS), _param("n", DEFAULT_DIODE_N)


def _time_axis(traces):
    for trace in traces:
        if trace.type == TraceType.TIME:
            return trace.values
    return None


def _node_voltage(net_name, traces, length):
    if net_name == "0":
        return np.zeros(length)
    trace = find_trace(traces, voltage_trace_name(net_name))
    return None if trace is None else trace.values


def calculate_component_current(component, schematic, traces, time=None, connectivity=None) -> Optional[TraceData]:
    """
    Derive I(<instance>) for one component.

    Args:
        component: ComponentData in ``schematic``.
        schematic: SchematicModel the traces were simulated from.
        traces: list of TraceData (node voltages, time axis, ...).
        time: optional time axis; taken from the 'time' trace when omitted.
        connectivity: optional precomputed ConnectivityResult.

    Returns:
        A current TraceData, or None when the type is unsupported (inductors,
        sources), a node voltage is missing, or the value is not positive.
    """
    ctype = component.component_type
    if ctype not in DERIVED_TYPES:
        return None

    if time is None:
        time = _time_axis(traces)
    if connectivity is None:
        connectivity = analyze_connectivity(schematic)

    node_names = connectivity.node_names(component)
    if len(node_names) < 2 or None in node_names[:2]:
        return None

    length = len(time) if time is not None else None
    if length is None:
        probe = find_trace(traces, voltage_trace_name(node_names[0])) or find_trace(
            traces, voltage_trace_name(node_names[1])
        )
        if probe is None:
            return None
        length = len(probe)

    v1 = _node_voltage(node_names[0], traces, length)
    v2 = _node_voltage(node_names[1], traces, length)
    if v1 is None or v2 is None:
        logger.debug("No voltage data for %s nodes %s", component.inst_name, node_names[:2])
        return None
    v_across = np.asarray(v1) - np.asarray(v2)

    name = current_trace_name(component.inst_name)

    if ctype == ComponentType.DIODE:
        if np.iscomplexobj(v_across):
            return None
        i_s, n = diode_parameters(component.value, schematic)
        return TraceData(name=name, type=TraceType.CURRENT, values=diode_current(v_across, i_s, n))

    raw = expand_parameters(component.value, schematic.parameters)
    try:
        value = parse_spice_value(raw)
    except ValueError:
        logger.debug("Cannot parse value %r of %s", raw, component.inst_name)
        return None
    if not np.isfinite(value) or value <= 0:
        return None

    if ctype == ComponentType.RESISTOR:
        return TraceData(name=name, type=TraceType.CURRENT, values=v_across / value)

    # Capacitor: I = C dV/dt, time domain only
    if time is None or np.iscomplexobj(v_across):
        return None
    return TraceData(name=name, type=TraceType.CURRENT, values=value * derivative(v_across, time))


def calculate_missing_currents(schematic, traces, time=None) -> list[TraceData]:
    """Derived current traces for every resistor, capacitor and diode not already reported."""
    existing = {t.name.lower() for t in traces if t.type == TraceType.CURRENT}
    connectivity = analyze_connectivity(schematic)
    results = []
    for component in schematic.components.values():
        if component.component_type not in DERIVED_TYPES:
            continue
        if current_trace_name(component.inst_name).lower() in existing:
            continue
        trace = calculate_component_current(component, schematic, traces, time, connectivity)
        if trace is not None:
            results.append(trace)
    return results
