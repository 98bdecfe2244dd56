"""
simulation/circuit_validator.py

Pre-simulation schematic validation, built on the connectivity analysis.
"""

from models.component import ComponentType

from .connectivity import analyze_connectivity

_SOURCE_TYPES = (ComponentType.VOLTAGE_SOURCE, ComponentType.CURRENT_SOURCE)


def validate_schematic(schematic, connectivity=None):
    """
    Validate a schematic before simulation.

    Args:
        schematic: SchematicModel
        connectivity: optional precomputed ConnectivityResult

    Returns:
        (is_valid, errors, warnings) where:
            is_valid: bool, False if any errors found
            errors: list[str], problems that block simulation
            warnings: list[str], non-blocking issues
    """
    errors = []
    warnings = []
    components = schematic.components

    # 1. Circuit must have components (beyond just Ground)
    non_ground = [c for c in components.values() if not c.is_ground]
    if not non_ground:
        errors.append("Circuit has no components. Add at least one component to simulate.")
        return False, errors, warnings

    if connectivity is None:
        connectivity = analyze_connectivity(schematic)

    # 2. Must have a ground node
    if not any(net.is_ground for net in connectivity.nets):
        errors.append("Circuit has no ground node. Every SPICE circuit requires a ground (node 0).")

    # 3. Diagonal wires and other geometry errors
    errors.extend(connectivity.errors)

    # 4. Instance names must be unique, they become SPICE element names
    seen = {}
    for comp in non_ground:
        key = comp.inst_name.upper()
        if key in seen:
            errors.append(f"Duplicate instance name '{comp.inst_name}' ({seen[key]} and {comp.component_id})")
        else:
            seen[key] = comp.component_id

    # 5. Floating pins
    floating = {}
    for pc in connectivity.floating_pins():
        floating.setdefault(pc.component_id, []).append(pc.pin_name)
    for comp in non_ground:
        pins = floating.get(comp.component_id)
        if not pins:
            continue
        if len(pins) == len(comp.pin_names):
            errors.append(
                f"{comp.inst_name} ({comp.component_type.value}) has no connections. "
                f"Connect its terminals to the circuit."
            )
        else:
            warnings.append(f"{comp.inst_name} ({comp.component_type.value}) has unconnected pin(s): {pins}.")

    if not any(c.component_type in _SOURCE_TYPES for c in non_ground):
        warnings.append(
            "Circuit has no voltage or current sources. The simulation may not produce meaningful results."
        )

    warnings.extend(w for w in connectivity.warnings if "floating" not in w)

    is_valid = len(errors) == 0
    return is_valid, errors, warnings
