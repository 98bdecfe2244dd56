"""
SchematicModel - Central data store for schematic state.

Holds placed components, wire segments, junctions, net labels and the
SPICE-level extras (directives, parameters, models). Components and wires
are independent: connectivity is derived from positions on demand, never
stored here. Every mutation goes through an explicit operation that bumps
``revision`` so derived results can be cached per revision.
"""

import logging
from dataclasses import dataclass, field

from .component import ComponentData, ComponentType, bump_counter, next_instance_name
from .directive import DirectiveData, SpiceModel
from .junction import JunctionData
from .net import NetLabelData, NodeLabel
from .wire import WireData

logger = logging.getLogger(__name__)


class SchematicFormatError(ValueError):
    """Raised when a schematic JSON aggregate is malformed."""


@dataclass
class SchematicModel:
    """
    The persisted/exchanged unit between the forward and reverse paths.

    JSON shape::

        {components[], wires[], junctions[], netLabels?[], nodeLabels?[],
         directives?[], parameters?{}, models?[], counters?{}}
    """

    components: dict[str, ComponentData] = field(default_factory=dict)
    wires: list[WireData] = field(default_factory=list)
    junctions: list[JunctionData] = field(default_factory=list)
    net_labels: list[NetLabelData] = field(default_factory=list)
    node_labels: list[NodeLabel] = field(default_factory=list)
    directives: list[DirectiveData] = field(default_factory=list)
    parameters: dict[str, str] = field(default_factory=dict)
    models: list[SpiceModel] = field(default_factory=list)

    # prefix -> highest instance number used ("wire"/"junction" for geometry ids)
    counters: dict[str, int] = field(default_factory=dict)
    revision: int = 0

    def _touch(self):
        self.revision += 1

    # --- Component operations ---

    def add_component(self, component: ComponentData) -> None:
        """Add a component; its id must be unique within the schematic."""
        if component.component_id in self.components:
            raise ValueError(f"Duplicate component id: {component.component_id}")
        self.components[component.component_id] = component
        self.counters = bump_counter(self.counters, component.component_id)
        self._touch()

    def place_component(self, component_type, position, rotation=0, mirror=False, value=None) -> ComponentData:
        """Create a component with the next free instance name and add it."""
        while True:
            name, self.counters = next_instance_name(component_type, self.counters)
            if name not in self.components:
                break
        attributes = {"InstName": name}
        if value is not None:
            attributes["Value"] = value
        component = ComponentData(
            component_id=name,
            component_type=component_type,
            position=position,
            rotation=rotation,
            mirror=mirror,
            attributes=attributes,
        )
        self.add_component(component)
        return component

    def remove_component(self, component_id: str) -> bool:
        """Remove a component. Wires are left in place (they do not belong to it)."""
        if component_id not in self.components:
            return False
        del self.components[component_id]
        self._touch()
        return True

    def move_component(self, component_id: str, position, rotation=None, mirror=None) -> None:
        component = self.components[component_id]
        component.position = (position[0], position[1])
        if rotation is not None:
            component.rotation = rotation % 360
        if mirror is not None:
            component.mirror = bool(mirror)
        self._touch()

    def set_component_value(self, component_id: str, value: str) -> None:
        self.components[component_id].value = value
        self._touch()

    def ground_components(self) -> list[ComponentData]:
        return [c for c in self.components.values() if c.component_type == ComponentType.GROUND]

    # --- Wire / junction / label operations ---

    def _next_id(self, key, prefix):
        self.counters[key] = self.counters.get(key, 0) + 1
        return f"{prefix}{self.counters[key]}"

    def add_wire(self, wire: WireData) -> WireData:
        if not wire.wire_id:
            wire.wire_id = self._next_id("wire", "w")
        self.wires.append(wire)
        self._touch()
        return wire

    def remove_wire(self, wire_id: str) -> bool:
        for i, wire in enumerate(self.wires):
            if wire.wire_id == wire_id:
                del self.wires[i]
                self._touch()
                return True
        return False

    def move_wire(self, wire_id: str, dx: float, dy: float) -> None:
        for i, wire in enumerate(self.wires):
            if wire.wire_id == wire_id:
                self.wires[i] = wire.translated(dx, dy)
                self._touch()
                return
        raise KeyError(wire_id)

    def add_junction(self, junction: JunctionData) -> JunctionData:
        if not junction.junction_id:
            junction.junction_id = self._next_id("junction", "j")
        self.junctions.append(junction)
        self._touch()
        return junction

    def remove_junction(self, junction_id: str) -> bool:
        for i, junction in enumerate(self.junctions):
            if junction.junction_id == junction_id:
                del self.junctions[i]
                self._touch()
                return True
        return False

    def add_net_label(self, label: NetLabelData) -> None:
        self.net_labels.append(label)
        self._touch()

    def remove_net_label(self, name: str, position=None) -> int:
        """Remove labels with this name (optionally only at position); returns count removed."""
        keep = [
            label
            for label in self.net_labels
            if label.name != name or (position is not None and label.position != tuple(position))
        ]
        removed = len(self.net_labels) - len(keep)
        if removed:
            self.net_labels = keep
            self._touch()
        return removed

    # --- SPICE extras ---

    def add_directive(self, directive: DirectiveData) -> None:
        if not directive.directive_id:
            directive.directive_id = self._next_id("directive", "dir")
        self.directives.append(directive)
        self._touch()

    def set_parameter(self, name: str, value: str) -> None:
        self.parameters[name] = str(value)
        self._touch()

    def add_model(self, model: SpiceModel) -> None:
        """Add or replace a .model card (matched by name, case-insensitive)."""
        self.models = [m for m in self.models if m.name.lower() != model.name.lower()]
        self.models.append(model)
        self._touch()

    def find_model(self, name: str):
        lowered = name.lower()
        for model in self.models:
            if model.name.lower() == lowered:
                return model
        return None

    def clear(self) -> None:
        self.components.clear()
        self.wires.clear()
        self.junctions.clear()
        self.net_labels.clear()
        self.node_labels.clear()
        self.directives.clear()
        self.parameters.clear()
        self.models.clear()
        self.counters.clear()
        self._touch()

    # --- Serialization ---

    def to_dict(self) -> dict:
        """Serialize to the JSON aggregate (optional sections only when non-empty)."""
        data = {
            "components": [c.to_dict() for c in self.components.values()],
            "wires": [w.to_dict() for w in self.wires],
            "junctions": [j.to_dict() for j in self.junctions],
        }
        if self.net_labels:
            data["netLabels"] = [label.to_dict() for label in self.net_labels]
        if self.node_labels:
            data["nodeLabels"] = [label.to_dict() for label in self.node_labels]
        if self.directives:
            data["directives"] = [d.to_dict() for d in self.directives]
        if self.parameters:
            data["parameters"] = dict(self.parameters)
        if self.models:
            data["models"] = [m.to_dict() for m in self.models]
        if self.counters:
            data["counters"] = dict(self.counters)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SchematicModel":
        """
        Deserialize from the JSON aggregate.

        Raises:
            SchematicFormatError: If a required section or field is missing or
                has the wrong type.
        """
        if not isinstance(data, dict):
            raise SchematicFormatError("Schematic must be a JSON object")
        for key in ("components", "wires"):
            if not isinstance(data.get(key, []), list):
                raise SchematicFormatError(f"'{key}' must be a list")

        model = cls()
        try:
            for comp_data in data.get("components", []):
                component = ComponentData.from_dict(comp_data)
                if component.component_id in model.components:
                    raise SchematicFormatError(f"Duplicate component id: {component.component_id}")
                model.components[component.component_id] = component
                model.counters = bump_counter(model.counters, component.component_id)
            model.wires = [WireData.from_dict(w) for w in data.get("wires", [])]
            model.junctions = [JunctionData.from_dict(j) for j in data.get("junctions", [])]
            model.net_labels = [NetLabelData.from_dict(n) for n in data.get("netLabels", [])]
            model.node_labels = [NodeLabel.from_dict(n) for n in data.get("nodeLabels", [])]
            model.directives = [DirectiveData.from_dict(d) for d in data.get("directives", [])]
            model.parameters = {str(k): str(v) for k, v in data.get("parameters", {}).items()}
            model.models = [SpiceModel.from_dict(m) for m in data.get("models", [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise SchematicFormatError(f"Malformed schematic entry: {e}") from e
        except ValueError as e:
            if isinstance(e, SchematicFormatError):
                raise
            raise SchematicFormatError(str(e)) from e

        for key, value in data.get("counters", {}).items():
            model.counters[key] = max(model.counters.get(key, 0), int(value))

        logger.debug(
            "Loaded schematic: %d components, %d wires, %d junctions",
            len(model.components),
            len(model.wires),
            len(model.junctions),
        )
        return model

    def __repr__(self):
        return (
            f"SchematicModel({len(self.components)} components, {len(self.wires)} wires, "
            f"{len(self.junctions)} junctions, rev {self.revision})"
        )
