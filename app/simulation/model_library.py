"""
simulation/model_library.py

Built-in SPICE device models referenced by name from component values.
Lookup is case-insensitive and honours vendor aliases (D1N4148 -> 1N4148).
"""

from dataclasses import dataclass

from models.directive import SpiceModel


@dataclass(frozen=True)
class LibraryModel:
    name: str
    type: str
    params: str
    description: str = ""
    aliases: tuple = ()

    def to_spice_model(self) -> SpiceModel:
        return SpiceModel(name=self.name, type=self.type, params=self.params)


BUILTIN_MODELS = [
    LibraryModel("D", "D", "Is=1e-14 N=1", "Generic small-signal diode"),
    LibraryModel(
        "1N4148",
        "D",
        "Is=2.52e-9 Rs=0.568 N=1.752 Cjo=4e-12 M=0.4 tt=20e-9",
        "Fast switching diode",
        ("D1N4148",),
    ),
    LibraryModel(
        "1N4001",
        "D",
        "Is=1e-10 Rs=0.1 N=1.8 Cjo=25e-12 M=0.333 tt=5e-6 BV=50 IBV=5e-6",
        "1A 50V rectifier",
        ("D1N4001",),
    ),
    LibraryModel(
        "1N4007",
        "D",
        "Is=1e-10 Rs=0.1 N=1.8 Cjo=25e-12 M=0.333 tt=5e-6 BV=1000 IBV=5e-6",
        "1A 1000V rectifier",
        ("D1N4007",),
    ),
    LibraryModel(
        "1N5817",
        "D",
        "Is=3.2e-8 Rs=0.042 N=1.05 Cjo=110e-12 M=0.35 tt=10e-9 BV=20 IBV=1e-4",
        "1A Schottky",
        ("D1N5817",),
    ),
    LibraryModel("LED_RED", "D", "Is=1e-20 Rs=2 N=1.5 Cjo=10e-12 M=0.33 tt=10e-9 BV=5", "Red LED"),
    LibraryModel(
        "2N2222",
        "NPN",
        "Is=1e-14 Bf=200 Vaf=100 Ikf=0.3 Ise=0 Ne=1.5 Br=3 Var=0 Ikr=0 Isc=0 Nc=2 Rb=10 Rc=1 "
        "Cjc=8e-12 Cje=25e-12 Tf=0.4e-9 Tr=40e-9",
        "General purpose NPN",
        ("Q2N2222",),
    ),
    LibraryModel(
        "2N3904",
        "NPN",
        "Is=1e-14 Bf=300 Vaf=100 Ikf=0.4 Ise=0 Ne=1.5 Br=4 Var=0 Ikr=0 Isc=0 Nc=2 Rb=10 Rc=1 "
        "Cjc=4e-12 Cje=8e-12 Tf=0.35e-9 Tr=250e-9",
        "Small-signal NPN",
        ("Q2N3904",),
    ),
    LibraryModel(
        "2N3906",
        "PNP",
        "Is=1e-14 Bf=200 Vaf=100 Ikf=0.4 Ise=0 Ne=1.5 Br=4 Var=0 Ikr=0 Isc=0 Nc=2 Rb=10 Rc=1 "
        "Cjc=4.5e-12 Cje=10e-12 Tf=0.5e-9 Tr=350e-9",
        "Small-signal PNP",
        ("Q2N3906",),
    ),
    LibraryModel("NMOS", "NMOS", "Level=1 Vto=0.7 Kp=110u", "Generic level-1 NMOS"),
    LibraryModel("PMOS", "PMOS", "Level=1 Vto=-0.7 Kp=50u", "Generic level-1 PMOS"),
]


def find_model(name: str):
    """Look up a built-in model by name or alias (case-insensitive); None if unknown."""
    if not name:
        return None
    wanted = name.upper()
    for model in BUILTIN_MODELS:
        if model.name.upper() == wanted:
            return model
        if any(alias.upper() == wanted for alias in model.aliases):
            return model
    return None


def models_of_type(model_type: str) -> list[LibraryModel]:
    wanted = model_type.upper()
    return [m for m in BUILTIN_MODELS if m.type == wanted]
