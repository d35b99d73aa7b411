from typing import Iterable, List, Tuple

# ---------- Operation cues -> generic hazard warnings ----------
OPERATION_RULES: List[Tuple[Tuple[str, ...], Tuple[str, ...]]] = [
    (("reflux", "heat"), (
        "Burn hazard from hot surfaces",
        "Flammable vapour ignition risk",
    )),
    (("quench", "dropwise"), (
        "Exothermic reaction / splashing risk",
        "Gas evolution during addition or quench",
    )),
    (("distill", "rotavap"), (
        "Vacuum / glassware implosion risk",
    )),
    (("extract", "separatory"), (
        "Pressure build-up in separatory funnel",
        "Solvent vapour exposure during extraction",
    )),
    (("chromatograph", "column", "silica"), (
        "Solvent vapour exposure from chromatography eluents",
        "Silica dust inhalation risk",
    )),
    (("filter",), (
        "Glassware breakage risk during filtration",
    )),
]


def operation_hazards(operations: Iterable[str]) -> List[str]:
    hazards: List[str] = []
    seen = set()
    for op in operations:
        if not isinstance(op, str):
            continue
        low = op.lower()
        for cues, warnings in OPERATION_RULES:
            if not any(c in low for c in cues):
                continue
            for w in warnings:
                if w not in seen:
                    seen.add(w)
                    hazards.append(w)
    return hazards
