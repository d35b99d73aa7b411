from typing import Any, Dict, List, Optional, Tuple

PICTOGRAMS: Tuple[str, ...] = (
    "exploding_bomb",
    "flame",
    "oxidizer",
    "gas_cylinder",
    "corrosion",
    "skull",
    "exclamation",
    "health_hazard",
    "environment",
)

# Order matters: "flame over circle" must win over "flame".
PHRASE_RULES: List[Tuple[str, str]] = [
    ("flame over circle", "oxidizer"),
    ("oxidizer", "oxidizer"),
    ("exploding bomb", "exploding_bomb"),
    ("gas cylinder", "gas_cylinder"),
    ("corrosion", "corrosion"),
    ("environment", "environment"),
    ("exclamation", "exclamation"),
    ("health hazard", "health_hazard"),
    ("skull", "skull"),
    ("flame", "flame"),
]

CODE_RULES: List[Tuple[str, str]] = [
    ("ghs01", "exploding_bomb"),
    ("ghs02", "flame"),
    ("ghs03", "oxidizer"),
    ("ghs04", "gas_cylinder"),
    ("ghs05", "corrosion"),
    ("ghs06", "skull"),
    ("ghs07", "exclamation"),
    ("ghs08", "health_hazard"),
    ("ghs09", "environment"),
]

PICTO_LABEL: Dict[str, str] = {
    "flame": "FLAME",
    "skull": "TOX",
    "health_hazard": "HEALTH",
    "exclamation": "IRRIT",
    "environment": "ENV",
    "corrosion": "CORR",
    "gas_cylinder": "GAS",
    "exploding_bomb": "BOMB",
    "oxidizer": "OX",
}

PICTO_TITLE: Dict[str, str] = {
    "flame": "Flame (GHS02)",
    "skull": "Skull and crossbones (GHS06)",
    "health_hazard": "Health hazard (GHS08)",
    "exclamation": "Exclamation mark (GHS07)",
    "environment": "Environment (GHS09)",
    "corrosion": "Corrosion (GHS05)",
    "gas_cylinder": "Gas cylinder (GHS04)",
    "exploding_bomb": "Exploding bomb (GHS01)",
    "oxidizer": "Flame over circle (GHS03)",
}


def classify_pictogram(raw: Any) -> Optional[str]:
    """Canonical pictogram name for a label, GHS code or icon URL, else None.

    Descriptive phrases are tested before GHS codes.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    s = raw.lower()
    for phrase, name in PHRASE_RULES:
        if phrase in s:
            return name
    for code, name in CODE_RULES:
        if code in s:
            return name
    return None


def pictogram_label(name: str) -> str:
    return PICTO_LABEL.get(name, name.upper())


def pictogram_svg(name: str, size: int = 56) -> str:
    # diamond placeholder, not the official UNECE artwork
    label = pictogram_label(name)
    title = PICTO_TITLE.get(name, name)
    return (
        f'<svg width="{size}" height="{size}" viewBox="0 0 56 56" xmlns="http://www.w3.org/2000/svg" '
        f'role="img" aria-label="{title}">'
        '<rect x="12" y="12" width="32" height="32" transform="rotate(45 28 28)" '
        'fill="white" stroke="#e11d48" stroke-width="3"/>'
        '<text x="28" y="33" text-anchor="middle" font-size="10" font-family="Arial" '
        f'font-weight="700" fill="#0f172a">{label}</text>'
        "</svg>"
    )
