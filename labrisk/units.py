import re
from typing import Any

from labrisk.models import UnitSystem

PLACEHOLDER = "—"

_NUMBER = r"[-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?"

# A reading starts after a non-digit, so "173-176 °F" is a range, not 173 and -176.
FAHRENHEIT_RE = re.compile(
    rf"(?<![\d.,])({_NUMBER})(?:(\s*(?:-|\u2013|to)\s*)({_NUMBER}))?\s*°?\s*F\b",
    re.IGNORECASE,
)


def f_to_c(f: float) -> float:
    return (f - 32) * 5 / 9


def format_c(c: float) -> str:
    return f"{c:.1f} °C"


def _to_c(number: str) -> float:
    return f_to_c(float(number.replace(",", "")))


def convert_temperature(text: str, unit_system: UnitSystem) -> str:
    """Rewrite the first Fahrenheit reading (or range) in ``text`` as Celsius for metric display."""
    if unit_system != "metric":
        return text
    m = FAHRENHEIT_RE.search(text)
    if not m:
        return text
    low, sep, high = m.group(1), m.group(2), m.group(3)
    if high is None:
        converted = format_c(_to_c(low))
    else:
        converted = f"{_to_c(low):.1f}{sep}{format_c(_to_c(high))}"
    return text[: m.start()] + converted + text[m.end():]


def display_temperature(value: Any, unit_system: UnitSystem) -> str:
    if not isinstance(value, str) or not value.strip():
        return PLACEHOLDER
    return convert_temperature(value, unit_system)
