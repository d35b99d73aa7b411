import csv
import io
import re
from typing import Dict, List

from labrisk.models import AppState
from labrisk.operations import operation_hazards
from labrisk.units import PLACEHOLDER, display_temperature

COLUMNS = [
    "Chemical",
    "PubChem match",
    "CID",
    "Signal word",
    "Pictograms",
    "Hazard statements",
    "Boiling point",
    "Flash point",
    "Melting/freezing point",
    "Sources",
]

DISCLAIMER = ("Draft only. Extracted and fetched data may be incomplete or wrong; "
              "verify against the supplier SDS and have the assessment reviewed by EHS.")

MARKDOWN_SPECIAL_RE = re.compile(r"([\\`*_{}\[\]<>()#+\-.!|~])")


def draft_rows(state: AppState, max_statements: int = 6) -> List[Dict[str, str]]:
    """One row per extracted chemical; unfetched cells show the placeholder."""
    rows: List[Dict[str, str]] = []
    for name, chem in state.chemicals.items():
        props = state.properties.get(name)
        ghs = state.hazards.get(name)
        cid = chem.confirmed_identifier
        sources = [r.source for r in (props, ghs) if r is not None]
        statements = ghs.hazard_statements[:max_statements] if ghs else []
        rows.append({
            "Chemical": name,
            "PubChem match": chem.title_for(cid) or PLACEHOLDER,
            "CID": str(cid) if cid is not None else PLACEHOLDER,
            "Signal word": (ghs.signal_word if ghs else None) or PLACEHOLDER,
            "Pictograms": ", ".join(ghs.pictograms) if ghs and ghs.pictograms else PLACEHOLDER,
            "Hazard statements": "; ".join(statements) or PLACEHOLDER,
            "Boiling point": display_temperature(props.boiling_point if props else None, state.unit_system),
            "Flash point": display_temperature(props.flash_point if props else None, state.unit_system),
            "Melting/freezing point": display_temperature(
                props.melting_or_freezing_point if props else None, state.unit_system),
            "Sources": " ".join(dict.fromkeys(sources)) or PLACEHOLDER,
        })
    return rows


def draft_csv(state: AppState) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=COLUMNS)
    writer.writeheader()
    writer.writerows(draft_rows(state))
    return buf.getvalue()


def escape_markdown(s: str) -> str:
    """Backslash-escape Markdown metacharacters so text renders literally."""
    return MARKDOWN_SPECIAL_RE.sub(r"\\\1", s)


def _md_cell(s: str) -> str:
    return s.replace("|", "\\|").replace("\n", " ")


def draft_markdown(state: AppState) -> str:
    md = ["# Risk Assessment Draft", f"\n**NOTE:** {DISCLAIMER}"]

    rows = draft_rows(state)
    if rows:
        md.append("\n## Chemicals")
        md.append("| " + " | ".join(COLUMNS) + " |")
        md.append("|" + "---|" * len(COLUMNS))
        for row in rows:
            md.append("| " + " | ".join(_md_cell(row[c]) for c in COLUMNS) + " |")

    ops = state.extraction.operations if state.extraction else []
    if ops:
        md.append("\n## Operations")
        md.extend(f"- {op}" for op in ops)
        hazards = operation_hazards(ops)
        if hazards:
            md.append("\n## Operation hazards (generic)")
            md.extend(f"- {h}" for h in hazards)

    return "\n".join(md)
