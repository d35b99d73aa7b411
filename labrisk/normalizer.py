"""
Best-effort readers for PubChem PUG View records.

A PUG View record is a tree of sections::

    {"Record": {"Section": [{"TOCHeading": "...", "Section": [...],
                             "Information": [{"Name": "...", "Value": {...}}]}]}}

The keys of that declared shape are followed first; any other dict or list
value is searched afterwards, so sections under unexpected wrappers are still
found. Malformed nodes (wrong types, missing keys) are skipped rather than
raised on, and an absent value is always returned as ``None``.
"""

import re
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from labrisk.pictograms import classify_pictogram

HEADING_KEYS = ("TOCHeading", "Heading")
SECTION_KEYS = ("Record", "Section")
# holds values, never sections
VALUE_KEYS = ("Information",)

BOILING_POINT_KEYWORDS = ["boiling point", "normal boiling point"]
FLASH_POINT_KEYWORDS = ["flash point"]
MELTING_POINT_KEYWORDS = ["melting point", "freezing point"]

GHS_SECTION_HEADING = "GHS Classification"
H_STATEMENT_RE = re.compile(r"H\d{3}", re.IGNORECASE)


# ---------- Traversal ----------
def _heading(node: dict) -> Optional[str]:
    for key in HEADING_KEYS:
        h = node.get(key)
        if isinstance(h, str):
            return h
    return None


def iter_sections(record: Any) -> Iterator[dict]:
    """Yield section nodes depth-first; ``Record``/``Section`` before other keys."""
    if isinstance(record, list):
        for item in record:
            yield from iter_sections(item)
        return
    if not isinstance(record, dict):
        return
    if _heading(record) is not None:
        yield record
    for key in SECTION_KEYS:
        child = record.get(key)
        if isinstance(child, (dict, list)):
            yield from iter_sections(child)
    for key, child in record.items():
        if key in SECTION_KEYS or key in VALUE_KEYS:
            continue
        if isinstance(child, (dict, list)):
            yield from iter_sections(child)


def _information(node: dict) -> List[dict]:
    info = node.get("Information")
    if not isinstance(info, list):
        return []
    return [i for i in info if isinstance(i, dict)]


# ---------- Scalar values ----------
def _clean(s: Any) -> Optional[str]:
    if isinstance(s, str) and s.strip():
        return s.strip()
    return None


def _format_number(n: Any) -> Optional[str]:
    if isinstance(n, bool) or not isinstance(n, (int, float)):
        return None
    return str(n)


def extract_value(value: Any) -> Optional[str]:
    """First usable scalar in an Information ``Value``.

    Priority: StringWithMarkup entries, then a plain String, then Number
    (scalar or list, with the Unit appended when given).
    """
    if not isinstance(value, dict):
        return None

    swm = value.get("StringWithMarkup")
    if isinstance(swm, list):
        for entry in swm:
            if isinstance(entry, dict):
                s = _clean(entry.get("String"))
                if s:
                    return s

    s = _clean(value.get("String"))
    if s:
        return s

    number = value.get("Number")
    if isinstance(number, list):
        number = next((n for n in number if _format_number(n) is not None), None)
    text = _format_number(number)
    if text is None:
        return None
    unit = _clean(value.get("Unit"))
    return f"{text} {unit}" if unit else text


def first_information_value(info: Iterable[dict]) -> Optional[str]:
    for item in info:
        found = extract_value(item.get("Value"))
        if found:
            return found
    return None


def find_first_value(record: Any, keywords: Sequence[str]) -> Optional[str]:
    kws = [k.lower() for k in keywords if k]
    if not kws:
        return None
    for node in iter_sections(record):
        h = (_heading(node) or "").lower()
        if any(k in h for k in kws):
            found = first_information_value(_information(node))
            if found:
                return found
    return None


def find_section(record: Any, heading: str) -> Optional[dict]:
    target = heading.strip().lower()
    for node in iter_sections(record):
        if (_heading(node) or "").strip().lower() == target:
            return node
    return None


# ---------- Strings & URLs ----------
def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if it and it not in seen:
            seen.add(it)
            out.append(it)
    return out


def _markup_urls(markup: Any) -> List[str]:
    urls: List[str] = []
    if not isinstance(markup, list):
        return urls
    for m in markup:
        if not isinstance(m, dict):
            continue
        for key in ("URL", "Href"):
            u = _clean(m.get(key))
            if u:
                urls.append(u)
    return urls


def collect_strings_and_urls(value: Any) -> Tuple[List[str], List[str]]:
    strings: List[str] = []
    urls: List[str] = []
    if not isinstance(value, dict):
        return strings, urls

    s = _clean(value.get("String"))
    if s:
        strings.append(s)

    swm = value.get("StringWithMarkup")
    if isinstance(swm, list):
        for entry in swm:
            if not isinstance(entry, dict):
                continue
            s = _clean(entry.get("String"))
            if s:
                strings.append(s)
            urls.extend(_markup_urls(entry.get("Markup")))

    urls.extend(_markup_urls(value.get("Markup")))
    return _dedupe(strings), _dedupe(urls)


# ---------- GHS classification ----------
def parse_ghs_classification(record: Any) -> Tuple[Optional[str], List[str], List[str]]:
    """Signal word, pictograms and hazard statements of the GHS section."""
    section = find_section(record, GHS_SECTION_HEADING)
    if section is None:
        return None, [], []

    signal_word: Optional[str] = None
    pictograms: List[str] = []
    statements: List[str] = []

    for item in _information(section):
        name = str(item.get("Name") or "").lower()
        strings, urls = collect_strings_and_urls(item.get("Value"))

        if "signal" in name and signal_word is None and strings:
            signal_word = strings[0]

        if "hazard statement" in name:
            statements.extend(s for s in strings if H_STATEMENT_RE.search(s))

        candidates = urls
        if "pictogram" in name:
            candidates = strings + urls
        for c in candidates:
            p = classify_pictogram(c)
            if p:
                pictograms.append(p)

    return signal_word, _dedupe(pictograms), _dedupe(statements)
