import re
from typing import List, Sequence

from rapidfuzz import fuzz

from labrisk.models import CandidateMatch

EXACT_SCORE = 100
COMPACT_SCORE = 90
PREFIX_SCORE = 70
SUBSTRING_SCORE = 50
DEFAULT_SCORE = 10


def normalize_name(s: str) -> str:
    return re.sub(r"\s+", " ", (s or "").strip().lower())


def similarity_score(query: str, title: str) -> int:
    q = normalize_name(query)
    t = normalize_name(title)
    if not q or not t:
        return DEFAULT_SCORE
    if q == t:
        return EXACT_SCORE
    if q.replace(" ", "") == t.replace(" ", ""):
        return COMPACT_SCORE
    if t.startswith(q):
        return PREFIX_SCORE
    if q in t:
        return SUBSTRING_SCORE
    return DEFAULT_SCORE


def rank_candidates(query: str, candidates: Sequence[CandidateMatch]) -> List[CandidateMatch]:
    """Best title match first; ties keep PubChem's order after a fuzzy tie-break."""
    q = normalize_name(query)
    indexed = list(enumerate(candidates))
    indexed.sort(key=lambda pair: (
        -similarity_score(query, pair[1].title),
        -fuzz.ratio(q, normalize_name(pair[1].title)),
        pair[0],
    ))
    return [c for _, c in indexed]
