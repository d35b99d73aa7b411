"""
Per-chemical identifier resolution and the application state around it.

Every transition takes an ``AppState`` and returns a new one; nothing is
mutated in place, so the Streamlit page can keep the previous state when an
action fails. Property and hazard lookups are only issued for a confirmed
identifier, and only records for the current confirmed identifier are stored.
"""

import time
from typing import Callable, List, Protocol

import structlog

from labrisk.errors import LabRiskError, PreconditionError
from labrisk.extraction import validate_procedure, MIN_PROCEDURE_LENGTH
from labrisk.models import (
    AppState,
    BulkFetchReport,
    CandidateMatch,
    ChemicalResolutionState,
    ExtractionResult,
    HazardRecord,
    PropertyRecord,
    ResolutionStatus,
    UnitSystem,
)

log = structlog.get_logger(__name__)


class Extractor(Protocol):
    def extract(self, procedure: str) -> ExtractionResult: ...


class CandidateSearcher(Protocol):
    def search(self, name: str) -> List[CandidateMatch]: ...


class ChemicalDataSource(Protocol):
    def fetch_properties(self, cid: int) -> PropertyRecord: ...

    def fetch_hazards(self, cid: int) -> HazardRecord: ...


# ---------- Pure transitions ----------
def _chem(state: AppState, name: str) -> ChemicalResolutionState:
    chem = state.chemicals.get(name)
    if chem is None:
        raise PreconditionError(f"Unknown chemical: {name!r}. Analyse the procedure first.")
    return chem


def _with_chem(state: AppState, chem: ChemicalResolutionState) -> AppState:
    return state.model_copy(update={"chemicals": {**state.chemicals, chem.name: chem}})


def _without(mapping: dict, key: str) -> dict:
    return {k: v for k, v in mapping.items() if k != key}


def start_analysis(state: AppState, procedure: str, extraction: ExtractionResult) -> AppState:
    chemicals = {name: ChemicalResolutionState(name=name) for name in extraction.chemicals}
    return AppState(
        procedure=procedure,
        extraction=extraction,
        chemicals=chemicals,
        unit_system=state.unit_system,
    )


def apply_search_results(state: AppState, name: str, candidates: List[CandidateMatch]) -> AppState:
    chem = _chem(state, name)
    updated = chem.model_copy(update={
        "searched": True,
        "candidates": list(candidates),
        "tentative_identifier": candidates[0].identifier if candidates else None,
        "last_error": None,
    })
    return _with_chem(state, updated)


def record_search_failure(state: AppState, name: str, message: str) -> AppState:
    chem = _chem(state, name)
    return _with_chem(state, chem.model_copy(update={"last_error": message}))


def select_candidate(state: AppState, name: str, identifier: int) -> AppState:
    chem = _chem(state, name)
    if chem.status == ResolutionStatus.UNRESOLVED:
        raise PreconditionError(f"Search PubChem for {name!r} before selecting a match.")
    if not chem.has_candidate(identifier):
        raise PreconditionError(f"CID {identifier} is not one of the matches found for {name!r}.")
    return _with_chem(state, chem.model_copy(update={"tentative_identifier": identifier}))


def confirm(state: AppState, name: str) -> AppState:
    chem = _chem(state, name)
    if chem.tentative_identifier is None:
        raise PreconditionError(f"Select a PubChem match for {name!r} before confirming.")
    if chem.confirmed_identifier == chem.tentative_identifier:
        return state

    new_state = _with_chem(state, chem.model_copy(update={"confirmed_identifier": chem.tentative_identifier}))
    if chem.confirmed_identifier is not None:
        # records fetched for the previous CID no longer describe this chemical
        new_state = new_state.model_copy(update={
            "properties": _without(new_state.properties, name),
            "hazards": _without(new_state.hazards, name),
        })
    log.info("workflow.confirmed", chemical=name, cid=chem.tentative_identifier,
             previous=chem.confirmed_identifier)
    return new_state


def _require_confirmed(state: AppState, name: str) -> int:
    chem = _chem(state, name)
    if chem.confirmed_identifier is None:
        raise PreconditionError(f"Confirm a PubChem CID for {name!r} before fetching data.")
    return chem.confirmed_identifier


def _check_record_identifier(state: AppState, name: str, identifier: int) -> None:
    cid = _require_confirmed(state, name)
    if identifier != cid:
        raise PreconditionError(
            f"Data for CID {identifier} does not match the confirmed CID {cid} for {name!r}."
        )


def record_properties(state: AppState, name: str, record: PropertyRecord) -> AppState:
    _check_record_identifier(state, name, record.identifier)
    return state.model_copy(update={"properties": {**state.properties, name: record}})


def record_hazards(state: AppState, name: str, record: HazardRecord) -> AppState:
    _check_record_identifier(state, name, record.identifier)
    return state.model_copy(update={"hazards": {**state.hazards, name: record}})


def set_unit_system(state: AppState, unit_system: UnitSystem) -> AppState:
    return state.model_copy(update={"unit_system": unit_system})


def confirmed_chemicals(state: AppState) -> List[str]:
    return [name for name, chem in state.chemicals.items() if chem.confirmed_identifier is not None]


# ---------- Actions that call external services ----------
def analyze(state: AppState, procedure: str, extractor: Extractor,
            min_length: int = MIN_PROCEDURE_LENGTH) -> AppState:
    text = validate_procedure(procedure, min_length)
    extraction = extractor.extract(text)
    return start_analysis(state, text, extraction)


def search(state: AppState, name: str, searcher: CandidateSearcher) -> AppState:
    """Run a name search; a failure is kept on the chemical as ``last_error``."""
    _chem(state, name)
    try:
        candidates = searcher.search(name)
    except LabRiskError as e:
        log.warning("workflow.search_failed", chemical=name, error=str(e))
        return record_search_failure(state, name, str(e))
    return apply_search_results(state, name, candidates)


def fetch_properties(state: AppState, name: str, source: ChemicalDataSource) -> AppState:
    cid = _require_confirmed(state, name)
    return record_properties(state, name, source.fetch_properties(cid))


def fetch_hazards(state: AppState, name: str, source: ChemicalDataSource) -> AppState:
    cid = _require_confirmed(state, name)
    return record_hazards(state, name, source.fetch_hazards(cid))


def fetch_all_confirmed(state: AppState, source: ChemicalDataSource, delay_s: float = 0.0,
                        sleep: Callable[[float], None] = time.sleep) -> BulkFetchReport:
    """Fetch properties and hazards for every confirmed chemical, one call at a time.

    Data sources report failures as ``LabRiskError``; those are isolated per
    chemical and the records already gathered are kept.
    """
    names = confirmed_chemicals(state)
    if not names:
        raise PreconditionError("No confirmed chemicals: confirm at least one PubChem CID first.")

    report = BulkFetchReport(state=state)
    first_call = True
    for name in names:
        try:
            for fetch in (fetch_properties, fetch_hazards):
                if not first_call and delay_s > 0:
                    sleep(delay_s)
                first_call = False
                report.state = fetch(report.state, name, source)
        except LabRiskError as e:
            log.warning("workflow.bulk_fetch_failed", chemical=name, error=str(e))
            report.failures[name] = str(e)
            continue
        report.fetched.append(name)
    return report
