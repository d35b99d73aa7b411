from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

UnitSystem = Literal["metric", "imperial"]


class ResolutionStatus(str, Enum):
    UNRESOLVED = "Unresolved"
    SEARCHED = "Searched"
    SELECTED = "Selected"
    CONFIRMED = "Confirmed"


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    chemicals: List[str] = Field(default_factory=list)
    operations: List[str] = Field(default_factory=list)


class CandidateMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: int
    title: str


class ChemicalResolutionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    searched: bool = False
    candidates: List[CandidateMatch] = Field(default_factory=list)
    tentative_identifier: Optional[int] = None
    confirmed_identifier: Optional[int] = None
    last_error: Optional[str] = None

    @property
    def status(self) -> ResolutionStatus:
        if self.confirmed_identifier is not None:
            return ResolutionStatus.CONFIRMED
        if self.tentative_identifier is not None:
            return ResolutionStatus.SELECTED
        if self.searched:
            return ResolutionStatus.SEARCHED
        return ResolutionStatus.UNRESOLVED

    def has_candidate(self, identifier: int) -> bool:
        return any(c.identifier == identifier for c in self.candidates)

    def title_for(self, identifier: Optional[int]) -> Optional[str]:
        for c in self.candidates:
            if c.identifier == identifier:
                return c.title
        return None


class PropertyRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: int
    boiling_point: Optional[str] = None
    flash_point: Optional[str] = None
    melting_or_freezing_point: Optional[str] = None
    source: str


class HazardRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: int
    signal_word: Optional[str] = None
    # ordered, duplicates removed on construction by the parser
    pictograms: List[str] = Field(default_factory=list)
    hazard_statements: List[str] = Field(default_factory=list)
    source: str


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    procedure: str = ""
    extraction: Optional[ExtractionResult] = None
    chemicals: Dict[str, ChemicalResolutionState] = Field(default_factory=dict)
    properties: Dict[str, PropertyRecord] = Field(default_factory=dict)
    hazards: Dict[str, HazardRecord] = Field(default_factory=dict)
    unit_system: UnitSystem = "metric"


@dataclass
class BulkFetchReport:
    state: AppState
    fetched: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures
