"""Shared test fixtures."""

from typing import List, Optional

import pytest

from labrisk.config import Settings
from labrisk.models import CandidateMatch, ExtractionResult
from tests.mocks import FakePubChem


def _info(name: str, *strings: str, urls: Optional[List[str]] = None) -> dict:
    swm = [{"String": s} for s in strings]
    if urls:
        swm.append({"String": "", "Markup": [{"URL": u, "Type": "Icon"} for u in urls]})
    return {"Name": name, "Value": {"StringWithMarkup": swm}}


@pytest.fixture
def ethanol_record() -> dict:
    """Trimmed PUG View record shaped like PubChem's CID 702."""
    return {
        "Record": {
            "RecordType": "CID",
            "RecordNumber": 702,
            "RecordTitle": "Ethanol",
            "Section": [
                {
                    "TOCHeading": "Chemical and Physical Properties",
                    "Section": [
                        {
                            "TOCHeading": "Experimental Properties",
                            "Section": [
                                {
                                    "TOCHeading": "Boiling Point",
                                    "Information": [
                                        {"Value": {"StringWithMarkup": [{"String": "  "}]}},
                                        {"Value": {"StringWithMarkup": [{"String": "173.1 °F at 760 mmHg"}]}},
                                        {"Value": {"Number": [78.2], "Unit": "°C"}},
                                    ],
                                },
                                {
                                    "TOCHeading": "Melting Point",
                                    "Information": [{"Value": {"Number": [-114.1], "Unit": "°C"}}],
                                },
                                {
                                    "TOCHeading": "Flash Point",
                                    "Information": [{"Value": {"String": "55 °F (closed cup)"}}],
                                },
                            ],
                        }
                    ],
                },
                {
                    "TOCHeading": "Safety and Hazards",
                    "Section": [
                        {
                            "TOCHeading": "Hazards Identification",
                            "Section": [
                                {
                                    "TOCHeading": "GHS Classification",
                                    "Information": [
                                        _info("Pictogram(s)", "Flammable", "Irritant", urls=[
                                            "https://pubchem.ncbi.nlm.nih.gov/images/ghs/GHS02.svg",
                                            "https://pubchem.ncbi.nlm.nih.gov/images/ghs/GHS07.svg",
                                        ]),
                                        _info("Signal", "Danger"),
                                        _info(
                                            "GHS Hazard Statements",
                                            "H225 (99.9%): Highly Flammable liquid and vapor [Danger Flammable liquids]",
                                            "H319 (83.2%): Causes serious eye irritation [Warning Serious eye damage/eye irritation]",
                                            "H225 (99.9%): Highly Flammable liquid and vapor [Danger Flammable liquids]",
                                            "Reported as not meeting GHS hazard criteria by 0.1% of companies.",
                                        ),
                                        _info("Precautionary Statement Codes", "P210, P233, P240, and P241"),
                                    ],
                                }
                            ],
                        }
                    ],
                },
            ],
        }
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_api_key="sk-test",
        llm_base_url="https://llm.example.test/v1",
        pubchem_base_url="https://pubchem.example.test/rest",
        max_candidates=5,
    )


@pytest.fixture
def extraction() -> ExtractionResult:
    return ExtractionResult(
        chemicals=["ethanol", "sodium hydroxide", "benzaldehyde"],
        operations=["reflux - 2 h", "quench - dropwise HCl", "filter"],
    )


@pytest.fixture
def fake_pubchem() -> FakePubChem:
    return FakePubChem({
        "ethanol": [CandidateMatch(identifier=702, title="Ethanol"),
                    CandidateMatch(identifier=6432220, title="Ethanol-d6")],
        "sodium hydroxide": [CandidateMatch(identifier=14798, title="Sodium Hydroxide")],
        "benzaldehyde": [CandidateMatch(identifier=240, title="Benzaldehyde")],
    })
