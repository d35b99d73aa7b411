from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
import structlog
from pydantic import ValidationError

from labrisk.config import Settings
from labrisk.errors import PubChemError
from labrisk.matching import rank_candidates
from labrisk.models import CandidateMatch, HazardRecord, PropertyRecord
from labrisk.normalizer import (
    BOILING_POINT_KEYWORDS,
    FLASH_POINT_KEYWORDS,
    MELTING_POINT_KEYWORDS,
    find_first_value,
    parse_ghs_classification,
)

log = structlog.get_logger(__name__)

COMPOUND_PAGE = "https://pubchem.ncbi.nlm.nih.gov/compound/{cid}"


class PubChemClient:
    """Name search, property lookup and GHS lookup against PUG REST / PUG View.

    Every failure, including a record that does not fit the models, is raised
    as ``PubChemError``.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.headers = {"User-Agent": settings.user_agent}

    # ---------- HTTP ----------
    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(url, headers=self.headers, timeout=self.settings.http_timeout_s)
        except requests.RequestException as e:
            log.error("pubchem.transport_failed", url=url, error=str(e))
            raise PubChemError("PubChem request failed", detail=str(e)) from e

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise PubChemError("PubChem response was not JSON", status=resp.status_code, detail=resp.text[:500]) from e

    # ---------- Name search ----------
    def search(self, name: str) -> List[CandidateMatch]:
        q = (name or "").strip()
        if not q:
            return []

        base = self.settings.pubchem_base_url
        log.info("pubchem.search", query=q)
        r = self._get(f"{base}/pug/compound/name/{quote(q, safe='')}/cids/JSON")
        if r.status_code == 404:
            # PUGREST.NotFound: no compound for that name
            return []
        if r.status_code != 200:
            raise PubChemError("PubChem name search failed", status=r.status_code, detail=r.text[:500])

        data = self._json(r)
        if not isinstance(data, dict):
            raise PubChemError("Unexpected PubChem name search response", status=r.status_code)
        cids = (data.get("IdentifierList") or {}).get("CID") or []
        top = [int(c) for c in cids if isinstance(c, int)][: self.settings.max_candidates]
        if not top:
            return []

        titles = self._titles(top)
        try:
            matches = [CandidateMatch(identifier=cid, title=titles.get(cid) or f"CID {cid}") for cid in top]
        except ValidationError as e:
            raise PubChemError("Unexpected PubChem name search response", detail=str(e)) from e
        return rank_candidates(q, matches)

    def _titles(self, cids: List[int]) -> Dict[int, str]:
        base = self.settings.pubchem_base_url
        ids = ",".join(str(c) for c in cids)
        try:
            r = self._get(f"{base}/pug/compound/cid/{ids}/property/Title/JSON")
        except PubChemError:
            log.warning("pubchem.titles_unavailable", cids=cids)
            return {}
        if r.status_code != 200:
            log.warning("pubchem.titles_unavailable", cids=cids, status=r.status_code)
            return {}
        try:
            data = r.json()
        except ValueError:
            log.warning("pubchem.titles_unavailable", cids=cids, reason="invalid json")
            return {}

        if not isinstance(data, dict):
            return {}
        props = (data.get("PropertyTable") or {}).get("Properties") or []
        out: Dict[int, str] = {}
        for p in props:
            if isinstance(p, dict) and p.get("CID") and p.get("Title"):
                out[int(p["CID"])] = str(p["Title"])
        return out

    # ---------- PUG View ----------
    def _pug_view(self, cid: int) -> dict:
        url = f"{self.settings.pubchem_base_url}/pug_view/data/compound/{int(cid)}/JSON"
        r = self._get(url)
        if r.status_code != 200:
            raise PubChemError("PubChem PUG View fetch failed", status=r.status_code, detail=r.text[:500])
        data = self._json(r)
        if not isinstance(data, dict) or not isinstance(data.get("Record"), dict):
            raise PubChemError("No Record in PUG View response", status=r.status_code)
        return data

    def fetch_properties(self, cid: int) -> PropertyRecord:
        log.info("pubchem.properties", cid=cid)
        data = self._pug_view(cid)
        try:
            return PropertyRecord(
                identifier=int(cid),
                boiling_point=find_first_value(data, BOILING_POINT_KEYWORDS),
                flash_point=find_first_value(data, FLASH_POINT_KEYWORDS),
                melting_or_freezing_point=find_first_value(data, MELTING_POINT_KEYWORDS),
                source=COMPOUND_PAGE.format(cid=int(cid)),
            )
        except ValidationError as e:
            raise PubChemError("Unexpected PubChem property record", detail=str(e)) from e

    def fetch_hazards(self, cid: int) -> HazardRecord:
        log.info("pubchem.hazards", cid=cid)
        data = self._pug_view(cid)
        signal_word, pictograms, statements = parse_ghs_classification(data)
        try:
            return HazardRecord(
                identifier=int(cid),
                signal_word=signal_word,
                pictograms=pictograms,
                hazard_statements=statements,
                source=COMPOUND_PAGE.format(cid=int(cid)) + "#section=GHS-Classification",
            )
        except ValidationError as e:
            raise PubChemError("Unexpected PubChem GHS record", detail=str(e)) from e
