import json
from typing import Any, Iterable, List, Optional

import httpx
import structlog

from labrisk.config import Settings
from labrisk.errors import ExtractionError, InputValidationError
from labrisk.models import ExtractionResult

log = structlog.get_logger(__name__)

MIN_PROCEDURE_LENGTH = 20

# ---------- AI extraction (OpenAI-compatible chat completions) ----------
EXTRACTION_SYSTEM_PROMPT = """You extract chemicals and lab operations from chemistry procedures.
Do NOT assess risk. Do NOT suggest PPE or controls.
Return STRICT JSON that follows this schema:
{
  "chemicals": [{"name": "string", "amount": "string|null", "unit": "string|null",
                 "concentration": "string|null", "notes": "string|null"}],
  "operations": [{"type": "string (e.g. reflux, quench, extract, filter)", "detail": "string|null"}]
}
Rules:
- One entry per distinct chemical, named as written in the procedure (fix obvious typos only).
- Operations in the order they occur.
- If nothing is found return empty lists (not null).
- DO NOT add commentary. Output ONLY the JSON object.
"""


def validate_procedure(procedure: str, min_length: int = MIN_PROCEDURE_LENGTH) -> str:
    text = (procedure or "").strip()
    if len(text) < min_length:
        raise InputValidationError(
            f"Procedure text too short: paste at least {min_length} characters."
        )
    return text


def _dedupe_keep_order(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if it and it not in seen:
            seen.add(it)
            out.append(it)
    return out


def _chemical_name(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        return str(item.get("name") or "").strip()
    return ""


def _operation_text(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        t = str(item.get("type") or "").strip()
        d = str(item.get("detail") or "").strip()
        if t and d:
            return f"{t} - {d}"
        return t or d
    return ""


def parse_extraction_payload(obj: Any) -> ExtractionResult:
    if not isinstance(obj, dict):
        raise ExtractionError("Model output was not a JSON object", detail=str(obj)[:500])
    missing = [k for k in ("chemicals", "operations") if k not in obj]
    if missing:
        raise ExtractionError(
            "Model output is missing expected fields: " + ", ".join(missing),
            detail=json.dumps(obj)[:500],
        )
    chemicals = obj.get("chemicals") or []
    operations = obj.get("operations") or []
    if not isinstance(chemicals, list) or not isinstance(operations, list):
        raise ExtractionError("Model output fields must be lists", detail=json.dumps(obj)[:500])
    return ExtractionResult(
        chemicals=_dedupe_keep_order(_chemical_name(c) for c in chemicals),
        operations=_dedupe_keep_order(_operation_text(o) for o in operations),
    )


def _message_content(data: Any) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) and content.strip() else None


class ProcedureExtractor:
    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self._client = client

    def _post(self, url: str, headers: dict, payload: dict) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, headers=headers, json=payload)
        with httpx.Client(timeout=self.settings.llm_timeout_s) as client:
            return client.post(url, headers=headers, json=payload)

    def extract(self, procedure: str) -> ExtractionResult:
        text = validate_procedure(procedure, self.settings.min_procedure_length)
        if not self.settings.llm_api_key:
            raise ExtractionError(
                "LLM not configured. Add LLM_API_KEY (and optionally LLM_BASE_URL, LLM_MODEL) to secrets or .env."
            )

        headers = {
            "Authorization": f"Bearer {self.settings.llm_api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.settings.llm_model,
            "messages": [
                {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": "Extract chemicals and lab operations from the following procedure. "
                               f'Return JSON only.\n\nProcedure:\n"""{text}"""',
                },
            ],
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
        }
        url = f"{self.settings.llm_base_url}/chat/completions"

        log.info("extraction.request", model=self.settings.llm_model, chars=len(text))
        try:
            resp = self._post(url, headers, payload)
        except httpx.HTTPError as e:
            log.error("extraction.transport_failed", error=str(e))
            raise ExtractionError("LLM request failed", detail=str(e)) from e

        if resp.status_code >= 400:
            log.error("extraction.http_error", status=resp.status_code)
            raise ExtractionError("LLM request failed", status=resp.status_code, detail=resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise ExtractionError("LLM response was not JSON", status=resp.status_code, detail=resp.text) from e

        content = _message_content(data)
        if content is None:
            raise ExtractionError("No output text found in model response", detail=json.dumps(data)[:500])

        try:
            obj = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExtractionError("Model output was not valid JSON", detail=content) from e

        result = parse_extraction_payload(obj)
        log.info("extraction.done", chemicals=len(result.chemicals), operations=len(result.operations))
        return result
