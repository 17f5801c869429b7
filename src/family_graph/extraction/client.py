"""
Extraction collaborator: free text in, candidate records out.

The model behind the service is out of scope; this module owns the wire
contract and its tolerance rules. A malformed answer is zero candidates,
never a partial batch.
"""

from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

import httpx
from pydantic import ValidationError

from family_graph.core.exceptions import ExtractionError
from family_graph.extraction.models import CandidateRecord
from family_graph.logging import get_logger
from family_graph.registry.entities import PersonRegistry

log = get_logger("extraction")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
_LIST_KEYS = ("candidates", "members", "people")


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def _decode_payload(payload: Any) -> Any:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        text = payload.strip()
        if not text:
            return None
        fenced = _FENCE_RE.match(text)
        if fenced:
            text = fenced.group(1)
        return json.loads(text)
    return payload


def parse_candidates(payload: Any) -> List[CandidateRecord]:
    """
    Turn an extraction response into candidate records.

    Accepts a JSON string/bytes (optionally wrapped in a Markdown code fence),
    a list of dicts, or an object holding the list under ``candidates``,
    ``members`` or ``people``. Entries without a usable name are dropped.
    Anything unparsable yields an empty list.
    """
    try:
        data = _decode_payload(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        log.warning("Extraction response is not valid JSON: %s", exc)
        return []

    if data is None:
        return []

    if isinstance(data, dict):
        for key in _LIST_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            data = [data] if "name" in data else []

    if not isinstance(data, list):
        log.warning("Extraction response has unexpected shape: %s", type(data).__name__)
        return []

    records: List[CandidateRecord] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            log.debug("Skipping non-object candidate #%d", i)
            continue
        try:
            records.append(CandidateRecord.model_validate(entry))
        except ValidationError as exc:
            log.debug("Skipping invalid candidate #%d: %s", i, exc.errors()[0].get("msg"))
    return records


def extraction_context(registry: PersonRegistry) -> List[Dict[str, str]]:
    """Name + gender snapshot sent to the collaborator as matching context."""
    return [{"name": p.name, "gender": p.gender} for p in registry]


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

class Extractor(Protocol):
    async def extract(
        self,
        text: str,
        context: Sequence[Dict[str, str]] = (),
    ) -> List[CandidateRecord]:
        ...


class StaticExtractor:
    """Answers every request with a fixed payload (files, tests, replays)."""

    def __init__(self, payload: Any):
        self.payload = payload

    async def extract(
        self,
        text: str,
        context: Sequence[Dict[str, str]] = (),
    ) -> List[CandidateRecord]:
        return parse_candidates(self.payload)


class HttpExtractor:
    """
    Posts ``{"text": ..., "existing": [...]}`` to an extraction endpoint and
    parses the JSON answer.

    Transport and HTTP errors raise ExtractionError; the import pipeline
    turns those into an empty batch.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.api_key = api_key
        self._transport = transport

    @classmethod
    def from_config(cls, cfg, transport: Optional[httpx.AsyncBaseTransport] = None) -> "HttpExtractor":
        section = cfg.extraction
        key_env = section.get("api_key_env")
        return cls(
            section.get("endpoint", "http://localhost:8080/extract"),
            timeout=float(section.get("timeout_seconds", 30)),
            api_key=os.environ.get(key_env) if key_env else None,
            transport=transport,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def extract(
        self,
        text: str,
        context: Iterable[Dict[str, str]] = (),
    ) -> List[CandidateRecord]:
        body = {"text": text, "existing": list(context)}
        log.info("Requesting extraction from %s (%d chars)", self.endpoint, len(text))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=body, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Extraction request failed: {exc}") from exc

        records = parse_candidates(response.content)
        log.info("Extraction returned %d candidate(s)", len(records))
        return records
