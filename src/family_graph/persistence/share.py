"""
Share-link codec.

A shared view is a read-only copy of the person list, carried in a URL as
URL-safe base64 of its compact JSON. Identifiers and references round-trip
exactly.
"""

from __future__ import annotations

import base64
import binascii
import json
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from family_graph.core.exceptions import ShareDecodeError
from family_graph.registry.entities import PersonRegistry

SHARE_PARAM = "tree"


def encode_share(registry: PersonRegistry) -> str:
    payload = json.dumps(registry.to_list(), separators=(",", ":"), ensure_ascii=False)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_share(token: str) -> PersonRegistry:
    text = (token or "").strip()
    if not text:
        raise ShareDecodeError("Empty share token")
    padded = text + "=" * (-len(text) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        records = json.loads(raw.decode("utf-8"))
        if not isinstance(records, list):
            raise ValueError("share payload is not a list")
        return PersonRegistry.from_list(records)
    except (binascii.Error, UnicodeError, ValueError, TypeError) as exc:
        raise ShareDecodeError(f"Invalid share token: {exc}") from exc


def build_share_link(base_url: str, registry: PersonRegistry) -> str:
    """``base_url`` with ``?tree=<token>`` set (other query params kept)."""
    parts = urlsplit(base_url)
    query = {k: v[-1] for k, v in parse_qs(parts.query).items()}
    query[SHARE_PARAM] = encode_share(registry)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def token_from_link(url: str) -> str:
    values = parse_qs(urlsplit(url).query).get(SHARE_PARAM)
    if not values:
        raise ShareDecodeError(f"No '{SHARE_PARAM}' parameter in link")
    return values[-1]
