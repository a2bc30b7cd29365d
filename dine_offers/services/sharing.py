from __future__ import annotations

"""Shareable-link encoding for card selections."""
from typing import Iterable, List, Optional
from urllib.parse import quote, unquote

QUERY_PARAM = "cards"


def encode_selection(card_ids: Iterable[str]) -> str:
    return ",".join(quote(card_id, safe="") for card_id in card_ids)


def decode_selection(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [unquote(token) for token in value.split(",")]


def build_query(card_ids: Iterable[str]) -> str:
    encoded = encode_selection(card_ids)
    return f"{QUERY_PARAM}={encoded}" if encoded else ""


def cards_from_query(query: str) -> List[str]:
    # parse_qs would percent-decode the whole value before we split on commas
    for pair in query.lstrip("?").split("&"):
        name, _, value = pair.partition("=")
        if unquote(name) == QUERY_PARAM:
            return decode_selection(value)
    return []
