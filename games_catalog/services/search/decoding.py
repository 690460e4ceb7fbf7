"""Typed decoding of loosely-typed search backend responses.

The backend does not guarantee a fixed JSON representation for numeric
fields, so each field accepts either a string or a number and is normalized
to its semantic type. A field that cannot be decoded is dropped instead of
failing the whole response; a hit without a usable id is skipped.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from games_catalog.models.search import SearchHit
from games_catalog.services.search.queries import TOP_AGGREGATION

logger = logging.getLogger(__name__)


def as_uuid(value: Any) -> UUID | None:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def as_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            number = as_decimal(value)
            if number is not None and number == number.to_integral_value():
                return int(number)
    return None


def as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def decode_hit(raw: Any) -> SearchHit | None:
    """Build a SearchHit from one ``hits.hits[]`` entry."""
    if not isinstance(raw, dict):
        return None
    source = raw.get("_source")
    if not isinstance(source, dict):
        return None

    game_id = as_uuid(source.get("id")) or as_uuid(raw.get("_id"))
    if game_id is None:
        logger.debug("Skipping search hit without a valid id: %s", raw.get("_id"))
        return None

    originals = {
        "title": source.get("title"),
        "description": source.get("description"),
        "price": source.get("price"),
        "genre": source.get("genre"),
        "score": raw.get("_score"),
    }
    fields = {
        "title": as_text(originals["title"]),
        "description": as_text(originals["description"]),
        "price": as_decimal(originals["price"]),
        "genre": as_int(originals["genre"]),
        "score": as_float(originals["score"]),
    }
    dropped = [
        name for name, value in fields.items() if value is None and originals[name] is not None
    ]
    if dropped:
        logger.debug("Dropped undecodable fields %s for game %s", dropped, game_id)
    return SearchHit(id=game_id, **fields)


def decode_hits(payload: Any) -> list[SearchHit]:
    """Decode a ``_search`` response body; structural problems yield ``[]``."""
    if not isinstance(payload, dict):
        return []
    hits = payload.get("hits")
    if not isinstance(hits, dict):
        return []
    inner = hits.get("hits")
    if not isinstance(inner, list):
        return []

    results: list[SearchHit] = []
    for raw in inner:
        hit = decode_hit(raw)
        if hit is not None:
            results.append(hit)
    return results


def decode_buckets(payload: Any) -> list[tuple[UUID, int]]:
    """Decode ``aggregations.top.buckets[]`` into ``(game_id, count)`` pairs."""
    if not isinstance(payload, dict):
        return []
    aggregations = payload.get("aggregations")
    if not isinstance(aggregations, dict):
        return []
    top = aggregations.get(TOP_AGGREGATION)
    if not isinstance(top, dict):
        return []
    buckets = top.get("buckets")
    if not isinstance(buckets, list):
        return []

    results: list[tuple[UUID, int]] = []
    for bucket in buckets:
        if not isinstance(bucket, dict):
            continue
        game_id = as_uuid(bucket.get("key"))
        count = as_int(bucket.get("doc_count"))
        if game_id is None or count is None:
            continue
        results.append((game_id, count))
    results.sort(key=lambda pair: pair[1], reverse=True)
    return results
