"""Builders for the Elasticsearch query DSL bodies sent by the gateway."""

from __future__ import annotations

from typing import Any

TEXT_FIELDS = ["title^3", "description"]

GAMES_MAPPING: dict[str, dict[str, str]] = {
    "title": {"type": "text"},
    "description": {"type": "text"},
    "price": {"type": "double"},
    "genre": {"type": "integer"},
}

SEARCH_HITS_MAPPING: dict[str, dict[str, str]] = {
    "gameId": {"type": "keyword"},
    "timestamp": {"type": "date"},
}

TOP_AGGREGATION = "top"


def index_body(mapping: dict[str, Any]) -> dict[str, Any]:
    return {"mappings": {"properties": mapping}}


def multi_match(text: str) -> dict[str, Any]:
    return {
        "multi_match": {
            "query": text,
            "fields": list(TEXT_FIELDS),
            "fuzziness": "AUTO",
        }
    }


def genre_term(genre: int) -> dict[str, Any]:
    return {"term": {"genre": genre}}


def fuzzy_search(text: str, size: int) -> dict[str, Any]:
    return {"size": size, "query": multi_match(text)}


def filtered_search(text: str | None, genre: int | None, size: int) -> dict[str, Any] | None:
    """Text drives the score; genre is a non-scoring exact filter.

    Returns ``None`` when neither criterion is present.
    """
    if text and genre is not None:
        query: dict[str, Any] = {
            "bool": {
                "must": [multi_match(text)],
                "filter": [genre_term(genre)],
            }
        }
    elif text:
        query = multi_match(text)
    elif genre is not None:
        query = genre_term(genre)
    else:
        return None
    return {"size": size, "query": query}


def random_sample(genre: int, size: int, seed: int) -> dict[str, Any]:
    return {
        "size": size,
        "query": {
            "function_score": {
                "query": genre_term(genre),
                "random_score": {"seed": seed},
            }
        },
    }


def top_terms(size: int) -> dict[str, Any]:
    return {
        "size": 0,
        "aggs": {TOP_AGGREGATION: {"terms": {"field": "gameId", "size": size}}},
    }
