"""Failure policy table for search backend operations.

Index maintenance and analytics are side effects of writes that already
succeeded in the source-of-truth store; reads are an optional enhancement
over that store. Neither may fail the caller by default.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class IndexOperation(str, Enum):
    ENSURE_INDEX = "ensure_index"
    UPSERT = "upsert"
    DELETE = "delete"
    RECORD_HITS = "record_hits"
    REINDEX = "reindex"
    SEARCH = "search"
    SAMPLE = "sample"
    TOP_HITS = "top_hits"


class FailurePolicy(str, Enum):
    SWALLOW = "swallow"  # log and return nothing
    EMPTY = "empty"  # log and return an empty sequence
    RAISE = "raise"  # propagate SearchBackendError


DEFAULT_POLICIES: Mapping[IndexOperation, FailurePolicy] = {
    IndexOperation.ENSURE_INDEX: FailurePolicy.SWALLOW,
    IndexOperation.UPSERT: FailurePolicy.SWALLOW,
    IndexOperation.DELETE: FailurePolicy.SWALLOW,
    IndexOperation.RECORD_HITS: FailurePolicy.SWALLOW,
    IndexOperation.REINDEX: FailurePolicy.SWALLOW,
    IndexOperation.SEARCH: FailurePolicy.EMPTY,
    IndexOperation.SAMPLE: FailurePolicy.EMPTY,
    IndexOperation.TOP_HITS: FailurePolicy.EMPTY,
}


def resolve_policies(
    overrides: Mapping[IndexOperation, FailurePolicy] | None = None,
) -> dict[IndexOperation, FailurePolicy]:
    """Merge per-instance overrides over the defaults."""
    policies = dict(DEFAULT_POLICIES)
    if overrides:
        policies.update(overrides)
    return policies
