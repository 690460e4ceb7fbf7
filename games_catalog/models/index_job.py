"""Models used by the index maintenance queue and worker."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from games_catalog.models.search import SearchDocument


class IndexJob(BaseModel):
    """A single index maintenance request emitted by a catalog write."""

    game_id: UUID
    op: Literal["upsert", "delete"] = Field(
        default="upsert",
        description="Indicates the requested action for the search index",
    )
    document: SearchDocument | None = Field(
        default=None,
        description="Projection to index; required for upserts",
    )

    @model_validator(mode="after")
    def _require_document_for_upsert(self) -> IndexJob:
        if self.op == "upsert" and self.document is None:
            raise ValueError("Upsert jobs must carry a document")
        return self
