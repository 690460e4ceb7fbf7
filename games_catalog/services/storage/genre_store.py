"""Read/write access to genre rows."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from games_catalog.models.game import Genre, GenreCreate
from games_catalog.services.storage.database import translate_errors
from games_catalog.services.storage.tables import GenreRow


class GenreStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, genre_id: int) -> Genre | None:
        with translate_errors("get_genre"):
            row = await self._session.get(GenreRow, genre_id)
        return Genre.model_validate(row) if row else None

    async def list_all(self) -> list[Genre]:
        with translate_errors("list_genres"):
            result = await self._session.execute(select(GenreRow).order_by(GenreRow.id))
            rows = result.scalars().all()
        return [Genre.model_validate(row) for row in rows]

    async def create(self, payload: GenreCreate) -> Genre:
        row = GenreRow(id=payload.id, name=payload.name)
        with translate_errors("create_genre"):
            self._session.add(row)
            await self._session.commit()
        return Genre.model_validate(row)

    async def delete(self, genre_id: int) -> bool:
        with translate_errors("delete_genre"):
            row = await self._session.get(GenreRow, genre_id)
            if row is None:
                return False
            await self._session.delete(row)
            await self._session.commit()
        return True
