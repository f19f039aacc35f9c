from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateJargonError, JargonNotFoundError
from models.jargons import Jargon
from schemas.recognition import JargonCreate


class JargonCRUD:
    """CRUD operations for slang mappings."""

    async def list_all(self, db: AsyncSession) -> list[Jargon]:
        """All mappings in primary key order."""
        result = await db.execute(select(Jargon).order_by(Jargon.id))
        return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, jargon_id: int) -> Jargon:
        jargon = await db.get(Jargon, jargon_id)
        if jargon is None:
            raise JargonNotFoundError(f"Jargon {jargon_id} not found")
        return jargon

    async def create(self, db: AsyncSession, data: JargonCreate) -> Jargon:
        jargon = Jargon(slang_term=data.slang_term, canonical_term=data.canonical_term)
        try:
            db.add(jargon)
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateJargonError(data.slang_term) from exc
        await db.refresh(jargon)
        return jargon

    async def update(
        self, db: AsyncSession, jargon_id: int, data: JargonCreate
    ) -> Jargon:
        jargon = await self.get_by_id(db, jargon_id)
        jargon.slang_term = data.slang_term
        jargon.canonical_term = data.canonical_term
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateJargonError(data.slang_term) from exc
        await db.refresh(jargon)
        return jargon

    async def delete(self, db: AsyncSession, jargon_id: int) -> None:
        jargon = await self.get_by_id(db, jargon_id)
        await db.delete(jargon)
        await db.commit()


jargon_crud = JargonCRUD()
