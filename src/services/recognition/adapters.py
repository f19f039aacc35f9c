"""Database-backed implementations of the recognition collaborator protocols."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from crud.jargons import jargon_crud
from crud.reference import reference_crud
from schemas.recognition import JargonEntry
from services.recognition.interfaces import (
    CustomerRecord,
    DriverRecord,
    JargonSourceProtocol,
    ProductRecord,
    ReferenceLookupProtocol,
)


SessionFactory = Callable[[], AsyncSession]


class SqlReferenceLookup(ReferenceLookupProtocol):
    """Exact-name lookups, one short-lived session per query."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def find_customer(self, name: str) -> CustomerRecord | None:
        async with self._session_factory() as db:
            customer = await reference_crud.get_customer_by_name(db, name)
        if customer is None:
            return None
        return CustomerRecord(id=customer.id, phone=customer.phone)

    async def find_driver(self, name: str) -> DriverRecord | None:
        async with self._session_factory() as db:
            driver = await reference_crud.get_driver_by_name(db, name)
        if driver is None:
            return None
        return DriverRecord(
            id=driver.id, phone=driver.phone, license_plate=driver.license_plate
        )

    async def find_product(self, name: str) -> ProductRecord | None:
        async with self._session_factory() as db:
            product = await reference_crud.get_product_by_name(db, name)
        if product is None:
            return None
        return ProductRecord(id=product.id)


class SqlJargonSource(JargonSourceProtocol):
    """Loads the full jargon table in primary key order."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def load_all(self) -> Sequence[JargonEntry]:
        async with self._session_factory() as db:
            rows = await jargon_crud.list_all(db)
        return [
            JargonEntry(slang_term=row.slang_term, canonical_term=row.canonical_term)
            for row in rows
        ]
