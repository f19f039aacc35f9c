from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.reference import Customer, Driver, Product


class ReferenceCRUD:
    """Exact-name lookups against the customer, driver and product tables."""

    async def get_customer_by_name(
        self, db: AsyncSession, name: str
    ) -> Customer | None:
        statement = select(Customer).where(Customer.name == name).limit(1)
        result = await db.execute(statement)
        return result.scalars().first()

    async def get_driver_by_name(self, db: AsyncSession, name: str) -> Driver | None:
        statement = select(Driver).where(Driver.name == name).limit(1)
        result = await db.execute(statement)
        return result.scalars().first()

    async def get_product_by_name(self, db: AsyncSession, name: str) -> Product | None:
        statement = select(Product).where(Product.name == name).limit(1)
        result = await db.execute(statement)
        return result.scalars().first()


reference_crud = ReferenceCRUD()
