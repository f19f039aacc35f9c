from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Jargon(Base):
    """Slang term as spoken by dispatchers and the canonical term it means."""

    __tablename__ = "jargons"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    slang_term: Mapped[str] = mapped_column(
        "jargon_name", String(100), nullable=False, unique=True
    )
    canonical_term: Mapped[str] = mapped_column(
        "origin_name", String(100), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Jargon(id={self.id}, slang_term={self.slang_term})>"
