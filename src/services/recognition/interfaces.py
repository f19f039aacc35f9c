"""Collaborator interfaces consumed by the recognition pipeline.

The language model, the reference tables and the jargon table are injected
behind these protocols so the pipeline can be exercised with deterministic
in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from schemas.recognition import JargonEntry, ParsedOrder


@dataclass(frozen=True, slots=True)
class CustomerRecord:
    id: int
    phone: str | None = None


@dataclass(frozen=True, slots=True)
class DriverRecord:
    id: int
    phone: str | None = None
    license_plate: str | None = None


@dataclass(frozen=True, slots=True)
class ProductRecord:
    id: int


class FieldExtractorProtocol(Protocol):
    """Opaque text -> order fields capability (fallible, slow)."""

    async def extract(self, text: str) -> ParsedOrder | None:
        """Extract order fields from normalized recognition text."""
        ...


class ReferenceLookupProtocol(Protocol):
    """Exact-name lookups against reference data."""

    async def find_customer(self, name: str) -> CustomerRecord | None: ...

    async def find_driver(self, name: str) -> DriverRecord | None: ...

    async def find_product(self, name: str) -> ProductRecord | None: ...


class JargonSourceProtocol(Protocol):
    """Source of the complete slang mapping."""

    async def load_all(self) -> Sequence[JargonEntry]:
        """Return every mapping, in the order they should be applied."""
        ...
