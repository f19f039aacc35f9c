"""Resolve extracted names against reference data."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from schemas.recognition import CustomerInfo, DriverInfo, ExtractionFragment, ProductInfo
from services.recognition.exceptions import LookupFailure
from services.recognition.interfaces import ReferenceLookupProtocol


logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class ReferenceEnricher:
    """Fill id / contact fields and the ``exists`` flag for each named entity.

    Enrichment is recomputed from scratch on every call: a name that resolves
    gets the stored id and supplemental fields, a name that does not (or
    whose lookup fails) keeps the name with everything else cleared.
    Quantity is never touched.
    """

    def __init__(
        self, lookup: ReferenceLookupProtocol, timeout: float | None = None
    ) -> None:
        self._lookup = lookup
        self._timeout = timeout or None

    async def _resolve(self, kind: str, call: Awaitable[RecordT]) -> RecordT | None:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except Exception as exc:
            failure = LookupFailure(f"{kind} lookup failed: {exc!r}")
            logger.warning("%s; treating as not found", failure)
            return None

    async def _customer(self, info: CustomerInfo) -> CustomerInfo:
        record = await self._resolve(
            "customer", self._lookup.find_customer(info.name or "")
        )
        if record is None:
            return CustomerInfo(name=info.name, exists=False)
        return CustomerInfo(id=record.id, name=info.name, phone=record.phone, exists=True)

    async def _driver(self, info: DriverInfo) -> DriverInfo:
        record = await self._resolve("driver", self._lookup.find_driver(info.name or ""))
        if record is None:
            return DriverInfo(name=info.name, exists=False)
        return DriverInfo(
            id=record.id,
            name=info.name,
            phone=record.phone,
            license_plate=record.license_plate,
            exists=True,
        )

    async def _product(self, info: ProductInfo) -> ProductInfo:
        record = await self._resolve(
            "product", self._lookup.find_product(info.name or "")
        )
        if record is None:
            return ProductInfo(name=info.name, quantity=info.quantity, exists=False)
        return ProductInfo(
            id=record.id, name=info.name, quantity=info.quantity, exists=True
        )

    async def enrich(self, fragment: ExtractionFragment) -> ExtractionFragment:
        """Return an enriched copy of ``fragment``; the input is not modified."""
        enriched = fragment.model_copy(deep=True)
        tasks: dict[str, asyncio.Future] = {}

        if fragment.customer is not None and fragment.customer.name:
            tasks["customer"] = asyncio.ensure_future(self._customer(fragment.customer))
        if fragment.product is not None and fragment.product.name:
            tasks["product"] = asyncio.ensure_future(self._product(fragment.product))
        if fragment.driver is not None and fragment.driver.name:
            tasks["driver"] = asyncio.ensure_future(self._driver(fragment.driver))

        if tasks:
            await asyncio.gather(*tasks.values())
            for field, task in tasks.items():
                setattr(enriched, field, task.result())
        return enriched
