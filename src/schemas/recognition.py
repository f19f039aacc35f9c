"""Schemas for the voice order recognition pipeline.

Wire format uses camelCase (``licensePlate``) to match the front-end. All
models accept both the Python field name and the alias on input.

* ``ParsedOrder``          - raw output of the field extractor (LLM).
* ``ExtractionFragment``   - per-message result; any sub-object may be absent.
* ``OrderDraft``           - session-scoped accumulated state; sub-objects are
  always present and start empty with ``exists = False``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomerInfo(_WireModel):
    id: int | None = None
    name: str | None = None
    phone: str | None = None
    exists: bool = False


class ProductInfo(_WireModel):
    id: int | None = None
    name: str | None = None
    quantity: int | None = None
    exists: bool = False


class DriverInfo(_WireModel):
    id: int | None = None
    name: str | None = None
    phone: str | None = None
    license_plate: str | None = None
    exists: bool = False


class ParsedOrder(_WireModel):
    """Agent output: order fields mentioned in one recognized utterance.

    Any field the speaker did not mention must be null.
    """

    customer_name: str | None = Field(default=None, description="Customer name")
    product_name: str | None = Field(default=None, description="Product name")
    quantity: int | None = Field(
        default=None, description="Number of product units, as an integer"
    )
    driver_name: str | None = Field(default=None, description="Driver name")

    def to_fragment(self) -> ExtractionFragment:
        """Convert to a fragment, leaving sub-objects absent when not mentioned."""
        product: ProductInfo | None = None
        if self.product_name is not None or self.quantity is not None:
            product = ProductInfo(name=self.product_name, quantity=self.quantity)
        return ExtractionFragment(
            customer=CustomerInfo(name=self.customer_name)
            if self.customer_name is not None
            else None,
            product=product,
            driver=DriverInfo(name=self.driver_name)
            if self.driver_name is not None
            else None,
        )


class ExtractionFragment(_WireModel):
    """Partial extraction result for one inbound message (pre-merge)."""

    customer: CustomerInfo | None = None
    product: ProductInfo | None = None
    driver: DriverInfo | None = None

    def is_empty(self) -> bool:
        return self.customer is None and self.product is None and self.driver is None


class OrderDraft(_WireModel):
    """Accumulated order state for one recognition session."""

    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    product: ProductInfo = Field(default_factory=ProductInfo)
    driver: DriverInfo = Field(default_factory=DriverInfo)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class RecognitionStats(_WireModel):
    """Diagnostic counters for the recognition pipeline."""

    total_calls: int
    total_time_ms: float
    average_time_ms: float
    cache_size: int
    jargon_entries: int
    active_sessions: int


class JargonEntry(_WireModel):
    """Slang term and the canonical term it is rewritten to."""

    slang_term: str
    canonical_term: str


class JargonCreate(_WireModel):
    slang_term: str = Field(..., min_length=1, max_length=100)
    canonical_term: str = Field(..., min_length=1, max_length=100)

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class JargonRead(JargonCreate):
    id: int

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
