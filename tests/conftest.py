"""Shared test fixtures for pytest.

ENVIRONMENT is forced to ``test`` before the app is imported so settings are
built from defaults without reading an env file. The recognition service is
always built from in-memory fakes; no test talks to a model or a database.
"""

import os
from collections.abc import Generator, Sequence

import pytest
from fastapi.testclient import TestClient
from pydantic_ai import models


os.environ.setdefault("ENVIRONMENT", "test")

# Block any real model requests in tests
models.ALLOW_MODEL_REQUESTS = False

from core.config import Settings  # noqa: E402
from main import app  # noqa: E402
from schemas.recognition import JargonEntry, ParsedOrder  # noqa: E402
from services.recognition import (  # noqa: E402
    RecognitionService,
    build_recognition_service,
    get_recognition_service,
)
from services.recognition.interfaces import (  # noqa: E402
    CustomerRecord,
    DriverRecord,
    ProductRecord,
)


class FakeExtractor:
    """Scripted field extractor keyed by normalized text."""

    def __init__(self, responses: dict[str, ParsedOrder] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def extract(self, text: str) -> ParsedOrder | None:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.responses.get(text)


class FakeLookup:
    """Reference store backed by dicts; set ``error`` to make every lookup fail."""

    def __init__(self) -> None:
        self.customers: dict[str, CustomerRecord] = {}
        self.drivers: dict[str, DriverRecord] = {}
        self.products: dict[str, ProductRecord] = {}
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    async def _find(self, kind: str, table: dict, name: str):
        self.calls.append((kind, name))
        if self.error is not None:
            raise self.error
        return table.get(name)

    async def find_customer(self, name: str) -> CustomerRecord | None:
        return await self._find("customer", self.customers, name)

    async def find_driver(self, name: str) -> DriverRecord | None:
        return await self._find("driver", self.drivers, name)

    async def find_product(self, name: str) -> ProductRecord | None:
        return await self._find("product", self.products, name)


class FakeJargonSource:
    def __init__(self, entries: Sequence[JargonEntry] = ()) -> None:
        self.entries = list(entries)
        self.error: Exception | None = None
        self.loads = 0

    async def load_all(self) -> Sequence[JargonEntry]:
        self.loads += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def fake_lookup() -> FakeLookup:
    lookup = FakeLookup()
    lookup.customers["张三"] = CustomerRecord(id=1, phone="13800000001")
    lookup.drivers["王五"] = DriverRecord(
        id=7, phone="13900000007", license_plate="京A12345"
    )
    lookup.products["苹果"] = ProductRecord(id=3)
    return lookup


@pytest.fixture
def fake_jargon_source() -> FakeJargonSource:
    return FakeJargonSource([JargonEntry(slang_term="果子", canonical_term="苹果")])


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, ENVIRONMENT="test")  # type: ignore[call-arg]


@pytest.fixture
def recognition_service(
    fake_extractor: FakeExtractor,
    fake_lookup: FakeLookup,
    fake_jargon_source: FakeJargonSource,
    test_settings: Settings,
) -> RecognitionService:
    return build_recognition_service(
        extractor=fake_extractor,
        lookup=fake_lookup,
        jargon_source=fake_jargon_source,
        settings=test_settings,
    )


@pytest.fixture
def client(recognition_service: RecognitionService) -> Generator[TestClient, None, None]:
    """
    Create a test client whose recognition service is built from fakes.
    """
    app.dependency_overrides[get_recognition_service] = lambda: recognition_service
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_recognition_service, None)
