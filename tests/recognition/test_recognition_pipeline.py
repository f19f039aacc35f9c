"""Tests for the normalize -> cache -> extract -> enrich pipeline."""

import asyncio
import logging

import pytest

from schemas.recognition import (
    CustomerInfo,
    ExtractionFragment,
    ParsedOrder,
    ProductInfo,
)


class TestParsedOrder:
    def test_unmentioned_fields_are_absent(self) -> None:
        fragment = ParsedOrder(customer_name="张三").to_fragment()
        assert fragment.customer == CustomerInfo(name="张三")
        assert fragment.product is None
        assert fragment.driver is None

    def test_quantity_alone_creates_product(self) -> None:
        fragment = ParsedOrder(quantity=5).to_fragment()
        assert fragment.product == ProductInfo(quantity=5)

    def test_accepts_camel_case_aliases(self) -> None:
        parsed = ParsedOrder.model_validate({"customerName": "张三", "driverName": "王五"})
        assert parsed.customer_name == "张三"
        assert parsed.driver_name == "王五"


@pytest.mark.asyncio
class TestRecognitionPipeline:
    async def test_full_parse(self, recognition_service, fake_extractor) -> None:
        fake_extractor.responses["客户张三要买5个苹果"] = ParsedOrder(
            customer_name="张三", product_name="苹果", quantity=5
        )

        fragment = await recognition_service.pipeline.parse(" 客户张三要买5个苹果 ")

        assert fragment.customer == CustomerInfo(
            id=1, name="张三", phone="13800000001", exists=True
        )
        assert fragment.product == ProductInfo(id=3, name="苹果", quantity=5, exists=True)
        assert fragment.driver is None

    async def test_jargon_is_applied_before_extraction(
        self, recognition_service, fake_extractor
    ) -> None:
        await recognition_service.startup()
        fake_extractor.responses["五个苹果"] = ParsedOrder(product_name="苹果", quantity=5)

        fragment = await recognition_service.pipeline.parse("五个果子")

        assert fake_extractor.calls == ["五个苹果"]
        assert fragment.product is not None
        assert fragment.product.exists is True

    @pytest.mark.parametrize("raw", [None, "", "a", "  嗯  "])
    async def test_short_text_never_reaches_cache_or_extractor(
        self, recognition_service, fake_extractor, raw
    ) -> None:
        fragment = await recognition_service.pipeline.parse(raw)

        assert fragment == ExtractionFragment()
        assert fake_extractor.calls == []
        assert recognition_service.cache.size() == 0

    async def test_repeated_text_hits_cache(self, recognition_service, fake_extractor) -> None:
        fake_extractor.responses["客户张三"] = ParsedOrder(customer_name="张三")

        first = await recognition_service.pipeline.parse("客户张三")
        second = await recognition_service.pipeline.parse("客户张三")

        assert first == second
        assert fake_extractor.calls == ["客户张三"]
        assert recognition_service.pipeline.stats.total_calls == 1

    async def test_cache_holds_unenriched_fragment(
        self, recognition_service, fake_extractor, fake_lookup
    ) -> None:
        """Reference data changes are picked up on a cache hit."""
        fake_extractor.responses["客户李四"] = ParsedOrder(customer_name="李四")
        first = await recognition_service.pipeline.parse("客户李四")
        assert first.customer is not None and first.customer.exists is False

        from services.recognition.interfaces import CustomerRecord

        fake_lookup.customers["李四"] = CustomerRecord(id=2)
        second = await recognition_service.pipeline.parse("客户李四")

        assert second.customer == CustomerInfo(id=2, name="李四", exists=True)
        cached = recognition_service.cache.get("客户李四")
        assert cached is not None and cached.customer is not None
        assert cached.customer.exists is False

    async def test_extractor_error_yields_empty_fragment(
        self, recognition_service, fake_extractor, caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_extractor.error = RuntimeError("model overloaded")

        with caplog.at_level(logging.WARNING):
            fragment = await recognition_service.pipeline.parse("客户张三")

        assert fragment == ExtractionFragment()
        assert recognition_service.cache.size() == 0
        assert "extraction_failed" in caplog.text

    async def test_failed_extraction_is_retried(
        self, recognition_service, fake_extractor
    ) -> None:
        fake_extractor.error = RuntimeError("model overloaded")
        await recognition_service.pipeline.parse("客户张三")

        fake_extractor.error = None
        fake_extractor.responses["客户张三"] = ParsedOrder(customer_name="张三")
        fragment = await recognition_service.pipeline.parse("客户张三")

        assert fragment.customer is not None and fragment.customer.exists is True
        assert fake_extractor.calls == ["客户张三", "客户张三"]

    async def test_no_result_yields_empty_fragment(
        self, recognition_service, fake_extractor
    ) -> None:
        fragment = await recognition_service.pipeline.parse("今天天气不错")
        assert fragment == ExtractionFragment()
        assert recognition_service.cache.size() == 0

    async def test_extractor_timeout(self, recognition_service, fake_extractor) -> None:
        async def slow(text: str):
            await asyncio.sleep(10)

        fake_extractor.extract = slow
        recognition_service.pipeline._timeout = 0.01

        fragment = await recognition_service.pipeline.parse("客户张三")

        assert fragment == ExtractionFragment()
        assert recognition_service.pipeline.stats.total_calls == 1

    async def test_stats_track_extractor_calls(
        self, recognition_service, fake_extractor
    ) -> None:
        fake_extractor.responses["客户张三"] = ParsedOrder(customer_name="张三")
        fake_extractor.responses["司机王五"] = ParsedOrder(driver_name="王五")
        await recognition_service.pipeline.parse("客户张三")
        await recognition_service.pipeline.parse("司机王五")

        stats = recognition_service.stats()

        assert stats.total_calls == 2
        assert stats.cache_size == 2
        assert stats.average_time_ms >= 0

    async def test_empty_extraction_is_cached(
        self, recognition_service, fake_extractor
    ) -> None:
        """An extractor answer with no fields counts as a result, not a failure."""
        fake_extractor.responses["今天天气不错"] = ParsedOrder()

        first = await recognition_service.pipeline.parse("今天天气不错")
        second = await recognition_service.pipeline.parse("今天天气不错")

        assert first == second == ExtractionFragment()
        assert fake_extractor.calls == ["今天天气不错"]
        assert recognition_service.cache.get("今天天气不错") == ExtractionFragment()
