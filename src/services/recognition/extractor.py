"""LLM-backed order field extractor."""

from __future__ import annotations

import logging
from typing import Any

from pydantic_ai import Agent

from schemas.recognition import ParsedOrder
from services.recognition.model_factory import get_extraction_model


logger = logging.getLogger(__name__)


ORDER_EXTRACTION_PROMPT = """
You extract order details from speech-recognition text spoken by a dispatcher.
The text is usually Chinese and may be a fragment of a longer utterance.

Extract only:
1. customer_name: the customer's name
2. product_name: the product being ordered
3. quantity: how many units, as an integer (convert Chinese numerals: 五 -> 5)
4. driver_name: the driver's name

RULES:
- Use null for anything that is not mentioned. Never guess.
- Copy names exactly as they appear in the text; do not translate them.
- Do not include measure words or units in product_name ("5个苹果" -> "苹果").
- Answer quickly; do not over-analyse.

Example input: "客户张三要买5个苹果"
Example output: customer_name "张三", product_name "苹果", quantity 5,
driver_name null.
"""


def create_order_agent() -> Agent[None, ParsedOrder]:
    """Create a pydantic-ai agent that returns ParsedOrder."""
    return Agent(
        get_extraction_model(),
        system_prompt=ORDER_EXTRACTION_PROMPT,
        output_type=ParsedOrder,
    )


class OrderFieldExtractor:
    """FieldExtractorProtocol implementation over a pydantic-ai agent.

    The agent is created on first use so that importing the app does not
    require model credentials.
    """

    def __init__(self, agent: Any | None = None) -> None:
        self._agent = agent

    async def extract(self, text: str) -> ParsedOrder | None:
        if self._agent is None:
            self._agent = create_order_agent()
        result: Any = await self._agent.run(text)
        return getattr(result, "output", None)
