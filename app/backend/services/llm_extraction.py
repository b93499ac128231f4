"""
Structured credit item extraction with the OpenAI chat completions API.

Each text chunk is sent with a fixed system prompt describing the output
schema. Responses are JSON objects holding an ``items`` (or ``accounts``)
list, which is validated into CreditItem models.
"""

import asyncio
import json
import logging
from typing import Any

from ..models import CreditItem, CreditItemStatus
from .exceptions import ChunkExtractionError, LLMServiceError, UnitError
from .outcomes import StageOutcome

logger = logging.getLogger(__name__)


# =============================================================================
# Extraction System Prompt
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = """You are a credit report analyst. Extract ALL credit accounts from the text - both positive and negative.

Return a JSON object with an "items" key holding an array where each item has:
- creditor: string (company name)
- type: "COLLECTION" | "CHARGE_OFF" | "LATE_PAYMENT" | "JUDGMENT" | "BANKRUPTCY" | "REPOSSESSION" | "FORECLOSURE" | "TAX_LIEN" | "STUDENT_LOAN" | "CREDIT_CARD" | "AUTO_LOAN" | "MORTGAGE" | "PERSONAL_LOAN" | "OTHER"
- amount: number (in cents, or null if not specified)
- openedDate: string or null (ISO format)
- reportedDate: string or null (ISO format)
- accountLast4: string or null (last 4 digits of account)
- bureaus: array of strings (["Experian", "Equifax", "TransUnion"] or subset)
- isNegative: boolean (true if it's a negative item like collection, late payment, charge-off, etc.)
- notes: string or null (any additional details)

Focus on extracting ALL accounts, marking negative items appropriately.
If the text contains no accounts, return {"items": []}."""


def build_user_prompt(chunk: str) -> str:
    """Wrap a chunk of report text in the extraction instruction."""
    return f"Extract all credit accounts from this section:\n\n{chunk}"


def parse_extraction_response(content: str | None) -> list[Any]:
    """
    Pull the record list out of a model response.

    Accepts the list under either ``items`` or ``accounts``. A response
    without either key, or where the value is not a list, yields no records.

    Raises:
        ChunkExtractionError: If the content is empty or not valid JSON.
    """
    if not content:
        raise ChunkExtractionError("Empty response from OpenAI")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse extraction response: %s", content[:500])
        raise ChunkExtractionError(f"Invalid JSON in extraction response: {e}") from e

    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []

    records = data.get("items")
    if records is None:
        records = data.get("accounts")
    if not isinstance(records, list):
        return []
    return records


class StructuredExtractor:
    """
    Extracts credit items from text chunks with an OpenAI model.

    Chunks are sent with at most ``max_concurrency`` requests in flight
    (default 1, strictly sequential). A failed chunk is recorded as a
    warning and contributes no items.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_concurrency: int = 1,
        item_confidence: float = 0.8,
        client: Any = None,
    ):
        """
        Initialize the extractor.

        Args:
            api_key: OpenAI API key.
            model: Chat model to use.
            temperature: Sampling temperature.
            max_concurrency: Maximum number of chunk requests in flight.
            item_confidence: Confidence assigned to every extracted item.
            client: Pre-built AsyncOpenAI-compatible client (mainly for tests).
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_concurrency = max_concurrency
        self.item_confidence = item_confidence
        self._client = client

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise LLMServiceError(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def _to_items(self, records: list[Any], chunk_number: int) -> tuple[list[CreditItem], list[UnitError]]:
        items: list[CreditItem] = []
        warnings: list[UnitError] = []
        for record in records:
            if not isinstance(record, dict):
                warnings.append(
                    ChunkExtractionError(f"Chunk {chunk_number}: record is not an object", unit=chunk_number)
                )
                continue
            try:
                item = CreditItem.model_validate(
                    {
                        **record,
                        "confidence": self.item_confidence,
                        "status": CreditItemStatus.TO_SEND,
                    }
                )
            except Exception as e:
                logger.warning("Skipping invalid record in chunk %d: %s", chunk_number, e)
                warnings.append(
                    ChunkExtractionError(f"Chunk {chunk_number}: invalid record: {e}", unit=chunk_number)
                )
                continue
            items.append(item)
        return items, warnings

    async def extract_chunk(self, chunk: str, chunk_number: int = 1) -> tuple[list[CreditItem], list[UnitError]]:
        """
        Extract credit items from a single chunk.

        Returns:
            Tuple of (valid items, warnings for records that were rejected).

        Raises:
            ChunkExtractionError: If the request fails or the response is not JSON.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(chunk)},
                ],
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
        except Exception as e:
            raise ChunkExtractionError(f"Chunk {chunk_number}: request failed: {e}", unit=chunk_number) from e

        try:
            records = parse_extraction_response(content)
        except ChunkExtractionError as e:
            raise ChunkExtractionError(f"Chunk {chunk_number}: {e}", unit=chunk_number) from e

        return self._to_items(records, chunk_number)

    async def extract_items(self, chunks: list[str]) -> StageOutcome[list[CreditItem]]:
        """
        Extract credit items from every chunk.

        Never fails as a whole: chunk failures become warnings. Items are
        returned in chunk order regardless of the concurrency bound.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        total = len(chunks)

        async def process(index: int, chunk: str) -> tuple[list[CreditItem], list[UnitError]]:
            chunk_number = index + 1
            async with semaphore:
                logger.info("Processing chunk %d of %d", chunk_number, total)
                try:
                    return await self.extract_chunk(chunk, chunk_number)
                except ChunkExtractionError as e:
                    logger.warning("Error processing chunk %d: %s", chunk_number, e)
                    return [], [e]

        results = await asyncio.gather(*(process(i, c) for i, c in enumerate(chunks)))

        all_items: list[CreditItem] = []
        warnings: list[UnitError] = []
        for items, chunk_warnings in results:
            all_items.extend(items)
            warnings.extend(chunk_warnings)

        logger.info("Extracted %d candidate items from %d chunk(s)", len(all_items), total)
        return StageOutcome.success(all_items, warnings)
