"""Receipt field extraction from photos using pydantic-ai."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from pydantic_ai import Agent, BinaryContent
from pydantic_ai.exceptions import AgentRunError

from quick_receipt.config import get_anthropic_api_key, get_llm_model
from quick_receipt.errors import (
    ExtractionEmptyResponseError,
    ExtractionParseError,
    ExtractionServiceError,
)
from quick_receipt.models import NormalizedImage, ReceiptData

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = """\
Act as a professional bookkeeper. Extract the Merchant Name, Date (YYYY-MM-DD), \
Total Amount (numeric), and a Category (e.g., Groceries, Dining, Transport) \
from this receipt. Return ONLY a valid JSON object with the keys \
"merchantName", "date", "totalAmount" and "category". If the receipt lists \
line items include them as "items" (a list of strings), and include the store \
address as "location" when it is printed.\
"""

_USER_PROMPT = "Extract the fields from this receipt."


def create_agent(system_prompt: str) -> Agent[None, str]:
    """Create a text-output pydantic-ai Agent with the configured model."""
    # Ensure API key is available (fail fast)
    get_anthropic_api_key()

    model_name = get_llm_model()
    return Agent(
        f"anthropic:{model_name}",
        output_type=str,
        system_prompt=system_prompt,
    )


def create_extraction_agent() -> Agent[None, str]:
    """Create a pydantic-ai Agent configured for receipt extraction."""
    return create_agent(_SYSTEM_PROMPT)


async def run_agent(
    agent: Agent[None, str] | None,
    prompt: Any,
    *,
    factory: Callable[[], Agent[None, str]] = create_extraction_agent,
) -> str | None:
    """Run ``agent`` (built by ``factory`` when None) and return its text.

    Missing configuration and service failures both surface as
    ExtractionServiceError.
    """
    if agent is None:
        try:
            agent = factory()
        except ValueError as exc:
            msg = f"Extraction service is not configured: {exc}"
            raise ExtractionServiceError(msg) from exc

    try:
        result: Any = await agent.run(prompt)
    except AgentRunError as exc:
        msg = f"Extraction service failed: {exc}"
        raise ExtractionServiceError(msg) from exc
    return result.output  # type: ignore[no-any-return]


async def extract_receipt(
    image: NormalizedImage,
    *,
    agent: Agent[None, str] | None = None,
) -> ReceiptData:
    """Submit a normalized receipt image and parse the structured fields.

    Accepts an optional agent for dependency injection in tests. No retry
    is attempted; every failure is raised as an ExtractionError subclass.
    """
    output = await run_agent(
        agent,
        [_USER_PROMPT, BinaryContent(data=image.data, media_type=image.media_type)],
    )
    return parse_response(output)


def parse_response(text: str | None) -> ReceiptData:
    """Parse the service's text response into ReceiptData."""
    payload = load_json(text)
    if not isinstance(payload, dict):
        msg = f"Extraction response is not a JSON object: {type(payload).__name__}"
        raise ExtractionParseError(msg)

    try:
        return ReceiptData.model_validate(payload)
    except ValidationError as exc:
        msg = f"Extraction response is missing or has invalid fields: {exc}"
        raise ExtractionParseError(msg) from exc


def load_json(text: str | None) -> Any:
    """Decode a model's JSON reply, tolerating a markdown code fence."""
    if text is None or not text.strip():
        msg = "Extraction service returned an empty response"
        raise ExtractionEmptyResponseError(msg)

    cleaned = _strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        msg = f"Extraction response is not valid JSON: {exc}"
        raise ExtractionParseError(msg) from exc


def _strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [line for line in lines[1:] if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned
