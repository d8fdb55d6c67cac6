"""Chat-completion Schema Inference Service Implementation

Sends the normalized file text to an OpenAI-compatible chat completion
endpoint and parses the JSON array it answers with.
"""

import json
import logging
import re
from typing import List, Optional
import httpx
from pydantic import ValidationError
from src.app.services.schema_inference_service import (
    PaymentRequiredError,
    RateLimitedError,
    SchemaInferenceError,
    SchemaInferenceService,
)
from src.domain.tabular_import import TabularImportRow

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You extract invoice item rows from spreadsheet data.
Column names, spellings and layouts differ between files.

Extract these fields from each row:

1. styleNo (required). Headers such as "Style No", "Style", "Style#",
   "Style Code", "Style ID", "style_no", "styleno".
2. description (optional). Headers such as "Description",
   "Item Description", "Details", "Item", "Product Description".
   Use an empty string when absent.
3. quantity (optional). Headers such as "Packing Quantity", "Packing Qty",
   "Qty", "Quantity", "Pack Qty", "Units", "Count", "Pcs".
   Must be a number; use 1 when absent or invalid.
4. unitPrice (required). Headers such as "Unit Price", "Price", "Rate",
   "Cost", "Unit Cost". Strip commas, currency symbols and text.
   Skip the row if it is not a valid number.

Answer with ONLY a JSON array shaped like:
[{"styleNo": "STRING", "description": "STRING", "quantity": NUMBER, "unitPrice": NUMBER}]

Never invent values, never change the style number, skip rows whose
required values are missing or invalid, and add no commentary."""

_FENCE = re.compile(r"```(?:json)?\s*\n?")


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences around a model reply"""
    text = content.strip()
    if text.startswith("```"):
        text = _FENCE.sub("", text)
    return text.strip()


def parse_rows(payload) -> List[TabularImportRow]:
    """Validate each record, skipping the ones that do not fit"""
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        payload = payload["items"]
    if not isinstance(payload, list):
        raise SchemaInferenceError("Expected a JSON array of items")

    rows = []
    for index, record in enumerate(payload):
        try:
            rows.append(TabularImportRow.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping classified record {index}: {e.error_count()} errors")
    return rows


class GatewaySchemaInferenceService(SchemaInferenceService):
    """
    Schema inference through an AI gateway

    Maps 429 to RateLimitedError and 402 to PaymentRequiredError so the
    caller can tell the user what to do; anything else non-2xx is a
    SchemaInferenceError.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str = "google/gemini-2.5-flash",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize gateway client

        Args:
            api_url: Chat completions endpoint
            api_key: Bearer token for the gateway
            model: Model identifier
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def classify(self, content: str, file_name: str) -> List[TabularImportRow]:
        if not self.api_key:
            raise SchemaInferenceError("Classifier API key is not configured")

        logger.info(f"Classifying {file_name} ({len(content)} characters)")
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Parse this file content and extract invoice items:\n\n{content}",
                },
            ],
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Classifier request for {file_name} failed: {e}")
            raise SchemaInferenceError(f"Classifier request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError("Rate limits exceeded, please try again later.")
        if response.status_code == 402:
            raise PaymentRequiredError("Payment required, please add funds to your workspace.")
        if response.is_error:
            logger.error(f"Classifier gateway error {response.status_code}: {response.text}")
            raise SchemaInferenceError(f"Classifier gateway error {response.status_code}")

        try:
            reply = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SchemaInferenceError("No content in classifier response") from e
        if not reply:
            raise SchemaInferenceError("No content in classifier response")

        try:
            parsed = json.loads(strip_code_fences(reply))
        except json.JSONDecodeError as e:
            raise SchemaInferenceError(f"Classifier reply is not valid JSON: {e}") from e

        rows = parse_rows(parsed)
        logger.info(f"Classified {len(rows)} rows from {file_name}")
        return rows
