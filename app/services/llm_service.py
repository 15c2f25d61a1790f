# app/services/llm_service.py
"""
This service sends document text to a Large Language Model for
classification into a document type and a routing department.

A reply that contains no decodable JSON object is not an error: it becomes a
`FallbackCandidate` that the sanitizer turns into a low-confidence result.
A failing API call, on the other hand, raises `ClassificationUnavailable`.
"""
import asyncio
import json
import logging

from openai import AsyncOpenAI

from app.config import TRUNCATION_MARKER, Settings
from app.models.response import Candidate, FallbackCandidate, ModelCandidate
from app.utils.errors import ClassificationUnavailable, ConfigurationError

logger = logging.getLogger(__name__)

CLASSIFICATION_PROMPT = """
You are a professional document classification and routing assistant for back-office operations.

Analyze the provided document content and classify it according to these document types:
- invoice: Bills for goods/services provided
- purchase_order: Orders for goods/services to be purchased
- contract: Legal agreements and contracts
- receipt: Payment confirmations and receipts
- proposal: Business proposals and quotes
- agreement: Various types of agreements
- other: Documents that don't fit the above categories

Route documents to these departments:
- finance: Invoices, receipts, financial statements, payment records, billing documents
- procurement: Purchase orders, vendor agreements, supplier contracts
- legal: Contracts, legal agreements, compliance documents, terms of service
- operations: Operational agreements, service contracts, facility management
- general: Documents that don't fit specific departments

IMPORTANT: You must ALWAYS return your analysis in the following JSON format:

{
    "documentType": "classified_type",
    "confidence": 0.95,
    "department": "assigned_department",
    "routingConfidence": 0.90,
    "extractedData": {
        "key_information": "extracted values"
    },
    "reasoning": "Brief explanation of classification logic",
    "suggestedActions": ["action1", "action2"]
}

If you cannot determine the document type from the provided content, use "other" as documentType with lower confidence. NEVER respond with plain text - always return valid JSON.

Confidence scores should be between 0 and 1. Be thorough in extracting relevant data like amounts, dates, vendor names, etc.

Document content:
"""

HEALTH_PROMPT = "Hello, please respond with 'Connection successful'"


def parse_reply(reply: str | None) -> Candidate:
    """Decode the first JSON object in `reply`, or fall back."""
    if not reply:
        return FallbackCandidate(reason="empty reply")

    start = reply.find("{")
    if start == -1:
        return FallbackCandidate(reason="no JSON object in reply")

    try:
        payload, _ = json.JSONDecoder().raw_decode(reply, start)
    except json.JSONDecodeError as e:
        return FallbackCandidate(reason=f"invalid JSON: {e.msg}")
    except (ValueError, RecursionError) as e:
        # digit limit on huge integers, or nesting deeper than the decoder can follow
        return FallbackCandidate(reason=f"undecodable JSON: {type(e).__name__}")

    if not isinstance(payload, dict):
        return FallbackCandidate(reason="reply JSON is not an object")
    return ModelCandidate(payload=payload)


class ClassifierGateway:
    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        if client is None:
            if not settings.openai_api_key:
                raise ConfigurationError("OPENAI_API_KEY is required in environment variables")
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout=settings.llm_timeout,
            )
        self.client = client
        self.model = settings.classification_model
        self.timeout = settings.llm_timeout
        self.max_text_length = settings.max_text_length
        self._sem = asyncio.Semaphore(settings.max_concurrent_requests)

    async def _complete(self, prompt: str) -> str | None:
        async with self._sem:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=0.0,
                ),
                timeout=self.timeout,
            )
        return response.choices[0].message.content

    async def classify(self, text: str) -> Candidate:
        """
        Classifies document text with the LLM.

        Args:
            text: Document text, already truncated to the configured cap.

        Returns:
            A `ModelCandidate` holding the decoded reply, or a `FallbackCandidate`
            when the reply could not be decoded.
        """
        if len(text) > self.max_text_length + len(TRUNCATION_MARKER):
            raise ValueError(f"text exceeds {self.max_text_length} characters; truncate before classifying")

        try:
            reply = await self._complete(CLASSIFICATION_PROMPT + text)
        except Exception as e:
            logger.exception("LLM classification call failed")
            raise ClassificationUnavailable("Failed to classify document with AI model", e) from e

        candidate = parse_reply(reply)
        if isinstance(candidate, FallbackCandidate):
            logger.warning("Using fallback classification: %s", candidate.reason)
            logger.debug("Unparseable model reply: %r", reply)
        return candidate

    async def check_connection(self) -> bool:
        try:
            reply = await self._complete(HEALTH_PROMPT)
        except Exception as e:
            logger.error("LLM connection test failed: %s", e)
            return False
        return "Connection successful" in (reply or "")
