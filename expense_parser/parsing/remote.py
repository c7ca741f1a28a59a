"""Remote augmentation — ask a hosted model to parse text the heuristics could not.

Three interchangeable backends speak the same contract (request
``{text, categories}``, response shaped like a ``ParsedExpense`` without
``parsing_method``):

- ``EndpointExpenseParser``   any HTTP endpoint (requests)
- ``SupabaseFunctionParser``  the ``parse-expense`` Supabase edge function
- ``ClaudeExpenseParser``     Claude directly, with the same extraction prompt

Backends return the raw response; ``validate_remote_payload`` is the only
way a remote answer gets into the pipeline.  Every failure surfaces as
``RemoteParseError`` (or a timeout) and the orchestrator degrades to the
local result.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any, Iterable, Literal, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from ..config import DEFAULT_AI_TIMEOUT, DEFAULT_CLAUDE_MODEL, RemoteSettings
from .confidence import clamp

logger = logging.getLogger(__name__)

PARSE_FUNCTION = "parse-expense"
CATEGORY_FALLBACK_FUNCTION = "parse-expense-fallback"


class RemoteParseError(Exception):
    """A remote backend failed or answered with something unusable."""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _require_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if not math.isfinite(value):
        raise ValueError("must be finite")
    return float(value)


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ConfidencePayload(BaseModel):
    amount: float
    description: float
    category: float
    type: float

    @field_validator("amount", "description", "category", "type", mode="before")
    @classmethod
    def _numeric_in_range(cls, value: Any) -> float:
        return clamp(_require_number(value))


class RemoteExpensePayload(BaseModel):
    """Structural contract for a remote parse result."""

    model_config = ConfigDict(extra="ignore")

    amount: float
    description: StrictStr
    category: StrictStr
    type: Literal["expense", "income"]
    confidence: ConfidencePayload
    merchant: Optional[str] = None
    reasoning: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _non_negative_number(cls, value: Any) -> float:
        number = _require_number(value)
        if number < 0:
            raise ValueError("must not be negative")
        return number

    @field_validator("merchant", "reasoning", mode="before")
    @classmethod
    def _soft_text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


class CategorySuggestion(BaseModel):
    """Answer of the category-only fallback (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    suggested_category: str = Field(default="Other", alias="suggestedCategory")
    confidence: float = 0.5
    reasoning: str = "AI categorization"
    should_update: bool = Field(default=False, alias="shouldUpdate")

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> float:
        try:
            return clamp(_require_number(value))
        except ValueError:
            return 0.5


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        start = 1 if lines[0].startswith("```") else 0
        end = -1 if lines[-1].strip() == "```" else len(lines)
        text = "\n".join(lines[start:end]).strip()
    return text


def _decode(raw: Any) -> dict[str, Any]:
    """Turn whatever a backend returned into a dict, or raise."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        text = _strip_fences(raw)
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start : end + 1]
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteParseError(f"Malformed JSON from remote parser: {exc}") from exc
    if not isinstance(raw, dict):
        raise RemoteParseError(f"Expected a JSON object, got {type(raw).__name__}")
    return raw


def validate_remote_payload(raw: Any) -> RemoteExpensePayload:
    """Validate a remote parse response.

    Raises
    ------
    RemoteParseError
        If the body is not JSON or does not match the expected shape.
    """
    data = _decode(raw)
    try:
        return RemoteExpensePayload.model_validate(data)
    except ValidationError as exc:
        raise RemoteParseError(f"Invalid response structure from remote parser: {exc}") from exc


def validate_category_suggestion(raw: Any) -> CategorySuggestion:
    data = _decode(raw)
    try:
        return CategorySuggestion.model_validate(data)
    except ValidationError as exc:
        raise RemoteParseError(f"Invalid category suggestion: {exc}") from exc


# ---------------------------------------------------------------------------
# Prompts (used by the Claude backend)
# ---------------------------------------------------------------------------

_PARSE_SYSTEM_PROMPT = (
    "You are an expert financial expense parser. "
    "Respond with a single JSON object only. No explanation."
)

_CATEGORY_SYSTEM_PROMPT = (
    "You are categorizing an expense that a local parser couldn't confidently categorize. "
    "Respond with a single JSON object only. No explanation."
)


def _build_parse_prompt(text: str, categories: Iterable[str]) -> str:
    return (
        f'Parse the following text into a structured expense:\n\nText: "{text}"\n\n'
        f"Available categories: {', '.join(categories)}\n\n"
        "Return ONLY a JSON object with this exact structure:\n"
        "{\n"
        '  "amount": <number>,\n'
        '  "description": "<clean, concise description>",\n'
        '  "category": "<category from the list above>",\n'
        '  "type": "<expense or income>",\n'
        '  "confidence": {"amount": <0-1>, "description": <0-1>, "category": <0-1>, "type": <0-1>},\n'
        '  "merchant": "<merchant/store name if identifiable>",\n'
        '  "reasoning": "<brief explanation of categorization>"\n'
        "}\n\n"
        "Rules:\n"
        '- Amount is a positive number ("$5", "5 bucks", "twenty dollars", "around 15").\n'
        '- Description is clean ("Coffee at Starbucks", not "coffee 5 bucks starbucks").\n'
        "- Category MUST be one from the provided list.\n"
        '- Type is "expense" for spending or "income" for earnings.\n'
        "- Confidence scores reflect how certain you are (0.0-1.0).\n"
        "- If several expenses are mentioned, parse the main one.\n\n"
        "Examples:\n"
        '- "coffee 5 bucks starbucks" -> amount 5, description "Coffee at Starbucks", category "Food & Dining"\n'
        '- "uber ride downtown 12.50" -> amount 12.5, description "Uber ride downtown", category "Transportation"\n'
        '- "salary deposit 2500" -> amount 2500, description "Salary deposit", type "income", category "Income"'
    )


def _build_category_prompt(
    text: str, local_category: str, local_confidence: float, categories: Iterable[str],
) -> str:
    return (
        f'Text: "{text}"\n'
        f"Available categories: {', '.join(categories)}\n\n"
        f'The local parser suggested "{local_category}" with confidence {local_confidence:.2f}. '
        "Suggest a better category if possible.\n\n"
        "Return ONLY a JSON object with this structure:\n"
        "{\n"
        '  "suggestedCategory": "<category from the list>",\n'
        '  "confidence": <0-1 confidence score>,\n'
        '  "reasoning": "<brief explanation>",\n'
        '  "shouldUpdate": <true if you suggest a different category than Other>\n'
        "}\n\n"
        'If truly unclear, keep "Other" but explain why.'
    )


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class RemoteExpenseParser:
    """Base class for remote backends.  ``timeout`` is in seconds."""

    name = "remote"

    def __init__(self, timeout: float = DEFAULT_AI_TIMEOUT) -> None:
        self.timeout = timeout

    async def parse(self, text: str, categories: Iterable[str]) -> Any:
        raise NotImplementedError

    async def suggest_category(
        self,
        text: str,
        local_category: str,
        local_confidence: float,
        categories: Iterable[str],
    ) -> Any:
        raise NotImplementedError


class EndpointExpenseParser(RemoteExpenseParser):
    """POST ``{text, categories}`` to an HTTP endpoint and return its JSON body."""

    name = "endpoint"

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        fallback_url: Optional[str] = None,
        timeout: float = DEFAULT_AI_TIMEOUT,
    ) -> None:
        super().__init__(timeout)
        self.url = url
        self.api_key = api_key
        self.fallback_url = fallback_url

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, url: str, body: dict[str, Any]) -> Any:
        try:
            resp = requests.post(url, json=body, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise RemoteParseError(f"Request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteParseError(f"Non-JSON response from {url}") from exc

    async def parse(self, text: str, categories: Iterable[str]) -> Any:
        body = {"text": text, "categories": list(categories)}
        return await asyncio.to_thread(self._post, self.url, body)

    async def suggest_category(
        self,
        text: str,
        local_category: str,
        local_confidence: float,
        categories: Iterable[str],
    ) -> Any:
        if not self.fallback_url:
            raise RemoteParseError("No category fallback endpoint configured")
        body = {
            "text": text,
            "localCategory": local_category,
            "localConfidence": local_confidence,
        }
        return await asyncio.to_thread(self._post, self.fallback_url, body)


class SupabaseFunctionParser(RemoteExpenseParser):
    """Invoke the ``parse-expense`` / ``parse-expense-fallback`` edge functions."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        *,
        function_name: str = PARSE_FUNCTION,
        fallback_function: str = CATEGORY_FALLBACK_FUNCTION,
        timeout: float = DEFAULT_AI_TIMEOUT,
    ) -> None:
        super().__init__(timeout)
        self.url = url
        self.key = key
        self.function_name = function_name
        self.fallback_function = fallback_function
        self._client = None

    def _get_client(self):
        """Lazy-init the Supabase client."""
        if self._client is None:
            from supabase import create_client

            self._client = create_client(self.url, self.key)
        return self._client

    def _invoke(self, function: str, body: dict[str, Any]) -> Any:
        try:
            client = self._get_client()
            return client.functions.invoke(
                function,
                invoke_options={"body": body, "responseType": "json"},
            )
        except Exception as exc:
            raise RemoteParseError(f"Supabase function {function} failed: {exc}") from exc

    async def parse(self, text: str, categories: Iterable[str]) -> Any:
        body = {"text": text, "categories": list(categories)}
        return await asyncio.to_thread(self._invoke, self.function_name, body)

    async def suggest_category(
        self,
        text: str,
        local_category: str,
        local_confidence: float,
        categories: Iterable[str],
    ) -> Any:
        body = {
            "text": text,
            "localCategory": local_category,
            "localConfidence": local_confidence,
        }
        return await asyncio.to_thread(self._invoke, self.fallback_function, body)


def _call_claude(
    system_prompt: str,
    user_prompt: str,
    api_key: str,
    model: str,
    timeout: float,
) -> str:
    """Call Claude and return the text of its reply, code fences stripped."""
    import anthropic

    client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
    message = client.messages.create(
        model=model,
        max_tokens=512,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}],
    )
    return _strip_fences(message.content[0].text)


class ClaudeExpenseParser(RemoteExpenseParser):
    """Parse directly with Claude instead of going through a hosted function."""

    name = "claude"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_CLAUDE_MODEL,
        timeout: float = DEFAULT_AI_TIMEOUT,
    ) -> None:
        super().__init__(timeout)
        self.api_key = api_key
        self.model = model

    async def parse(self, text: str, categories: Iterable[str]) -> Any:
        prompt = _build_parse_prompt(text, categories)
        return await asyncio.to_thread(
            _call_claude, _PARSE_SYSTEM_PROMPT, prompt, self.api_key, self.model, self.timeout,
        )

    async def suggest_category(
        self,
        text: str,
        local_category: str,
        local_confidence: float,
        categories: Iterable[str],
    ) -> Any:
        prompt = _build_category_prompt(text, local_category, local_confidence, categories)
        return await asyncio.to_thread(
            _call_claude, _CATEGORY_SYSTEM_PROMPT, prompt, self.api_key, self.model, self.timeout,
        )


def build_remote_parser(settings: Optional[RemoteSettings] = None) -> Optional[RemoteExpenseParser]:
    """Pick the first configured backend: endpoint, then Supabase, then Claude.

    Returns None when no credentials are present.
    """
    s = settings or RemoteSettings.from_env()

    if s.endpoint_url:
        return EndpointExpenseParser(s.endpoint_url, s.endpoint_api_key, timeout=s.timeout)
    if s.supabase_url and s.supabase_key:
        return SupabaseFunctionParser(s.supabase_url, s.supabase_key, timeout=s.timeout)
    if s.anthropic_api_key:
        return ClaudeExpenseParser(s.anthropic_api_key, model=s.claude_model, timeout=s.timeout)

    logger.debug("[REMOTE_PARSER] No remote backend configured")
    return None
