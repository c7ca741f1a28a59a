"""Tests for the remote augmentation layer: response validation and backends.

No network calls: requests, the Supabase client and the Claude call are
all replaced with mocks.
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import MagicMock

import pytest
import requests

from expense_parser.config import RemoteSettings
from expense_parser.parsing import remote
from expense_parser.parsing.remote import (
    CategorySuggestion,
    ClaudeExpenseParser,
    EndpointExpenseParser,
    RemoteParseError,
    SupabaseFunctionParser,
    build_remote_parser,
    validate_category_suggestion,
    validate_remote_payload,
)


def _run(coro):
    """Helper to run an async function from sync test code."""
    return asyncio.run(coro)


_GOOD = {
    "amount": 5,
    "description": "Coffee at Starbucks",
    "category": "Food & Dining",
    "type": "expense",
    "confidence": {"amount": 0.95, "description": 0.9, "category": 0.95, "type": 0.9},
    "merchant": "Starbucks",
    "reasoning": "Coffee purchase at a known chain",
}


def _with(**changes):
    payload = json.loads(json.dumps(_GOOD))
    payload.update(changes)
    return payload


# ── Payload validation ─────────────────────────────────────────────────────

def test_valid_payload():
    p = validate_remote_payload(_GOOD)
    assert p.amount == 5.0
    assert p.category == "Food & Dining"
    assert p.confidence.category == 0.95
    assert p.merchant == "Starbucks"


def test_payload_from_json_text_with_fences():
    raw = "```json\n" + json.dumps(_GOOD) + "\n```"
    assert validate_remote_payload(raw).description == "Coffee at Starbucks"


def test_payload_from_bytes():
    assert validate_remote_payload(json.dumps(_GOOD).encode()).amount == 5.0


def test_extra_fields_ignored():
    p = validate_remote_payload(_with(parsingMethod="ai_enhanced", currency="SGD"))
    assert p.amount == 5.0


def test_missing_optional_fields():
    payload = _with()
    del payload["merchant"]
    del payload["reasoning"]
    p = validate_remote_payload(payload)
    assert p.merchant is None
    assert p.reasoning is None


def test_non_string_merchant_dropped():
    assert validate_remote_payload(_with(merchant=42)).merchant is None


def test_confidence_clamped():
    p = validate_remote_payload(_with(confidence={"amount": 1.7, "description": -1, "category": 0.5, "type": 1}))
    assert p.confidence.amount == 1.0
    assert p.confidence.description == 0.0


@pytest.mark.parametrize(
    "payload",
    [
        _with(amount="5"),
        _with(amount=True),
        _with(amount=-3),
        _with(amount=None),
        _with(type="transfer"),
        _with(category=7),
        _with(confidence={"amount": 0.9}),
        _with(confidence={"amount": "high", "description": 0.9, "category": 0.9, "type": 0.9}),
        {"amount": 5},
    ],
)
def test_malformed_payload_rejected(payload):
    with pytest.raises(RemoteParseError):
        validate_remote_payload(payload)


def test_non_object_rejected():
    with pytest.raises(RemoteParseError):
        validate_remote_payload([_GOOD])
    with pytest.raises(RemoteParseError):
        validate_remote_payload("not json at all")
    with pytest.raises(RemoteParseError):
        validate_remote_payload(None)


def test_category_suggestion_aliases():
    s = validate_category_suggestion(
        {"suggestedCategory": "Groceries", "confidence": 0.8, "reasoning": "store", "shouldUpdate": True},
    )
    assert s.suggested_category == "Groceries"
    assert s.should_update is True


def test_category_suggestion_defaults():
    s = validate_category_suggestion({"suggestedCategory": "Health", "confidence": "sure"})
    assert s.confidence == 0.5
    assert s.reasoning == "AI categorization"
    assert s.should_update is False
    assert CategorySuggestion(suggested_category="Other").suggested_category == "Other"


# ── Endpoint backend ───────────────────────────────────────────────────────

def test_endpoint_posts_text_and_categories(monkeypatch):
    response = MagicMock()
    response.json.return_value = _GOOD
    post = MagicMock(return_value=response)
    monkeypatch.setattr(remote.requests, "post", post)

    backend = EndpointExpenseParser("https://parser.example/api", api_key="secret", timeout=3)
    raw = _run(backend.parse("coffee 5 bucks starbucks", ("Food & Dining", "Other")))

    assert raw == _GOOD
    args, kwargs = post.call_args
    assert args[0] == "https://parser.example/api"
    assert kwargs["json"] == {"text": "coffee 5 bucks starbucks", "categories": ["Food & Dining", "Other"]}
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["timeout"] == 3


def test_endpoint_network_error_wrapped(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(remote.requests, "post", boom)
    backend = EndpointExpenseParser("https://parser.example/api")
    with pytest.raises(RemoteParseError):
        _run(backend.parse("thing 5", ("Other",)))


def test_endpoint_http_error_wrapped(monkeypatch):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    monkeypatch.setattr(remote.requests, "post", MagicMock(return_value=response))
    backend = EndpointExpenseParser("https://parser.example/api")
    with pytest.raises(RemoteParseError):
        _run(backend.parse("thing 5", ("Other",)))


def test_endpoint_without_fallback_url():
    backend = EndpointExpenseParser("https://parser.example/api")
    with pytest.raises(RemoteParseError):
        _run(backend.suggest_category("thing", "Other", 0.3, ("Other",)))


# ── Supabase backend ───────────────────────────────────────────────────────

def test_supabase_invokes_parse_function():
    client = MagicMock()
    client.functions.invoke.return_value = json.dumps(_GOOD).encode()

    backend = SupabaseFunctionParser("https://proj.supabase.co", "anon")
    backend._client = client

    raw = _run(backend.parse("coffee 5 bucks starbucks", ("Food & Dining", "Other")))
    assert validate_remote_payload(raw).amount == 5.0

    args, kwargs = client.functions.invoke.call_args
    assert args[0] == "parse-expense"
    assert kwargs["invoke_options"]["body"]["text"] == "coffee 5 bucks starbucks"


def test_supabase_category_fallback_function():
    client = MagicMock()
    client.functions.invoke.return_value = {"suggestedCategory": "Health", "shouldUpdate": True}
    backend = SupabaseFunctionParser("https://proj.supabase.co", "anon")
    backend._client = client

    raw = _run(backend.suggest_category("guardian run", "Other", 0.3, ("Health", "Other")))
    assert validate_category_suggestion(raw).suggested_category == "Health"
    assert client.functions.invoke.call_args[0][0] == "parse-expense-fallback"
    body = client.functions.invoke.call_args[1]["invoke_options"]["body"]
    assert body == {"text": "guardian run", "localCategory": "Other", "localConfidence": 0.3}


def test_supabase_failure_wrapped():
    client = MagicMock()
    client.functions.invoke.side_effect = RuntimeError("relay error")
    backend = SupabaseFunctionParser("https://proj.supabase.co", "anon")
    backend._client = client
    with pytest.raises(RemoteParseError):
        _run(backend.parse("thing", ("Other",)))


# ── Claude backend ─────────────────────────────────────────────────────────

def test_claude_backend_builds_prompt(monkeypatch):
    captured: dict = {}

    def mock_call_claude(system_prompt, user_prompt, api_key, model, timeout):
        captured.update(system=system_prompt, user=user_prompt, key=api_key, model=model)
        return json.dumps(_GOOD)

    monkeypatch.setattr(remote, "_call_claude", mock_call_claude)
    backend = ClaudeExpenseParser("sk-test", model="claude-test")

    raw = _run(backend.parse("coffee 5 bucks starbucks", ("Food & Dining", "Other")))
    assert validate_remote_payload(raw).merchant == "Starbucks"
    assert '"coffee 5 bucks starbucks"' in captured["user"]
    assert "Food & Dining, Other" in captured["user"]
    assert captured["key"] == "sk-test"
    assert captured["model"] == "claude-test"


def test_call_claude_strips_fences(monkeypatch):
    import anthropic

    message = MagicMock()
    message.content = [MagicMock(text="```json\n{\"amount\": 5}\n```")]
    client = MagicMock()
    client.messages.create.return_value = message
    monkeypatch.setattr(anthropic, "Anthropic", MagicMock(return_value=client))

    out = remote._call_claude("system", "user", "sk-test", "claude-test", 2.0)
    assert out == '{"amount": 5}'
    kwargs = client.messages.create.call_args[1]
    assert kwargs["model"] == "claude-test"
    assert kwargs["system"] == "system"


# ── Backend selection ──────────────────────────────────────────────────────

def test_build_remote_parser_priority():
    everything = RemoteSettings(
        endpoint_url="https://parser.example/api",
        supabase_url="https://proj.supabase.co",
        supabase_key="anon",
        anthropic_api_key="sk-test",
    )
    assert isinstance(build_remote_parser(everything), EndpointExpenseParser)

    no_endpoint = RemoteSettings(
        supabase_url="https://proj.supabase.co", supabase_key="anon", anthropic_api_key="sk-test",
    )
    assert isinstance(build_remote_parser(no_endpoint), SupabaseFunctionParser)

    claude_only = RemoteSettings(anthropic_api_key="sk-test", timeout=2.5)
    backend = build_remote_parser(claude_only)
    assert isinstance(backend, ClaudeExpenseParser)
    assert backend.timeout == 2.5


def test_build_remote_parser_none_configured():
    assert build_remote_parser(RemoteSettings()) is None
    assert build_remote_parser(RemoteSettings(supabase_url="https://proj.supabase.co")) is None


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("EXPENSE_PARSER_ENDPOINT", "https://parser.example/api")
    monkeypatch.setenv("EXPENSE_PARSER_AI_TIMEOUT", "3.5")
    settings = RemoteSettings.from_env()
    assert settings.endpoint_url == "https://parser.example/api"
    assert settings.timeout == 3.5
    assert settings.any_configured


def test_settings_bad_timeout_uses_default(monkeypatch):
    monkeypatch.setenv("EXPENSE_PARSER_AI_TIMEOUT", "soon")
    assert RemoteSettings.from_env().timeout == 8.0
    monkeypatch.setenv("EXPENSE_PARSER_AI_TIMEOUT", "-1")
    assert RemoteSettings.from_env().timeout == 8.0
