import json

import httpx
import pytest

from contramind.core.exceptions import AIServiceError
from contramind.models.enums import ComplianceStatus, DetectedLanguage, MessageRole, RiskScore
from contramind.services.ai_service import (
    AIService,
    ChatTurn,
    bounded_history,
    estimate_tokens,
)

ANALYSIS = {
    "summary": "Employment contract for a senior engineer.",
    "riskScore": "high",
    "riskFactors": ["Non-compete for five years"],
    "shariaCompliance": "compliant",
    "shariaIssues": [],
    "ksaCompliance": "non_compliant",
    "ksaIssues": ["Probation exceeds 180 days"],
    "keyTerms": [],
    "recommendations": ["Shorten the non-compete"],
    "detectedLanguage": "mixed",
}


def service_replying(text: str, status_code: int = 200) -> AIService:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["x-goog-api-key"] == "test-key"
        assert request.url.path.endswith(":generateContent")
        return httpx.Response(
            status_code, json={"candidates": [{"content": {"parts": [{"text": text}]}}]}
        )

    return AIService(api_key="test-key", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_analyze_contract_parses_json_embedded_in_prose():
    service = service_replying("Sure! " + json.dumps(ANALYSIS) + " Let me know if you need more.")

    result = await service.analyze_contract("EMPLOYMENT CONTRACT ...")

    assert result.risk_score == RiskScore.HIGH
    assert result.sharia_compliance == ComplianceStatus.COMPLIANT
    assert result.ksa_compliance == ComplianceStatus.NON_COMPLIANT
    assert result.detected_language == DetectedLanguage.MIXED
    assert result.ksa_issues == ["Probation exceeds 180 days"]


@pytest.mark.asyncio
async def test_analyze_contract_rejects_values_outside_enums():
    service = service_replying(json.dumps(dict(ANALYSIS, ksaCompliance="maybe")))

    with pytest.raises(AIServiceError):
        await service.analyze_contract("EMPLOYMENT CONTRACT ...")


@pytest.mark.asyncio
async def test_analyze_contract_rejects_missing_fields():
    payload = {k: v for k, v in ANALYSIS.items() if k != "riskScore"}
    service = service_replying(json.dumps(payload))

    with pytest.raises(AIServiceError):
        await service.analyze_contract("EMPLOYMENT CONTRACT ...")


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403, json={"error": {"message": "API key invalid"}})

    service = AIService(api_key="test-key", transport=httpx.MockTransport(handler))

    with pytest.raises(AIServiceError):
        await service.chat("contract", [], "hello")
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_unconfigured_service_fails_fast():
    with pytest.raises(AIServiceError, match="not configured"):
        await AIService(api_key="").chat("contract", [], "hello")


@pytest.mark.asyncio
async def test_empty_chat_reply_is_an_error():
    with pytest.raises(AIServiceError):
        await service_replying("   ").chat("contract", [], "hello")


@pytest.mark.asyncio
async def test_blocked_prompt_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

    service = AIService(api_key="test-key", transport=httpx.MockTransport(handler))

    with pytest.raises(AIServiceError, match="SAFETY"):
        await service.chat("contract", [], "hello")


def test_bounded_history_keeps_latest_conversational_turns():
    turns = [ChatTurn(MessageRole.SYSTEM, "note")] + [
        ChatTurn(MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT, f"turn {i}")
        for i in range(9)
    ]

    kept = bounded_history(turns, 5)

    assert [t.content for t in kept] == ["turn 4", "turn 5", "turn 6", "turn 7", "turn 8"]
    assert bounded_history(turns, 0) == []
    assert len(bounded_history(turns[:3], 5)) == 2


def test_chat_contents_map_roles_for_the_model():
    service = AIService(api_key="test-key", history_limit=5)
    history = [ChatTurn(MessageRole.USER, "q1"), ChatTurn(MessageRole.ASSISTANT, "a1")]

    contents = service.build_chat_contents("system", history, "q2")

    assert [c["role"] for c in contents] == ["user", "model", "user", "model", "user"]
    assert contents[-1]["parts"][0]["text"] == "q2"


def test_system_prompt_language_selection():
    english = AIService.build_system_prompt("TEXT", DetectedLanguage.EN)
    mixed = AIService.build_system_prompt("TEXT", DetectedLanguage.MIXED)
    arabic = AIService.build_system_prompt("TEXT", DetectedLanguage.AR)

    assert english.startswith("You are ContraMind AI")
    assert mixed == english
    assert "العقد المرجعي" in arabic
    assert "TEXT" in arabic


def test_estimate_tokens_rounds_up():
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcd", "e") == 2
    assert estimate_tokens("") == 0
