import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from contramind.core.config import Settings
from contramind.core.exceptions import AIServiceError
from contramind.models.enums import DetectedLanguage, MessageRole
from contramind.schemas.analysis import ContractAnalysisResult

logger = logging.getLogger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

CHAT_ACKNOWLEDGEMENT = "I understand. I'm ready to answer questions about this contract."

ANALYSIS_PROMPT_TEMPLATE = """You are an expert legal AI assistant specializing in Saudi Arabian contract law, Sharia compliance, and KSA regulatory requirements.

Analyze the following contract and provide a comprehensive analysis in JSON format with the following structure:

{{
  "summary": "Brief 2-3 sentence summary of the contract",
  "riskScore": "low" | "medium" | "high",
  "riskFactors": ["list of identified risk factors"],
  "shariaCompliance": "compliant" | "non_compliant" | "requires_review",
  "shariaIssues": ["list of Sharia compliance issues if any"],
  "ksaCompliance": "compliant" | "non_compliant" | "requires_review",
  "ksaIssues": ["list of KSA regulatory compliance issues if any"],
  "keyTerms": [
    {{
      "term": "term name",
      "definition": "explanation",
      "importance": "why this term matters"
    }}
  ],
  "recommendations": ["actionable recommendations for the user"],
  "detectedLanguage": "en" | "ar" | "mixed"
}}

Consider:
1. Risk Assessment: Identify unfair terms, liability issues, payment terms, termination clauses
2. Sharia Compliance: Check for interest (riba), excessive uncertainty (gharar), gambling (maysir), prohibited activities
3. KSA Regulatory Compliance: Saudi Labor Law, Commercial Law, Consumer Protection Law
4. Key Terms: Important clauses, obligations, rights, and restrictions
5. Language: Detect if contract is in English, Arabic, or mixed

Contract Text:
{contract_text}

Provide only the JSON response, no additional text."""

CHAT_SYSTEM_PROMPT_EN = """You are ContraMind AI, an expert legal assistant specializing in Saudi Arabian contract analysis. You have expertise in Saudi law, Sharia compliance, and KSA regulatory requirements.

Reference Contract:
{contract_text}

When answering questions, ALWAYS follow this structure:

1. Start with: "ContraMind AI recommends to:"
2. Use Markdown tables for structured analysis with columns: Clause #/Title | Contract Extract | Issue/Concern | Recommendation
3. Provide an executive summary (<= 150 words) after the table highlighting top 3 risks/issues
4. Use formal legal English suitable for professional review
5. Organize your answer with clear headings and sections
6. For risk analysis, categorize by: Financial, Legal, Operational, Compliance
7. For Sharia compliance, check: Riba (interest), Gharar (uncertainty), prohibited activities
8. For KSA compliance, reference: Labor Law, Commercial Law, Consumer Protection Law

Provide practical, actionable, and professionally structured responses."""

CHAT_SYSTEM_PROMPT_AR = """أنت مساعد قانوني متخصص في تحليل العقود السعودية باسم ContraMind AI. لديك خبرة في القانون السعودي والامتثال الشرعي والأنظمة التنظيمية في المملكة العربية السعودية.

العقد المرجعي:
{contract_text}

عند الإجابة على الأسئلة:
1. ابدأ دائماً بعبارة: "ContraMind AI يوصي بـ:"
2. استخدم جداول Markdown للتحليل المنظم
3. قدم ملخصاً تنفيذياً (≤ 150 كلمة) بعد الجدول
4. استخدم لغة قانونية رسمية ومهنية
5. نظم الإجابة بوضوح مع عناوين وأقسام

قدم إجابات عملية ومفيدة ومنظمة بشكل احترافي."""


@dataclass(frozen=True)
class ChatTurn:
    role: MessageRole
    content: str


@dataclass(frozen=True)
class ChatReply:
    response: str
    tokens_used: int


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429 or exc.response.status_code >= 500
    return False


def bounded_history(turns: Iterable[ChatTurn], limit: int) -> List[ChatTurn]:
    """Keep the last ``limit`` user/assistant turns, oldest first."""
    if limit <= 0:
        return []
    conversational = [t for t in turns if t.role in (MessageRole.USER, MessageRole.ASSISTANT)]
    return conversational[-limit:]


def estimate_tokens(*parts: str) -> int:
    """Rough token count (4 characters per token)."""
    return math.ceil(sum(len(p) for p in parts) / 4)


class AIService:
    """Client for the generative-AI text completion API (Gemini REST)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
        history_limit: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.history_limit = history_limit
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "AIService":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.AI_TIMEOUT_SECONDS,
            history_limit=settings.CHAT_HISTORY_LIMIT,
        )

    # ------------------------------------------------------------------ analysis

    @staticmethod
    def build_analysis_prompt(contract_text: str) -> str:
        return ANALYSIS_PROMPT_TEMPLATE.format(contract_text=contract_text)

    async def analyze_contract(self, contract_text: str) -> ContractAnalysisResult:
        """
        Ask the model for a risk and compliance analysis of ``contract_text``.

        Raises:
            AIServiceError: the call failed or the reply did not contain a valid
                analysis object (missing fields or values outside the enums).
        """
        prompt = self.build_analysis_prompt(contract_text)
        text = await self._call_llm([self._content(MessageRole.USER, prompt)])
        payload = self._parse_llm_response(text)
        try:
            return ContractAnalysisResult.model_validate(payload)
        except ValidationError as exc:
            logger.warning("AI analysis failed validation: %s", exc.errors()[:3])
            raise AIServiceError("AI analysis response did not match the expected format") from exc

    # ---------------------------------------------------------------------- chat

    @staticmethod
    def build_system_prompt(contract_text: str, language: DetectedLanguage | str | None) -> str:
        template = CHAT_SYSTEM_PROMPT_AR if language == DetectedLanguage.AR else CHAT_SYSTEM_PROMPT_EN
        return template.format(contract_text=contract_text)

    def build_chat_contents(
        self,
        system_prompt: str,
        history: Sequence[ChatTurn],
        user_message: str,
    ) -> List[dict[str, Any]]:
        """Reference text, acknowledgement, the bounded history, then the new input."""
        contents = [
            self._content(MessageRole.USER, system_prompt),
            self._content(MessageRole.ASSISTANT, CHAT_ACKNOWLEDGEMENT),
        ]
        for turn in bounded_history(history, self.history_limit):
            contents.append(self._content(turn.role, turn.content))
        contents.append(self._content(MessageRole.USER, user_message))
        return contents

    async def chat(
        self,
        contract_text: str,
        history: Sequence[ChatTurn],
        user_message: str,
        language: DetectedLanguage | str | None = DetectedLanguage.EN,
    ) -> ChatReply:
        system_prompt = self.build_system_prompt(contract_text, language)
        contents = self.build_chat_contents(system_prompt, history, user_message)
        text = await self._call_llm(contents)
        if not text.strip():
            raise AIServiceError("AI service returned an empty response")
        return ChatReply(
            response=text,
            tokens_used=estimate_tokens(system_prompt, user_message, text),
        )

    # ------------------------------------------------------------------ plumbing

    @staticmethod
    def _content(role: MessageRole, text: str) -> dict[str, Any]:
        return {
            "role": "user" if role == MessageRole.USER else "model",
            "parts": [{"text": text}],
        }

    @staticmethod
    def _parse_llm_response(text: str) -> dict:
        match = JSON_OBJECT_PATTERN.search(text or "")
        if not match:
            raise AIServiceError("Failed to extract JSON from AI response")
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise AIServiceError("AI response contained malformed JSON") from exc
        if not isinstance(payload, dict):
            raise AIServiceError("AI response JSON was not an object")
        return payload

    @staticmethod
    def _extract_text(result: dict) -> str:
        candidates = result.get("candidates") or []
        if not candidates:
            feedback = result.get("promptFeedback") or {}
            raise AIServiceError(
                f"AI service returned no candidates (block reason: {feedback.get('blockReason', 'unknown')})"
            )
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def _call_llm(self, contents: List[dict[str, Any]]) -> str:
        if not self.api_key:
            raise AIServiceError("AI service is not configured")
        try:
            result = await self._post_generate(contents)
        except httpx.HTTPStatusError as exc:
            logger.error("AI call failed with status %s", exc.response.status_code)
            raise AIServiceError(f"AI service error {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("AI call failed: %s", exc)
            raise AIServiceError("Failed to communicate with AI service") from exc
        return self._extract_text(result)

    @retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        reraise=True,
    )
    async def _post_generate(self, contents: List[dict[str, Any]]) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            logger.info("Calling AI model %s (%d content parts)", self.model, len(contents))
            response = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json={"contents": contents},
            )
            response.raise_for_status()
            return response.json()
