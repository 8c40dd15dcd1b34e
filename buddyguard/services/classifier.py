"""
Advisory classifier: free-text incident description -> suggested category,
severity and a short reasoning, from a hosted LLM.

Best-effort only. Missing credentials, network failures and malformed answers
all come back as None; nothing here raises into the caller.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Optional

import google.generativeai as genai
from openai import AsyncOpenAI

from buddyguard.core.errors import ClassifierUnavailable
from buddyguard.schemas.incident import IncidentType, Severity, Suggestion

logger = logging.getLogger(__name__)

CLASSIFIER_PROVIDER: str = os.getenv("CLASSIFIER_PROVIDER", "gemini").strip().lower()
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

MIN_DESCRIPTION_LENGTH = 10

SYSTEM_INSTRUCTION = """You triage school safety incident reports for staff. Your job is to output valid JSON only (no markdown or extra text).

Output format (use exactly these keys):
{
  "suggestedType": one of "Bullying" | "Language Misuse" | "Digital Misuse" | "Academic Dishonesty" | "Vandalism" | "Medical/Emergency" | "Behavioral Issue" | "Other",
  "severity": "Low" | "Medium" | "High",
  "reasoning": "One short sentence explaining the suggestion."
}

Rules:
- Base your output only on the description provided. Your answer is advisory; staff make the final decision.
- severity: High for injury, threats or anything needing same-day action; Low for minor one-off behaviour.
- Respond with nothing but the JSON object."""

USER_PROMPT_TEMPLATE = 'Analyze this school incident: "{description}". Suggest category and severity (Low, Medium, High).'

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "suggestedType": {"type": "STRING"},
        "severity": {"type": "STRING", "enum": ["Low", "Medium", "High"]},
        "reasoning": {"type": "STRING"},
    },
    "required": ["suggestedType", "severity", "reasoning"],
}

_SEVERITIES = {s.value.lower(): s for s in Severity}


def normalize_severity(value: Any) -> Severity:
    """'low' / 'LOW' / ' Low ' -> Low. Anything unrecognised -> Medium."""
    if isinstance(value, Severity):
        return value
    if not isinstance(value, str):
        return Severity.MEDIUM
    return _SEVERITIES.get(value.strip().lower(), Severity.MEDIUM)


def match_incident_type(suggested: str) -> IncidentType:
    """First incident type whose name appears in the suggested text, else Other."""
    text = (suggested or "").lower()
    for incident_type in IncidentType:
        if incident_type.value.lower() in text:
            return incident_type
    return IncidentType.OTHER


def _extract_json(text: str) -> dict:
    """Pull a JSON object out of the model response (handles markdown code blocks)."""
    text = text.strip()
    m = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if m:
        text = m.group(1).strip()
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def parse_suggestion(data: dict) -> Optional[Suggestion]:
    """Build a Suggestion from the model's JSON, or None if a field is missing or mistyped."""
    suggested_type = data.get("suggestedType")
    severity = data.get("severity")
    reasoning = data.get("reasoning")
    if not isinstance(suggested_type, str) or not suggested_type.strip():
        return None
    if severity is None or not isinstance(reasoning, str):
        return None
    return Suggestion(
        suggested_type=suggested_type.strip(),
        severity=normalize_severity(severity),
        reasoning=reasoning.strip(),
    )


class AdvisoryClassifier:
    """Base adapter. Providers implement _request(); suggest() handles gating and failures."""

    provider = "none"

    @property
    def enabled(self) -> bool:
        return True

    async def suggest(self, description: str) -> Optional[Suggestion]:
        description = description or ""
        if len(description) < MIN_DESCRIPTION_LENGTH:
            return None
        try:
            data = await self._request(description.strip())
        except ClassifierUnavailable as e:
            logger.info("Advisory classifier (%s) unavailable: %s", self.provider, e)
            return None
        except Exception as e:
            logger.warning("Advisory classifier (%s) failed: %s", self.provider, e)
            return None
        suggestion = parse_suggestion(data)
        if suggestion is None:
            logger.warning("Advisory classifier (%s) returned a malformed answer: %r", self.provider, data)
        return suggestion

    async def _request(self, description: str) -> dict:
        raise NotImplementedError


class DisabledClassifier(AdvisoryClassifier):
    """Stand-in when no credential is configured: the feature is simply inert."""

    def __init__(self, reason: str = "no credential configured"):
        self.reason = reason

    @property
    def enabled(self) -> bool:
        return False

    async def _request(self, description: str) -> dict:
        raise ClassifierUnavailable(self.reason)


class GeminiClassifier(AdvisoryClassifier):
    provider = "gemini"

    def __init__(self, api_key: str, model_name: str = GEMINI_MODEL):
        genai.configure(api_key=api_key)
        self.model_name = model_name

    async def _request(self, description: str) -> dict:
        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=SYSTEM_INSTRUCTION,
        )
        response = await model.generate_content_async(
            USER_PROMPT_TEMPLATE.format(description=description),
            generation_config={
                "response_mime_type": "application/json",
                "response_schema": RESPONSE_SCHEMA,
            },
        )
        raw = response.text
        if not raw:
            raise ClassifierUnavailable("Gemini returned an empty response (possibly blocked)")
        return _extract_json(raw)


class OpenAIClassifier(AdvisoryClassifier):
    provider = "openai"

    def __init__(self, api_key: str, model_name: str = OPENAI_MODEL):
        self._client = AsyncOpenAI(api_key=api_key)
        self.model_name = model_name

    async def _request(self, description: str) -> dict:
        response = await self._client.chat.completions.create(
            model=self.model_name,
            temperature=0.2,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": USER_PROMPT_TEMPLATE.format(description=description)},
            ],
        )
        raw = response.choices[0].message.content or ""
        if not raw:
            raise ClassifierUnavailable("OpenAI returned an empty response")
        return _extract_json(raw)


def _api_key(name: str) -> str:
    key = os.getenv(name, "").strip()
    # placeholder values left in .env templates count as missing
    if key.startswith("your-"):
        return ""
    return key


def build_classifier(provider: str = CLASSIFIER_PROVIDER) -> AdvisoryClassifier:
    """Pick the provider from config; a missing key yields a DisabledClassifier."""
    if provider == "openai":
        key = _api_key("OPENAI_API_KEY")
        if key:
            return OpenAIClassifier(api_key=key)
        logger.warning("OPENAI_API_KEY not set; AI risk analysis is disabled.")
        return DisabledClassifier("OPENAI_API_KEY not set")
    if provider == "gemini":
        key = _api_key("GOOGLE_API_KEY")
        if key:
            return GeminiClassifier(api_key=key)
        logger.warning("GOOGLE_API_KEY not set; AI risk analysis is disabled.")
        return DisabledClassifier("GOOGLE_API_KEY not set")
    logger.warning("Unknown CLASSIFIER_PROVIDER %r; AI risk analysis is disabled.", provider)
    return DisabledClassifier(f"unknown provider {provider!r}")
