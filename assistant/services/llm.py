from __future__ import annotations

import json
import logging
from pathlib import Path

import anyio
import google.generativeai as genai
from pydantic import ValidationError

from ..config import get_settings
from ..schemas.intent import ClassifiedIntent

logger = logging.getLogger(__name__)

DEFAULT_INTENT_PROMPT = """\
You are a personal assistant inside a Telegram bot that tracks finances and hydration.
Classify the user's message and answer with a single JSON object, no prose:
{"type": "finance_transaction" | "health_water" | "chat", "data": {...}, "response": "..."}

- finance_transaction: the user spent or received money.
  data = {"type": "income" | "expense", "amount": number, "categoryName": string,
          "categoryEmoji": single emoji, "description": short string}
- health_water: the user drank water.
  data = {"amountMl": integer millilitres}
- chat: anything else. data = {}

"response" is a short, friendly confirmation or answer in the user's language.

Message:
"""


class IntentClassificationError(RuntimeError):
    """Raised when the LLM cannot return a usable intent."""


class GeminiIntentClassifier:
    """Thin wrapper around Google's Gemini API that tags free text with an intent."""

    def __init__(self, prompt_path: Path | None = None) -> None:
        settings = get_settings()
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured.")
        genai.configure(api_key=settings.gemini_api_key)
        self.model = genai.GenerativeModel(settings.gemini_model)
        self.prompt = self._load_prompt(prompt_path or settings.llm_intent_prompt_path)

    @staticmethod
    def _load_prompt(path: Path) -> str:
        if path.exists():
            return path.read_text(encoding="utf-8")
        return DEFAULT_INTENT_PROMPT

    def _call_model(self, text: str) -> str:
        response = self.model.generate_content(self.prompt + text)
        if not response or not response.text:
            raise IntentClassificationError("Gemini did not return any text.")
        return response.text

    @staticmethod
    def _clean_model_output(raw_text: str) -> str:
        """Remove Markdown code fences that Gemini may wrap around JSON."""
        text = raw_text.strip()
        if text.startswith("```"):
            first_newline = text.find("\n")
            text = text[first_newline + 1 :] if first_newline != -1 else ""
        if text.endswith("```"):
            text = text[: text.rfind("```")]
        return text.strip()

    @classmethod
    def parse_output(cls, raw_text: str) -> ClassifiedIntent:
        cleaned_text = cls._clean_model_output(raw_text)
        try:
            payload = json.loads(cleaned_text)
        except json.JSONDecodeError:
            # Plain prose means the model chose to just chat.
            logger.info("Classifier returned non-JSON output; treating it as chat.")
            return ClassifiedIntent(response=cleaned_text)
        try:
            return ClassifiedIntent.model_validate(payload)
        except ValidationError as exc:
            raise IntentClassificationError(f"Unexpected classifier payload: {raw_text}") from exc

    async def classify(self, text: str) -> ClassifiedIntent:
        raw_text = await anyio.to_thread.run_sync(self._call_model, text)
        return self.parse_output(raw_text)


_classifier: GeminiIntentClassifier | None = None


def get_intent_classifier() -> GeminiIntentClassifier:
    global _classifier
    if _classifier is None:
        _classifier = GeminiIntentClassifier()
    return _classifier
