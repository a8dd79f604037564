"""
Processamento de transcrições com Gemini (resumo ou prompt livre).
"""

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache
from google import genai
from google.genai import types

from ..exceptions import ScribeError
from ..models import Transcription

logger = logging.getLogger(__name__)

_gemini_client = None

SUMMARY_PROMPT = """You are an assistant for court reporters and attorneys.
Summarize the legal transcript below. Keep it factual and neutral.

Return:
1. A short overview of the proceeding.
2. The key statements made by each speaker.
3. Any dates, names, exhibits or case numbers mentioned.

Transcript:
{content}"""

CUSTOM_PROMPT = """You are an assistant for court reporters and attorneys.
Answer the request below using only the legal transcript provided.

Request:
{prompt}

Transcript:
{content}"""

ACTIONS = ("summarize", "custom")


class RateLimitExceeded(ScribeError):
    error_code = "RATE_LIMIT_ERROR"
    status_code = 429


def get_gemini_client():
    global _gemini_client
    if _gemini_client:
        return _gemini_client

    api_key = getattr(settings, "GEMINI_API_KEY", None)
    if not api_key:
        raise ScribeError("GEMINI_API_KEY not configured")

    _gemini_client = genai.Client(api_key=api_key)
    return _gemini_client


def enforce_gemini_rate_limit(user_id: str, kind: str) -> None:
    """Janela fixa por usuário via cache do Django."""
    user_key = (user_id or "unknown").strip()
    k = (kind or "generic").strip().lower()

    window_seconds = int(getattr(settings, "GEMINI_RATE_LIMIT_WINDOW_SECONDS", 60) or 60)
    max_calls = int(getattr(settings, "GEMINI_RATE_LIMIT_MAX_CALLS", 20) or 20)

    cache_key = f"gemini_rl:{k}:{user_key}"
    cache.add(cache_key, 0, timeout=window_seconds)
    current = cache.incr(cache_key)

    if int(current) > int(max_calls):
        raise RateLimitExceeded(
            f"You have reached the limit of {max_calls} AI requests per {window_seconds} seconds."
        )


def log_gemini_usage(response, user_id: str, kind: str, model: str) -> None:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return

    logger.info(
        "[gemini_usage] user=%s kind=%s model=%s prompt_tokens=%s output_tokens=%s total_tokens=%s",
        user_id,
        kind,
        model,
        getattr(usage, "prompt_token_count", None),
        getattr(usage, "candidates_token_count", None),
        getattr(usage, "total_token_count", None),
    )


class AIService:
    """Serviço de processamento de texto das transcrições."""

    @staticmethod
    def build_prompt(content: str, action: str, prompt: Optional[str] = None) -> str:
        if action not in ACTIONS:
            raise ScribeError(f"action must be one of: {', '.join(ACTIONS)}")

        if action == "custom":
            prompt = (prompt or "").strip()
            if not prompt:
                raise ScribeError("prompt is required for custom processing")
            return CUSTOM_PROMPT.format(prompt=prompt, content=content)

        return SUMMARY_PROMPT.format(content=content)

    @staticmethod
    def process_transcript(
        transcription: Transcription,
        action: str,
        prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        content = (transcription.content or "").strip()
        if not content:
            raise ScribeError("Transcription has no content to process")

        full_prompt = AIService.build_prompt(content, action, prompt)
        user_id = str(transcription.user_id)
        enforce_gemini_rate_limit(user_id, action)

        model = getattr(settings, "GEMINI_MODEL", "gemini-2.5-flash")
        client = get_gemini_client()

        response = client.models.generate_content(
            model=model,
            contents=full_prompt,
            config=types.GenerateContentConfig(
                temperature=float(getattr(settings, "GEMINI_TEMPERATURE", 0.2)),
            ),
        )
        log_gemini_usage(response, user_id, action, model)

        result = (response.text or "").strip()
        logger.info(f"[ai] {action} concluído para transcrição {transcription.transcription_id}")

        return {
            "transcription_id": str(transcription.transcription_id),
            "action": action,
            "result": result,
            "model": model,
        }
