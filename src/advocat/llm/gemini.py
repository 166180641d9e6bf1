"""Gemini advisor client.

One request per call: the caller decides what to do on failure, there is no
retry loop here. Errors are translated into ``UpstreamOverloaded`` (the
retry-later case) or ``UpstreamError``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from google import genai
from google.genai import types

from advocat.errors import UpstreamError, UpstreamOverloaded

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]

OVERLOAD_MARKERS = ("503", "overloaded", "unavailable")


@dataclass
class Completion:
    text: str
    tokens_used: int = 0


def usage_token_count(usage: Any) -> int:
    """Total token count, or prompt + candidates when the total is absent."""
    if usage is None:
        return 0
    total = getattr(usage, "total_token_count", None) or 0
    if total > 0:
        return int(total)
    prompt = getattr(usage, "prompt_token_count", None) or 0
    candidates = getattr(usage, "candidates_token_count", None) or 0
    return int(prompt + candidates)


def upstream_status(exc: Exception) -> Optional[int]:
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def translate_error(exc: Exception) -> UpstreamError:
    status = upstream_status(exc)
    message = str(exc).lower()
    if status == 503 or (status is None and any(m in message for m in OVERLOAD_MARKERS)):
        return UpstreamOverloaded(upstream_status=503)
    return UpstreamError(upstream_status=status or 500)


def build_contents(prompt: str, history: Iterable[Dict[str, Any]] = ()) -> List[types.Content]:
    contents: List[types.Content] = []
    for msg in history or []:
        msg_text = msg.get('text') or ''
        if msg_text:
            role = 'user' if msg.get('role') == 'user' else 'model'
            contents.append(types.Content(role=role, parts=[types.Part(text=msg_text)]))
    contents.append(types.Content(role='user', parts=[types.Part(text=prompt)]))
    return contents


class GeminiAdvisor:
    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_MODEL, client: Any = None):
        self.api_key = api_key
        self.model_name = model_name or DEFAULT_MODEL
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise UpstreamError("The AI service is not configured (missing GEMINI_API_KEY).")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str, *, system_instruction: str,
                 history: Iterable[Dict[str, Any]] = (),
                 temperature: float = 0.9, max_output_tokens: int = 2048) -> Completion:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            top_k=1,
            top_p=1,
            max_output_tokens=max_output_tokens,
            safety_settings=SAFETY_SETTINGS,
        )
        client = self.client
        try:
            response = client.models.generate_content(
                model=self.model_name,
                contents=build_contents(prompt, history),
                config=config,
            )
        except Exception as e:
            err = translate_error(e)
            logger.error(f"[gemini] {self.model_name} call failed ({err.upstream_status}): {e}")
            raise err from e

        text = getattr(response, "text", None)
        if not text:
            logger.warning("[gemini] Empty response (possibly blocked by safety settings)")
            raise UpstreamError("The AI returned an empty response. Please rephrase and try again.")
        tokens_used = usage_token_count(getattr(response, "usage_metadata", None))
        logger.info(f"[gemini] tokensUsed={tokens_used}")
        return Completion(text=text, tokens_used=tokens_used)
