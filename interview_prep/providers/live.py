import logging
from typing import Any

from interview_prep.core.constants import DETECTION_MAX_TOKENS, DETECTION_TEMPERATURE
from interview_prep.core.logging import log_event
from interview_prep.core.models import Language
from interview_prep.core.prompts import LANGUAGE_DETECTION_PROMPT

from .base import CHAT_COMPLETIONS_ENDPOINT, ChatTransport, GenerationBackend
from .exceptions import ErrorCode, ProviderError, extract_content_from_response
from .language import detect_language_heuristic, parse_language_code


class LiveBackend(GenerationBackend):
    """Backend that sends every request to the configured model."""

    demo_mode = False

    def __init__(self, transport: ChatTransport):
        self.transport = transport

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.transport.request(CHAT_COMPLETIONS_ENDPOINT, payload)

    async def detect_language(self, sample: str, model: str) -> Language:
        if not sample:
            return Language.EN

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": LANGUAGE_DETECTION_PROMPT},
                {"role": "user", "content": sample},
            ],
            "temperature": DETECTION_TEMPERATURE,
            "max_tokens": DETECTION_MAX_TOKENS,
        }
        try:
            response = await self.transport.request(CHAT_COMPLETIONS_ENDPOINT, payload)
            content = extract_content_from_response(response)
        except Exception as e:
            # Detection never fails the caller; the keyword heuristic is always available
            fallback = detect_language_heuristic(sample)
            log_event(
                "generation.language_fallback",
                component="adapter",
                operation="detect_language",
                error_code=e.code.value if isinstance(e, ProviderError) else ErrorCode.UNKNOWN_ERROR.value,
                error_type=type(e).__name__,
                error_msg=str(e),
                language=fallback.value,
                level=logging.WARNING,
            )
            return fallback
        return parse_language_code(content)
