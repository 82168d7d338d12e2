import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from interview_prep.core.config import GenerationConfig
from interview_prep.core.constants import (
    GENERATION_MAX_TOKENS,
    GENERATION_TEMPERATURE,
    LANGUAGE_SAMPLE_LENGTH,
)
from interview_prep.core.logging import log_event, mask_text, span
from interview_prep.core.models import GeneratedQuestionSet, Language, Question
from interview_prep.core.prompts import question_response_format, system_prompt

from .base import CHAT_COMPLETIONS_ENDPOINT, ChatTransport, GenerationBackend
from .cache import ResponseCache
from .demo import DemoBackend
from .exceptions import (
    ErrorCode,
    ProviderError,
    Sleep,
    extract_content_from_response,
    parse_json_response,
)
from .live import LiveBackend
from .sanitizer import sanitize

QUALITY_ERROR_MESSAGE = "Generated questions do not meet quality requirements"


class GenerationAdapter:
    """Turns a job posting into five validated interview questions.

    The backend (live model or offline demo data) is fixed at construction.
    Every failure surfaces as a ``ProviderError`` with a classified code; the
    adapter never returns a partial result.
    """

    def __init__(self, backend: GenerationBackend, model: str, cache: ResponseCache | None = None):
        self.backend = backend
        self.cache = cache if cache is not None else ResponseCache()
        self._model = model
        self._last_error: ProviderError | None = None

    @property
    def is_demo_mode(self) -> bool:
        return self.backend.demo_mode

    @property
    def last_error(self) -> ProviderError | None:
        return self._last_error

    @property
    def model(self) -> str:
        return self._model

    def set_model(self, model: str) -> None:
        if not model or not model.strip():
            raise ValueError("Model name must not be empty")
        self._model = model.strip()

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> dict[str, int]:
        return self.cache.stats()

    async def detect_language(self, text: str) -> Language:
        sample = sanitize(text)[:LANGUAGE_SAMPLE_LENGTH]
        language = await self.backend.detect_language(sample, self._model)
        log_event(
            "generation.language_detected",
            component="adapter",
            operation="detect_language",
            language=language.value,
            demo_mode=self.is_demo_mode,
        )
        return language

    def _build_payload(self, language: Language, posting: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt(language)},
                {"role": "user", "content": posting},
            ],
            "response_format": question_response_format(),
            "temperature": GENERATION_TEMPERATURE,
            "max_tokens": GENERATION_MAX_TOKENS,
        }

    def _parse_questions(self, response: dict[str, Any]) -> list[Question]:
        content = extract_content_from_response(response)
        data = parse_json_response(content, {"operation": "generate_questions", "model": self._model})

        raw_questions = data.get("questions") if isinstance(data, dict) else None
        if not isinstance(raw_questions, list):
            raise ProviderError(ErrorCode.INVALID_RESPONSE, "API response has no questions list")

        try:
            question_set = GeneratedQuestionSet.model_validate(
                {"questions": [{"text": text} for text in raw_questions]}
            )
        except ValidationError as e:
            log_event(
                "generation.validation_failed",
                component="adapter",
                operation="generate_questions",
                model=self._model,
                received=len(raw_questions),
                error_count=e.error_count(),
                level=logging.WARNING,
            )
            raise ProviderError(ErrorCode.INVALID_RESPONSE, QUALITY_ERROR_MESSAGE, cause=e) from e
        return question_set.questions

    async def generate_questions(self, job_posting: str) -> list[Question]:
        posting = sanitize(job_posting)
        with span(
            "generation.generate_questions",
            component="adapter",
            operation="generate_questions",
            model=self._model,
            demo_mode=self.is_demo_mode,
            input_len=len(posting),
            posting=mask_text(posting),
        ):
            try:
                language = await self.detect_language(posting)
                payload = self._build_payload(language, posting)
                response = await self.backend.complete(payload)
                try:
                    return self._parse_questions(response)
                except ProviderError:
                    # A body that parsed as HTTP success but failed validation must not be replayed
                    self.cache.delete(ResponseCache.make_key(CHAT_COMPLETIONS_ENDPOINT, payload))
                    raise
            except ProviderError as e:
                self._last_error = e
                raise
            except Exception as e:
                error = ProviderError(ErrorCode.UNKNOWN_ERROR, "Failed to generate questions", cause=e)
                self._last_error = error
                raise error from e


def build_adapter(
    config: GenerationConfig,
    sleep: Sleep = asyncio.sleep,
    **transport_options: Any,
) -> GenerationAdapter:
    """Pick the demo or live backend once, based on whether a credential is configured."""
    cache = ResponseCache(default_ttl=config.cache_ttl_seconds)

    backend: GenerationBackend
    if config.demo_mode:
        log_event(
            "generation.demo_mode",
            component="adapter",
            operation="build",
            reason="flag" if config.demo_flag else "missing_api_key",
            level=logging.WARNING,
        )
        backend = DemoBackend(sleep=sleep)
    else:
        if config.demo_flag:
            log_event(
                "generation.demo_flag_ignored",
                component="adapter",
                operation="build",
                reason="api_key_configured",
                level=logging.WARNING,
            )
        backend = LiveBackend(ChatTransport.from_config(config, cache=cache, sleep=sleep, **transport_options))

    log_event(
        "generation.adapter_ready",
        component="adapter",
        operation="build",
        vendor=config.vendor,
        model=config.model,
        demo_mode=backend.demo_mode,
    )
    return GenerationAdapter(backend, model=config.model, cache=cache)
