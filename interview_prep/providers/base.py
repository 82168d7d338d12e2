import importlib
from typing import Any

from interview_prep.core.config import GenerationConfig
from interview_prep.core.models import Language

from .cache import ResponseCache

CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"


class ChatTransport:
    """Sends chat-completion payloads to a hosted model and returns the decoded body."""

    async def request(self, endpoint: str, payload: dict[str, Any], use_cache: bool = True) -> dict[str, Any]:
        raise NotImplementedError

    @staticmethod
    def from_config(config: GenerationConfig, cache: ResponseCache | None = None, **options: Any) -> "ChatTransport":
        # Imported lazily so each vendor's SDK is only loaded when selected
        transport_map = {
            "openrouter": ("interview_prep.providers.openrouter", "OpenRouterClient"),
            "openai": ("interview_prep.providers.openai", "OpenAIChatClient"),
        }
        if config.vendor not in transport_map:
            raise ValueError(f"Unknown provider '{config.vendor}'")

        module_name, class_name = transport_map[config.vendor]
        transport_cls = getattr(importlib.import_module(module_name), class_name)
        return transport_cls.from_config(config, cache=cache, **options)


class GenerationBackend:
    """Strategy the adapter uses for completions and language detection.

    Exactly one backend is picked when the adapter is built: the live one
    talks to the model, the demo one answers from canned data.
    """

    demo_mode: bool = False

    async def complete(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Run a generation request and return a chat-completion shaped body."""
        raise NotImplementedError

    async def detect_language(self, sample: str, model: str) -> Language:
        """Detect the language of an already sanitized sample. Never raises."""
        raise NotImplementedError
