"""Generation settings loaded from environment variables."""

import os

from pydantic import BaseModel, Field

from interview_prep.core.constants import (
    APP_TITLE,
    DEFAULT_APP_URL,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL_ID,
    DEFAULT_OPENAI_TIMEOUT_SECONDS,
    DEFAULT_OPENROUTER_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
)

SUPPORTED_VENDORS = ("openrouter", "openai")

# Credential variable per vendor
API_KEY_ENV = {
    "openrouter": "OPENROUTER_API_KEY",
    "openai": "OPENAI_API_KEY",
}

_TRUTHY = {"1", "true", "yes", "on"}


def parse_model_id(model_id: str) -> tuple[str, str]:
    """Split a ``vendor:model`` identifier.

    The model part may itself contain slashes (``openai/gpt-3.5-turbo``), so
    only the first colon separates the vendor.
    """
    if ":" not in model_id:
        raise ValueError(f"Model id must look like 'vendor:model', got '{model_id}'")
    vendor, model = model_id.split(":", 1)
    vendor = vendor.strip().lower()
    model = model.strip()
    if vendor not in SUPPORTED_VENDORS:
        raise ValueError(f"Unsupported model vendor '{vendor}'. Supported: {', '.join(SUPPORTED_VENDORS)}")
    if not model:
        raise ValueError(f"Model id '{model_id}' has an empty model name")
    return vendor, model


class GenerationConfig(BaseModel):
    """Everything the generation adapter needs to pick and configure a backend."""

    vendor: str = "openrouter"
    model: str = "openai/gpt-3.5-turbo"
    api_key: str | None = None
    demo_flag: bool = False
    base_url: str = DEFAULT_OPENROUTER_BASE_URL
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)
    cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, ge=0)
    app_url: str = DEFAULT_APP_URL
    app_title: str = APP_TITLE

    @property
    def demo_mode(self) -> bool:
        # A missing or blank credential is the only thing that forces demo mode
        return not (self.api_key and self.api_key.strip())

    @property
    def model_id(self) -> str:
        return f"{self.vendor}:{self.model}"

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        vendor, model = parse_model_id(os.getenv("MODEL_ID", DEFAULT_MODEL_ID))
        default_timeout = DEFAULT_OPENAI_TIMEOUT_SECONDS if vendor == "openai" else DEFAULT_TIMEOUT_SECONDS
        return cls(
            vendor=vendor,
            model=model,
            api_key=os.getenv(API_KEY_ENV[vendor]) or None,
            demo_flag=(os.getenv("DEMO_MODE") or "").strip().lower() in _TRUTHY,
            base_url=os.getenv("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).rstrip("/"),
            timeout_seconds=get_float_env("GENERATION_TIMEOUT_SECONDS", default_timeout, 1, 120),
            max_retries=get_int_env("GENERATION_MAX_RETRIES", DEFAULT_MAX_RETRIES, 1, 10),
            cache_ttl_seconds=get_float_env("RESPONSE_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS, 0, 86_400),
            app_url=os.getenv("APP_URL", DEFAULT_APP_URL),
        )


def get_int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    """Read an integer setting, falling back to the default when unset, unparsable or out of range."""
    try:
        value = int(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default
    if not minimum <= value <= maximum:
        return default
    return value


def get_float_env(name: str, default: float, minimum: float, maximum: float) -> float:
    try:
        value = float(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default
    if not minimum <= value <= maximum:
        return default
    return value
