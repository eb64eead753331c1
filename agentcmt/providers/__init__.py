"""Language model backends for agentcmt."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Optional, Union

from ..config import DEFAULT_MODELS, Config, get_active_config
from .base import (
    BaseProvider,
    GenerationOptions,
    extract_json_object,
    parse_commit_response,
)
from .mistral_driver import MistralProvider
from .ollama_driver import OllamaProvider
from .openai_driver import OpenAIProvider


class ProviderKind(str, Enum):
    OLLAMA = "ollama"
    MISTRAL = "mistral"
    OPENAI = "openai"


_PROVIDERS: dict[ProviderKind, type[BaseProvider]] = {
    ProviderKind.OLLAMA: OllamaProvider,
    ProviderKind.MISTRAL: MistralProvider,
    ProviderKind.OPENAI: OpenAIProvider,
}


def create_provider(
    kind: Union[ProviderKind, str, None] = None,
    config: Optional[Config] = None,
    debug: bool = False,
) -> BaseProvider:
    """Build the backend for ``kind`` (defaults to the configured provider).

    When ``kind`` differs from the configured provider, that provider's
    default model, endpoint and key variable are used instead. Raises
    ValueError for a name outside ProviderKind.
    """
    cfg = config or get_active_config()
    resolved = ProviderKind(kind or cfg.provider)
    if resolved.value != cfg.provider:
        defaults = DEFAULT_MODELS[resolved.value]
        cfg = replace(
            cfg,
            provider=resolved.value,
            model=defaults["model"],
            llm_endpoint=defaults["endpoint"],
            api_key_env=defaults["api_key_env"],
        )
    return _PROVIDERS[resolved](cfg, debug=debug)


__all__ = [
    "BaseProvider",
    "GenerationOptions",
    "MistralProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderKind",
    "create_provider",
    "extract_json_object",
    "parse_commit_response",
]
