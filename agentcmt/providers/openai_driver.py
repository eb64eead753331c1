from __future__ import annotations

from typing import Any, Optional

import openai

from ..config import Config
from ..exceptions import GenerationError, ProviderUnavailableError
from .base import BaseProvider

DEFAULT_TOP_P = 0.9


class OpenAIProvider(BaseProvider):
    """Driver encapsulating OpenAI chat completions through the SDK client.

    A pre-built ``client`` may be injected (tests pass a fake exposing
    ``chat.completions.create`` and ``models.list``); otherwise one is built
    lazily from the configured endpoint and API key.
    """

    name = "openai"

    def __init__(
        self,
        config: Config,
        debug: bool = False,
        client: Optional[Any] = None,
    ) -> None:
        super().__init__(config, debug)
        self._request_timeout = config.request_timeout
        self._api_key = config.resolve_api_key()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ProviderUnavailableError(
                    self.name, f"API key not set (expected in ${self.config.api_key_env})"
                )
            self._client = openai.OpenAI(
                base_url=self.config.llm_endpoint,
                api_key=self._api_key,
                timeout=self._request_timeout,
            )
        return self._client

    def is_available(self) -> bool:
        try:
            self._get_client().models.list()
        except ProviderUnavailableError:
            return False
        except openai.OpenAIError as e:
            if self.debug:
                print(f"DEBUG(Driver:OpenAI): availability probe failed: {e}")
            return False
        return True

    def _chat(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": temperature,
            "top_p": DEFAULT_TOP_P,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if self.debug:
            print("DEBUG(Driver:OpenAI): invoke")
            print(f"  model={self.config.model} max_tokens={max_tokens} json_mode={json_mode}")
        try:
            resp = client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise GenerationError(
                self.name, f"request timed out after {self._request_timeout}s"
            ) from e
        except openai.OpenAIError as e:
            raise GenerationError(self.name, f"client error: {e}") from e
        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise GenerationError(self.name, "response has no choices") from e
        if not isinstance(content, str) or not content.strip():
            raise GenerationError(self.name, "empty completion content")
        return content
