from __future__ import annotations

from typing import Any

import httpx

from ..config import Config
from ..exceptions import GenerationError, ProviderUnavailableError
from .base import BaseProvider

AVAILABILITY_TIMEOUT = 5.0


class MistralProvider(BaseProvider):
    """Driver for the hosted Mistral chat completions API."""

    name = "mistral"

    def __init__(self, config: Config, debug: bool = False) -> None:
        super().__init__(config, debug)
        self._base_url = (config.llm_endpoint or "https://api.mistral.ai").rstrip("/")
        self._request_timeout = config.request_timeout
        self._api_key = config.resolve_api_key()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key or ''}",
            "Content-Type": "application/json",
        }

    def is_available(self) -> bool:
        if not self._api_key:
            return False
        try:
            resp = httpx.get(
                f"{self._base_url}/v1/models",
                headers=self._headers(),
                timeout=AVAILABILITY_TIMEOUT,
            )
        except httpx.HTTPError as e:
            if self.debug:
                print(f"DEBUG(Driver:Mistral): availability probe failed: {e}")
            return False
        return int(getattr(resp, "status_code", 200)) < 400

    def _chat(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        if not self._api_key:
            raise ProviderUnavailableError(
                self.name, f"API key not set (expected in ${self.config.api_key_env})"
            )
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        if self.debug:
            print("DEBUG(Driver:Mistral): chat")
            print(f"  model={self.config.model} json_mode={json_mode}")
        try:
            response = httpx.post(
                f"{self._base_url}/v1/chat/completions",
                headers=self._headers(),
                json=payload,
                timeout=self._request_timeout,
            )
        except httpx.TimeoutException as e:
            raise GenerationError(
                self.name, f"request timed out after {self._request_timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(self.name, f"network error: {e}") from e
        status = getattr(response, "status_code", 200)
        if status and int(status) >= 400:
            raise GenerationError(
                self.name,
                "API error {}: {}".format(status, getattr(response, "text", "<no body>")),
            )
        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(self.name, f"invalid JSON body: {e}") from e
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(self.name, "response has no choices") from e
        if not isinstance(content, str):
            raise GenerationError(self.name, "response content is not text")
        return content
