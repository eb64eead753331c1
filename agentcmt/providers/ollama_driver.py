from __future__ import annotations

from typing import Any

import httpx

from ..config import Config
from ..exceptions import GenerationError
from .base import BaseProvider

AVAILABILITY_TIMEOUT = 5.0


class OllamaProvider(BaseProvider):
    """Provider for a local Ollama runtime (``/api/chat``)."""

    name = "ollama"

    def __init__(self, config: Config, debug: bool = False) -> None:
        super().__init__(config, debug)
        self._base_url = (config.llm_endpoint or "http://localhost:11434").rstrip("/")
        self._request_timeout = config.request_timeout

    def is_available(self) -> bool:
        """True when the server answers and the configured model is pulled."""
        try:
            resp = httpx.get(f"{self._base_url}/api/tags", timeout=AVAILABILITY_TIMEOUT)
        except httpx.HTTPError as e:
            if self.debug:
                print(f"DEBUG(Driver:Ollama): availability probe failed: {e}")
            return False
        if int(getattr(resp, "status_code", 200)) >= 400:
            return False
        try:
            data = resp.json()
        except ValueError:
            return False
        models = data.get("models") if isinstance(data, dict) else None
        if not models:
            return False
        base_name = self.config.model.split(":", 1)[0]
        return any(
            isinstance(m, dict) and base_name in str(m.get("name", "")) for m in models
        )

    def _chat(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if json_mode:
            payload["format"] = "json"
        if self.debug:
            print("DEBUG(Driver:Ollama): chat")
            print(f"  model={self.config.model} url={self._base_url}/api/chat")
        try:
            response = httpx.post(
                f"{self._base_url}/api/chat",
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
        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise GenerationError(self.name, "response has no message content")
        return content
