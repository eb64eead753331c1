from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..commit import MAX_SUBJECT_LENGTH, GeneratedCommit
from ..config import Config
from ..exceptions import GenerationError, ResponseParseError
from ..prompts import GenerationContext, build_system_prompt, build_user_prompt

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.5
    max_tokens: int = 500
    format: str = "text"  # "json" or "text"


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the ``}`` closing the ``{`` at ``start``, string-aware."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def extract_json_object(text: str) -> dict[str, Any]:
    """Recover the first JSON object embedded in a model response.

    Best effort: code fences are stripped, then every ``{`` is tried in
    order with a balanced-brace scan and the first candidate that decodes to
    an object wins. As a last resort the span from the first ``{`` to the
    last ``}`` is decoded. Raises ResponseParseError when nothing decodes.
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response")
    cleaned = _FENCE_RE.sub("", text).strip()

    start = cleaned.find("{")
    while start != -1:
        end = _balanced_end(cleaned, start)
        if end is not None:
            try:
                value = json.loads(cleaned[start:end])
            except json.JSONDecodeError:
                value = None
            if isinstance(value, dict):
                return value
        start = cleaned.find("{", start + 1)

    first, last = cleaned.find("{"), cleaned.rfind("}")
    if first != -1 and last > first:
        try:
            value = json.loads(cleaned[first : last + 1])
        except json.JSONDecodeError:
            value = None
        if isinstance(value, dict):
            return value
    raise ResponseParseError(f"No JSON object found in response: {text[:200]!r}")


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clamp_confidence(value: Any) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 50
    return max(0, min(100, number))


_TRUTHY = {"true", "1", "yes"}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def parse_commit_response(
    text: str,
    provider_name: str,
    available_types: Optional[Iterable[str]] = None,
) -> GeneratedCommit:
    """Validate a model response into a GeneratedCommit.

    Raises GenerationError naming ``provider_name`` when the response has
    no usable JSON, lacks a type or subject, or uses a disallowed type.
    """
    try:
        data = extract_json_object(text)
    except ResponseParseError as exc:
        raise GenerationError(provider_name, f"unparseable response ({exc})") from exc

    commit_type = data.get("type")
    subject = data.get("subject")
    if not isinstance(commit_type, str) or not commit_type.strip():
        raise GenerationError(provider_name, "response is missing a commit type")
    if not isinstance(subject, str) or not subject.strip():
        raise GenerationError(provider_name, "response is missing a subject")
    commit_type = commit_type.strip().lower()
    subject = subject.strip().rstrip(".")
    if len(subject) > MAX_SUBJECT_LENGTH:
        raise GenerationError(
            provider_name,
            f"subject is {len(subject)} characters, limit is {MAX_SUBJECT_LENGTH}",
        )
    if available_types is not None:
        allowed = list(available_types)
        if commit_type not in allowed:
            raise GenerationError(
                provider_name,
                f"type {commit_type!r} is not one of {', '.join(allowed)}",
            )

    confidence = data.get("confidence")
    return GeneratedCommit(
        type=commit_type,
        subject=subject,
        scope=_optional_str(data.get("scope")),
        body=_optional_str(data.get("body")),
        breaking=parse_bool(data.get("breaking")),
        breaking_description=_optional_str(data.get("breakingDescription")),
        confidence=_clamp_confidence(confidence) if confidence is not None else 50,
        reasoning=_optional_str(data.get("reasoning")),
    )


class BaseProvider(ABC):
    """Abstract base for language model backends.

    Each provider encapsulates one backend's transport: request shape,
    authentication and availability probing. Prompt construction and
    response validation are shared here so every backend yields the same
    GeneratedCommit structure.
    """

    name: str = "base"

    def __init__(self, config: Config, debug: bool = False) -> None:
        self.config = config
        self.debug = debug

    @abstractmethod
    def is_available(self) -> bool:
        """Return True when the backend can serve requests. Never raises."""
        raise NotImplementedError

    @abstractmethod
    def _chat(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        """Send chat ``messages`` and return the assistant text.

        Must raise GenerationError (or ProviderUnavailableError) on failure.
        """
        raise NotImplementedError

    def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> str:
        opts = options or GenerationOptions()
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        if self.debug:
            print(
                f"DEBUG(Driver:{self.name}): generate_text "
                f"temperature={opts.temperature} max_tokens={opts.max_tokens} "
                f"format={opts.format}"
            )
        return self._chat(messages, opts.temperature, opts.max_tokens, opts.format == "json")

    def generate_commit_message(self, context: GenerationContext) -> GeneratedCommit:
        types = list(context.available_types)
        system = build_system_prompt(types)
        user = build_user_prompt(context)
        text = self.generate_text(
            system,
            user,
            GenerationOptions(
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                format="json",
            ),
        )
        if self.debug:
            print(f"DEBUG(Driver:{self.name}): raw response={text[:300]!r}")
        return parse_commit_response(text, self.name, [t.value for t in types])
