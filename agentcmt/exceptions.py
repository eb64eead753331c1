"""Exception types for agentcmt."""

from __future__ import annotations


class AgentCmtError(Exception):
    """Base exception for agentcmt."""


class GitError(AgentCmtError):
    """Raised when a Git operation fails."""


class ConfigError(AgentCmtError):
    """Raised when configuration is invalid."""


class ValidationError(AgentCmtError):
    """Raised when input validation fails."""


class InputError(ValidationError):
    """Raised when the change set cannot be used (empty diff, no repository)."""


class LLMError(AgentCmtError):
    """Raised when a language model backend misbehaves."""


class ProviderUnavailableError(LLMError):
    """Backend is unreachable or not configured (missing key, model not pulled)."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class GenerationError(LLMError):
    """A backend call failed or returned an unusable commit structure."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.detail = message


class ResponseParseError(LLMError):
    """No JSON object could be recovered from a model response."""
