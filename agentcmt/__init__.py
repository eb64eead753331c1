"""agentcmt - conventional commit messages from staged diffs via a reflective LLM pipeline."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "load_config",
    # Analysis
    "DiffAnalyzer", "DiffSummary", "analyze", "select_examples", "truncate_diff",
    "ProjectStyle", "analyze_project_style", "load_project_guidelines",
    # Providers
    "ProviderKind", "create_provider",
    # Pipeline
    "ReflectionPipeline", "GenerationRequest", "GenerationResult",
    "GenerationFailure", "GenerationHandle",
    # Git
    "GitRepo",
    # Exceptions
    "AgentCmtError", "GitError", "LLMError", "ConfigError", "ValidationError",
    "InputError", "ProviderUnavailableError", "GenerationError", "ResponseParseError",
]


def __getattr__(name: str):
    """Lazy attribute loader so importing the package does not pull in httpx/openai."""
    mapping = {
        "Config": ("agentcmt.config", "Config"),
        "load_config": ("agentcmt.config", "load_config"),
        "DiffAnalyzer": ("agentcmt.analysis", "DiffAnalyzer"),
        "DiffSummary": ("agentcmt.analysis", "DiffSummary"),
        "analyze": ("agentcmt.analysis", "analyze"),
        "select_examples": ("agentcmt.samples", "select_examples"),
        "truncate_diff": ("agentcmt.truncate", "truncate_diff"),
        "ProjectStyle": ("agentcmt.style", "ProjectStyle"),
        "analyze_project_style": ("agentcmt.style", "analyze_project_style"),
        "load_project_guidelines": ("agentcmt.style", "load_project_guidelines"),
        "ProviderKind": ("agentcmt.providers", "ProviderKind"),
        "create_provider": ("agentcmt.providers", "create_provider"),
        "ReflectionPipeline": ("agentcmt.pipeline", "ReflectionPipeline"),
        "GenerationRequest": ("agentcmt.pipeline", "GenerationRequest"),
        "GenerationResult": ("agentcmt.pipeline", "GenerationResult"),
        "GenerationFailure": ("agentcmt.pipeline", "GenerationFailure"),
        "GenerationHandle": ("agentcmt.pipeline", "GenerationHandle"),
        "GitRepo": ("agentcmt.git", "GitRepo"),
        "AgentCmtError": ("agentcmt.exceptions", "AgentCmtError"),
        "GitError": ("agentcmt.exceptions", "GitError"),
        "LLMError": ("agentcmt.exceptions", "LLMError"),
        "ConfigError": ("agentcmt.exceptions", "ConfigError"),
        "ValidationError": ("agentcmt.exceptions", "ValidationError"),
        "InputError": ("agentcmt.exceptions", "InputError"),
        "ProviderUnavailableError": ("agentcmt.exceptions", "ProviderUnavailableError"),
        "GenerationError": ("agentcmt.exceptions", "GenerationError"),
        "ResponseParseError": ("agentcmt.exceptions", "ResponseParseError"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'agentcmt' has no attribute {name!r}")


if TYPE_CHECKING:
    from .analysis import DiffAnalyzer, DiffSummary, analyze
    from .config import Config, load_config
    from .exceptions import (
        AgentCmtError,
        ConfigError,
        GenerationError,
        GitError,
        InputError,
        LLMError,
        ProviderUnavailableError,
        ResponseParseError,
        ValidationError,
    )
    from .git import GitRepo
    from .pipeline import (
        GenerationFailure,
        GenerationHandle,
        GenerationRequest,
        GenerationResult,
        ReflectionPipeline,
    )
    from .providers import ProviderKind, create_provider
    from .samples import select_examples
    from .style import ProjectStyle, analyze_project_style, load_project_guidelines
    from .truncate import truncate_diff
