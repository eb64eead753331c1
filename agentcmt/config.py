"""Configuration management for agentcmt."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .commit import COMMIT_TYPES, CommitType
from .exceptions import ConfigError

CONFIG_DIR_NAME = ".agentcmt"
CONFIG_FILE_NAME = "config.json"

DEFAULT_MODELS = {
    "ollama": {
        "model": "devstral:24b",
        "endpoint": "http://localhost:11434",
        "api_key_env": "",
    },
    "mistral": {
        "model": "mistral-small-latest",
        "endpoint": "https://api.mistral.ai",
        "api_key_env": "MISTRAL_API_KEY",
    },
    "openai": {
        "model": "gpt-4o-mini",
        "endpoint": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class Config:
    """Runtime configuration for agentcmt."""

    provider: str
    model: str
    llm_endpoint: str
    api_key_env: str
    git_repo_path: str = "."
    request_timeout: float = 30.0
    temperature: float = 0.5
    max_tokens: int = 500
    max_diff_length: int = 15000
    # Fraction of max_diff_length above which a semantic summary is requested.
    semantic_summary_threshold: float = 0.7
    enable_reasoning: bool = True
    enable_semantic_summary: bool = True
    enable_verification: bool = True
    max_reflection_iterations: int = 2
    include_scope: bool = True
    commit_types: List[CommitType] = field(default_factory=lambda: list(COMMIT_TYPES))
    scopes: List[str] = field(default_factory=list)

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the configured environment variable."""
        if not self.api_key_env:
            return None
        return os.environ.get(self.api_key_env)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise configuration to a dict for persistence."""
        data = asdict(self)
        data["commit_types"] = [t.to_dict() for t in self.commit_types]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        payload = dict(data)
        raw_types = payload.pop("commit_types", None)
        known = set(cls.__dataclass_fields__)
        unknown = [k for k in payload if k not in known]
        for key in unknown:
            payload.pop(key)
        config = cls(**payload)
        if raw_types:
            config.commit_types = [
                t if isinstance(t, CommitType) else CommitType(**t) for t in raw_types
            ]
        return config


_CONFIG_STATE: Dict[str, Optional[Config]] = {"active": None}


def _ensure_path(path_like: Optional[Path]) -> Path:
    if path_like is None:
        return Path.cwd().resolve(strict=False)
    return Path(path_like).expanduser().resolve(strict=False)


def _config_file(repo_root: Optional[Path] = None) -> Path:
    return _ensure_path(repo_root) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def save_config(config: Config, repo_root: Optional[Path] = None) -> Path:
    """Persist configuration JSON within the repository."""
    cfg_path = _config_file(repo_root)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config.to_dict(), indent=2))
    return cfg_path


def load_persisted_config(
    repo_root: Optional[Path] = None,
) -> Optional[Config]:
    cfg_path = _config_file(repo_root)
    if not cfg_path.exists():
        return None
    try:
        data = json.loads(cfg_path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid config file {cfg_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {cfg_path}: expected an object")
    try:
        return Config.from_dict(data)
    except TypeError as exc:
        raise ConfigError(f"Invalid config file {cfg_path}: {exc}") from exc


def _parse_int(name: str, raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def _parse_float(name: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _parse_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _auto_select_provider(env: Optional[Dict[str, str]] = None) -> str:
    env_dict = dict(env or os.environ)
    for provider in ("openai", "mistral"):
        if env_dict.get(DEFAULT_MODELS[provider]["api_key_env"]):
            return provider
    return "ollama"


def _pick(
    key: str,
    env_name: str,
    overrides: Dict[str, Any],
    persisted: Optional[Config],
    default: Any,
) -> Any:
    if overrides.get(key) is not None:
        return overrides[key]
    if persisted is not None:
        return getattr(persisted, key)
    env_value = os.environ.get(env_name)
    if env_value:
        return env_value
    return default


def load_config(
    *,
    repo_root: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Config:
    """Build configuration from overrides, config file, environment and defaults."""

    overrides = dict(overrides or {})
    repo_root = _ensure_path(repo_root)
    persisted = load_persisted_config(repo_root)

    provider_override = overrides.get("provider") or os.environ.get("AGENTCMT_PROVIDER")
    if persisted and not provider_override:
        provider = persisted.provider
    else:
        provider = provider_override or _auto_select_provider()
    if provider not in DEFAULT_MODELS:
        raise ConfigError(
            f"Unknown provider {provider!r}; expected one of {', '.join(DEFAULT_MODELS)}"
        )
    defaults = DEFAULT_MODELS[provider]

    # Only reuse persisted provider details when the provider did not change.
    same = persisted if (persisted and persisted.provider == provider) else None

    model = (
        overrides.get("model")
        or (same.model if same else None)
        or os.environ.get("AGENTCMT_LLM_MODEL")
        or defaults["model"]
    )
    endpoint = (
        overrides.get("endpoint")
        or (same.llm_endpoint if same else None)
        or os.environ.get("AGENTCMT_LLM_ENDPOINT")
        or defaults["endpoint"]
    )
    api_key_env = (
        overrides.get("api_key_env")
        or (same.api_key_env if same else None)
        or defaults["api_key_env"]
    )

    config = Config(
        provider=provider,
        model=model,
        llm_endpoint=endpoint,
        api_key_env=api_key_env,
        git_repo_path=str(overrides.get("repo_path") or repo_root),
        request_timeout=_parse_float(
            "request_timeout",
            _pick("request_timeout", "AGENTCMT_LLM_REQUEST_TIMEOUT", overrides, persisted, 30.0),
        ),
        max_diff_length=_parse_int(
            "max_diff_length",
            _pick("max_diff_length", "AGENTCMT_MAX_DIFF_LENGTH", overrides, persisted, 15000),
        ),
        max_reflection_iterations=_parse_int(
            "max_reflection_iterations",
            _pick(
                "max_reflection_iterations",
                "AGENTCMT_MAX_REFLECTION_ITERATIONS",
                overrides,
                persisted,
                2,
            ),
        ),
        enable_reasoning=_parse_bool(
            "enable_reasoning",
            _pick("enable_reasoning", "AGENTCMT_ENABLE_REASONING", overrides, persisted, True),
        ),
        enable_semantic_summary=_parse_bool(
            "enable_semantic_summary",
            _pick(
                "enable_semantic_summary",
                "AGENTCMT_ENABLE_SEMANTIC_SUMMARY",
                overrides,
                persisted,
                True,
            ),
        ),
        enable_verification=_parse_bool(
            "enable_verification",
            _pick(
                "enable_verification",
                "AGENTCMT_ENABLE_VERIFICATION",
                overrides,
                persisted,
                True,
            ),
        ),
    )
    if persisted is not None:
        config.commit_types = list(persisted.commit_types)
        config.scopes = list(persisted.scopes)
        config.include_scope = persisted.include_scope
    if overrides.get("include_scope") is not None:
        config.include_scope = _parse_bool("include_scope", overrides["include_scope"])

    set_active_config(config)
    return config


def set_active_config(config: Config) -> None:
    _CONFIG_STATE["active"] = config


def get_active_config() -> Config:
    active = _CONFIG_STATE.get("active")
    if active is None:
        return load_config()
    return active


def clear_active_config() -> None:
    _CONFIG_STATE["active"] = None
