import types
from collections.abc import Generator
from pathlib import Path

import pytest

FEATURE_DIFF = """diff --git a/src/feature.ts b/src/feature.ts
new file mode 100644
index 0000000..1111111
--- /dev/null
+++ b/src/feature.ts
@@ -0,0 +1,4 @@
+export function validateFeature(input: string): boolean {
+  return input.length > 0;
+}
+
"""


@pytest.fixture(autouse=True)
def reset_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    for name in (
        "OPENAI_API_KEY",
        "MISTRAL_API_KEY",
        "AGENTCMT_PROVIDER",
        "AGENTCMT_LLM_MODEL",
        "AGENTCMT_LLM_ENDPOINT",
        "AGENTCMT_LLM_REQUEST_TIMEOUT",
        "AGENTCMT_MAX_REFLECTION_ITERATIONS",
        "AGENTCMT_MAX_DIFF_LENGTH",
        "AGENTCMT_ENABLE_REASONING",
        "AGENTCMT_ENABLE_SEMANTIC_SUMMARY",
        "AGENTCMT_ENABLE_VERIFICATION",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep persisted config lookups inside the test sandbox
    monkeypatch.chdir(tmp_path)

    from agentcmt.config import clear_active_config

    clear_active_config()
    yield
    clear_active_config()


@pytest.fixture
def make_config(tmp_path):
    from agentcmt.config import DEFAULT_MODELS, Config

    def _make(provider: str = "ollama", **kwargs):
        defaults = DEFAULT_MODELS[provider]
        params = {
            "provider": provider,
            "model": defaults["model"],
            "llm_endpoint": defaults["endpoint"],
            "api_key_env": defaults["api_key_env"],
            "git_repo_path": str(tmp_path),
        }
        params.update(kwargs)
        return Config(**params)

    return _make


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="ok"):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text

    def json(self):  # noqa: D401
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def fake_response():
    return FakeResponse


def make_openai_client(contents, models_error=None):
    """SimpleNamespace stand-in for ``openai.OpenAI`` returning ``contents`` in order."""
    calls = []
    queue = list(contents)

    def create(**kwargs):
        calls.append(kwargs)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        message = types.SimpleNamespace(content=item)
        return types.SimpleNamespace(choices=[types.SimpleNamespace(message=message)])

    def list_models():
        if models_error is not None:
            raise models_error
        return types.SimpleNamespace(data=[types.SimpleNamespace(id="gpt-4o-mini")])

    client = types.SimpleNamespace(
        chat=types.SimpleNamespace(completions=types.SimpleNamespace(create=create)),
        models=types.SimpleNamespace(list=list_models),
        calls=calls,
    )
    return client
