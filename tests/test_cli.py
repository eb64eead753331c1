import json
import types

import pytest

from agentcmt import cli as cli_module
from agentcmt.commit import GeneratedCommit
from agentcmt.pipeline import GenerationFailure


class _FakeRepo:
    instances = []

    def __init__(self, repo_path=None, config=None):
        self.repo_path = repo_path
        self.config = config
        self.committed = []
        _FakeRepo.instances.append(self)

    def commit(self, message):
        self.committed.append(message)


def _fake_result(message="feat(feature): add validateFeature"):
    commit = GeneratedCommit(type="feat", scope="feature", subject="add validateFeature")

    def to_dict():
        return {"message": message, "commit": commit.to_dict(), "iterations": 1}

    return types.SimpleNamespace(message=message, to_dict=to_dict)


@pytest.fixture
def wired(monkeypatch, tmp_path):
    """Replace provider, repository and pipeline with recording fakes."""
    seen = {}
    _FakeRepo.instances = []

    def fake_create_provider(kind, config, debug=False):
        seen["provider_kind"] = kind
        seen["config"] = config
        return types.SimpleNamespace(name=kind)

    class _FakePipeline:
        outcome = _fake_result()

        def __init__(self, source, config, debug=False):
            seen["pipeline_config"] = config

        def execute(self, request):
            seen["request"] = request
            return _FakePipeline.outcome

    monkeypatch.setattr(cli_module, "create_provider", fake_create_provider)
    monkeypatch.setattr(cli_module, "GitRepo", _FakeRepo)
    monkeypatch.setattr(cli_module, "ReflectionPipeline", _FakePipeline)
    monkeypatch.setattr(cli_module, "find_git_repo_root", lambda start: tmp_path)
    seen["pipeline_cls"] = _FakePipeline
    return seen


def test_help_returns_zero(capsys):
    assert cli_module.main(["--help"]) == 0
    assert "--provider" in capsys.readouterr().out


def test_invalid_provider_choice_returns_usage_error():
    assert cli_module.main(["--provider", "anthropic"]) == 2


def test_prints_message(wired, capsys):
    rc = cli_module.main([])

    assert rc == 0
    assert capsys.readouterr().out.strip() == "feat(feature): add validateFeature"
    assert wired["provider_kind"] == "ollama"
    assert wired["request"].include_scope is True
    assert wired["request"].max_reflection_iterations == 2


def test_flags_become_overrides(wired, monkeypatch):
    monkeypatch.setenv("MISTRAL_API_KEY", "mk-test")

    rc = cli_module.main(
        ["--provider", "mistral", "--model", "mistral-large", "--no-scope", "--max-iterations", "1"]
    )

    assert rc == 0
    cfg = wired["config"]
    assert cfg.provider == "mistral"
    assert cfg.model == "mistral-large"
    assert wired["request"].include_scope is False
    assert wired["request"].max_reflection_iterations == 1


def test_json_output(wired, capsys):
    rc = cli_module.main(["--json"])

    data = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert data["commit"]["type"] == "feat"
    assert data["iterations"] == 1


def test_commit_flag_commits_message(wired):
    rc = cli_module.main(["--commit"])

    assert rc == 0
    assert _FakeRepo.instances[-1].committed == ["feat(feature): add validateFeature"]


def test_failure_exit_code(wired, capsys):
    wired["pipeline_cls"].outcome = GenerationFailure(
        reason="No staged changes", provider="ollama", kind="input"
    )

    rc = cli_module.main(["--commit"])

    assert rc == 1
    assert "Error (ollama): No staged changes" in capsys.readouterr().err
    assert _FakeRepo.instances[-1].committed == []


def test_config_error_exit_code(wired, monkeypatch, capsys):
    monkeypatch.setenv("AGENTCMT_MAX_DIFF_LENGTH", "huge")

    assert cli_module.main([]) == 2
    # Configuration problems share the usage-error code with argparse
    assert cli_module.EXIT_USAGE == 2
    assert "Configuration error" in capsys.readouterr().err
