import pytest

from agentcmt.commit import (
    COMMIT_TYPES,
    CommitMessage,
    GeneratedCommit,
    commit_type_values,
    parse_header,
    validate_commit_message,
)
from agentcmt.exceptions import ValidationError


def test_commit_types_are_the_conventional_eleven():
    assert commit_type_values(COMMIT_TYPES) == [
        "feat",
        "fix",
        "docs",
        "style",
        "refactor",
        "perf",
        "test",
        "build",
        "ci",
        "chore",
        "revert",
    ]


def test_format_header_only():
    msg = CommitMessage(type="docs", subject="add install guide")
    assert msg.format() == "docs: add install guide"


def test_format_with_scope_body_and_breaking_footer():
    msg = CommitMessage(
        type="feat",
        scope="api",
        subject="drop v1 endpoints",
        body="Clients must move to /v2.",
        breaking=True,
        breaking_description="the /v1 routes are gone",
    )

    assert msg.header == "feat(api)!: drop v1 endpoints"
    assert msg.format() == (
        "feat(api)!: drop v1 endpoints\n\n"
        "Clients must move to /v2.\n\n"
        "BREAKING CHANGE: the /v1 routes are gone"
    )


def test_generated_commit_to_dict_uses_wire_names():
    commit = GeneratedCommit(type="fix", subject="handle empty input", confidence=80)
    data = commit.to_dict()

    assert data["breakingDescription"] is None
    assert data["confidence"] == 80


def test_parse_header():
    parts = parse_header("refactor(core)!: split parser")
    assert parts == {
        "type": "refactor",
        "scope": "core",
        "subject": "split parser",
        "breaking": "!",
    }
    with pytest.raises(ValidationError):
        parse_header("Update stuff")


@pytest.mark.parametrize(
    "message,expected",
    [
        ("feat(auth): add login", True),
        ("fix: handle null", True),
        ("feature: add login", False),
        ("feat add login", False),
        ("", False),
        ("feat: " + "x" * 101, False),
    ],
)
def test_validate_commit_message(message, expected):
    allowed = commit_type_values(COMMIT_TYPES)
    assert validate_commit_message(message, allowed) is expected
