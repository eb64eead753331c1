import pytest

from agentcmt.style import (
    ProjectStyle,
    analyze_project_style,
    load_project_guidelines,
)


def test_guidelines_first_non_empty_file_wins(tmp_path):
    # Given an empty top-level file and a populated .github one
    (tmp_path / "COMMIT_GUIDELINES.md").write_text("   \n")
    (tmp_path / ".github").mkdir()
    (tmp_path / ".github" / "COMMIT_GUIDELINES.md").write_text("\nScopes: api, ui\n\n")

    # Then the empty file is passed over and the content is stripped
    assert load_project_guidelines(tmp_path) == "Scopes: api, ui"


def test_guidelines_search_order(tmp_path):
    (tmp_path / ".agentcmt").mkdir()
    (tmp_path / ".agentcmt" / "commit-guidelines.md").write_text("local rules")
    (tmp_path / "COMMIT_GUIDELINES.md").write_text("shared rules")

    assert load_project_guidelines(tmp_path) == "local rules"


def test_guidelines_missing(tmp_path):
    assert load_project_guidelines(tmp_path) is None


def test_style_defaults_for_empty_history():
    assert analyze_project_style([]) == ProjectStyle()
    assert analyze_project_style(["", "  "]).preferred_types == ["feat", "fix", "chore"]


def test_style_counts_types_scopes_and_subject_length():
    messages = [
        "fix(api): handle nulls",
        "fix(api): retry once",
        "feat(ui): add dark mode",
        "fix: typo",
        "docs: update readme",
    ]

    style = analyze_project_style(messages)

    assert style.preferred_types == ["fix", "feat", "docs"]
    assert style.common_scopes == ["api", "ui"]
    assert style.avg_subject_length == 10
    assert style.convention_compliance == 100
    assert style.detail_level == "concise"


def test_non_conventional_commits_count_as_chore():
    style = analyze_project_style(["Merge branch 'main'", "Initial commit", "feat: add x"])

    assert style.preferred_types == ["chore", "feat"]
    assert style.convention_compliance == 33


@pytest.mark.parametrize(
    "bodies,expected",
    [
        (["body", "body", None], "detailed"),
        (["body", None], "concise"),
        ([None, None, None], "concise"),
    ],
)
def test_detail_level_needs_more_than_half_with_body(bodies, expected):
    messages = [
        f"feat: change {i}" + (f"\n\n{body}" if body else "")
        for i, body in enumerate(bodies)
    ]

    assert analyze_project_style(messages).detail_level == expected


def test_breaking_footer_alone_is_not_a_body():
    style = analyze_project_style(["feat!: drop v1\n\nBREAKING CHANGE: v1 is gone"])

    assert style.detail_level == "concise"


def test_subject_templates():
    messages = ["feat: add login form", "feat: add signup page", "fix: typo fix"]

    style = analyze_project_style(messages)

    assert style.templates[0] == "add X"
    assert "typo fix" in style.templates
