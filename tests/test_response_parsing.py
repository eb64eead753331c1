import pytest

from agentcmt.exceptions import GenerationError, ResponseParseError
from agentcmt.providers import extract_json_object, parse_commit_response

TYPES = ["feat", "fix", "docs"]


def test_extract_plain_object():
    assert extract_json_object('{"type": "feat"}') == {"type": "feat"}


def test_extract_from_code_fence():
    text = '```json\n{"type": "fix", "subject": "x"}\n```'
    assert extract_json_object(text)["type"] == "fix"


def test_extract_from_prose():
    text = 'Here is the message you asked for: {"type": "docs", "subject": "y"} Hope it helps!'
    assert extract_json_object(text) == {"type": "docs", "subject": "y"}


def test_braces_inside_strings_do_not_confuse_scan():
    text = 'Sure {"subject": "use {placeholder} and \\"}\\" quotes", "type": "feat"} done'
    data = extract_json_object(text)

    assert data["type"] == "feat"
    assert data["subject"] == 'use {placeholder} and "}" quotes'


def test_first_object_wins():
    text = '{"type": "feat", "subject": "a"}\n{"type": "fix", "subject": "b"}'
    assert extract_json_object(text)["subject"] == "a"


def test_skips_non_json_brace_prefix():
    text = 'In {this} case: {"type": "fix", "subject": "b"}'
    assert extract_json_object(text)["type"] == "fix"


@pytest.mark.parametrize("text", ["", "   ", "no json here", "{broken: json"])
def test_no_object_raises(text):
    with pytest.raises(ResponseParseError):
        extract_json_object(text)


def test_parse_commit_response_normalises_fields():
    text = (
        '{"type": "FEAT", "scope": "api", "subject": "add endpoint.", '
        '"body": "", "confidence": 140, "reasoning": "new route"}'
    )
    commit = parse_commit_response(text, "ollama", TYPES)

    assert commit.type == "feat"
    assert commit.subject == "add endpoint"
    assert commit.scope == "api"
    assert commit.body is None
    assert commit.confidence == 100
    assert commit.reasoning == "new route"


def test_missing_confidence_defaults_to_fifty():
    commit = parse_commit_response('{"type": "fix", "subject": "x"}', "ollama", TYPES)
    assert commit.confidence == 50


def test_negative_confidence_clamped():
    commit = parse_commit_response(
        '{"type": "fix", "subject": "x", "confidence": -3}', "ollama", TYPES
    )
    assert commit.confidence == 0


@pytest.mark.parametrize(
    "text,fragment",
    [
        ('{"subject": "x"}', "commit type"),
        ('{"type": "feat"}', "subject"),
        ('{"type": "feature", "subject": "x"}', "not one of"),
        ('{"type": "feat", "subject": "' + "x" * 101 + '"}', "limit"),
        ("no json at all", "unparseable"),
    ],
)
def test_invalid_responses_raise_generation_error(text, fragment):
    with pytest.raises(GenerationError) as exc:
        parse_commit_response(text, "mistral", TYPES)

    assert exc.value.provider == "mistral"
    assert fragment in str(exc.value)


def test_any_type_allowed_without_list():
    commit = parse_commit_response('{"type": "wip", "subject": "x"}', "ollama")
    assert commit.type == "wip"


def test_overflowing_confidence_defaults_to_fifty():
    commit = parse_commit_response(
        '{"type":"feat","subject":"x","confidence":1e999}', "ollama"
    )
    assert commit.confidence == 50


@pytest.mark.parametrize(
    "value,expected",
    [
        ("true", True),
        ('"true"', True),
        ('"YES"', True),
        ('"1"', True),
        ("false", False),
        ('"false"', False),
        ('"no"', False),
        ("1", False),
        ("null", False),
    ],
)
def test_breaking_flag_parsing(value, expected):
    text = '{"type": "feat", "subject": "x", "breaking": ' + value + "}"

    assert parse_commit_response(text, "ollama").breaking is expected
