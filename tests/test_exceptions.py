from agentcmt.exceptions import (
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


def test_exceptions_hierarchy_and_str():
    # Given exception classes
    # When instantiating
    g = GitError("git")
    c = ConfigError("cfg")
    v = ValidationError("val")
    i = InputError("empty diff")
    llm_err = LLMError("llm")

    # Then hierarchy holds
    for exc in (g, c, v, i, llm_err):
        assert isinstance(exc, AgentCmtError)
    assert isinstance(i, ValidationError)
    assert "git" in str(g)
    assert "empty diff" in str(i)


def test_provider_errors_name_the_backend():
    unavailable = ProviderUnavailableError("ollama", "model not pulled")
    failed = GenerationError("mistral", "API error 500")

    assert isinstance(unavailable, LLMError)
    assert isinstance(failed, LLMError)
    assert unavailable.provider == "ollama"
    assert unavailable.reason == "model not pulled"
    assert "ollama" in str(unavailable)
    assert failed.provider == "mistral"
    assert failed.detail == "API error 500"
    assert str(failed) == "mistral: API error 500"


def test_response_parse_error_is_llm_error():
    assert issubclass(ResponseParseError, LLMError)
