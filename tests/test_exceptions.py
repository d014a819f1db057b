import pytest

from agent_core.exceptions import (
    AgentCoreError,
    ConfigError,
    ContextOverflowError,
    MaxIterationsError,
    OperationCancelledError,
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
    ToolNotFoundError,
)


@pytest.mark.parametrize(
    "error, category, retryable",
    [
        (ProviderError("bad"), "provider", False),
        (ProviderNotAvailableError("down"), "provider_unavailable", True),
        (ProviderRateLimitError("slow"), "rate_limited", True),
        (ProviderAuthenticationError("key"), "auth", False),
        (ToolNotFoundError("x"), "tool_not_found", False),
        (MaxIterationsError(5), "max_iterations", False),
        (OperationCancelledError(), "cancelled", False),
        (ContextOverflowError(10, 5), "context_overflow", False),
        (ConfigError("bad"), "configuration", False),
    ],
)
def test_category_and_retryable(error, category, retryable):
    assert isinstance(error, AgentCoreError)
    assert error.category == category
    assert error.retryable is retryable
    assert error.user_message


def test_rate_limit_carries_retry_after():
    error = ProviderRateLimitError("slow", retry_after=30)
    assert error.retry_after == 30
    assert "30 seconds" in error.user_message
    assert error.to_dict()["details"]["retry_after_seconds"] == 30


def test_provider_error_hint_includes_message():
    error = ProviderError("model missing", provider_name="ollama")
    assert error.user_message == "The AI service encountered an error: model missing"
    assert error.details["provider_name"] == "ollama"


def test_str_is_message():
    assert str(ToolNotFoundError("teleport")) == "Tool not found: teleport"
    assert str(ContextOverflowError(9000, 8192)) == (
        "Context length exceeded: 9000 tokens (max: 8192)"
    )

