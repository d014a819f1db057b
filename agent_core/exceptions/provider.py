#!/usr/bin/env python3
"""
Provider Exception Classes
==========================

Provider-specific exception classes for proper error handling
in the multi-provider architecture.
"""

from typing import Optional

from .base import AgentCoreError


class ProviderError(AgentCoreError):
    """
    Base exception for all provider-related errors.

    Raised for malformed requests and backend-side failures.
    Not retryable by default.
    """

    category = "provider"
    retryable = False
    default_hint = None

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        model_name: Optional[str] = None,
        **kwargs
    ):
        if not kwargs.get("user_hint") and self.default_hint is None:
            kwargs["user_hint"] = f"The AI service encountered an error: {message}"
        super().__init__(message, **kwargs)

        if "provider_name" not in self.details and provider_name:
            self.details["provider_name"] = provider_name
        if "model_name" not in self.details and model_name:
            self.details["model_name"] = model_name


class ProviderNotAvailableError(ProviderError):
    """
    Raised when a provider is unreachable or misconfigured at runtime.

    Retryable: a caller or provider chain may fail over to another backend.
    """

    category = "provider_unavailable"
    retryable = True
    default_hint = "The AI service is currently unavailable. Please try again."


class ProviderRateLimitError(ProviderError):
    """
    Raised when provider rate limits are exceeded.

    This exception includes retry information when the backend supplies it.
    """

    category = "rate_limited"
    retryable = True
    default_hint = "You've made too many requests. Please wait a moment."

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        limit_type: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

        if retry_after is not None:
            self.details["retry_after_seconds"] = retry_after
            self.user_hint = (
                f"Rate limit exceeded. Please wait {retry_after} seconds before trying again."
            )
        if limit_type:
            self.details["limit_type"] = limit_type


class ProviderAuthenticationError(ProviderError):
    """Raised when API keys are invalid, expired, or missing at the backend."""

    category = "auth"
    default_hint = "Authentication failed. Please check your credentials."


class ProviderConfigurationError(ProviderError):
    """
    Raised when provider configuration is invalid or missing.

    This happens at construction time, before any request is made.
    """

    category = "configuration"
    default_hint = (
        "The provider configuration is invalid. "
        "Please check your configuration files and environment variables."
    )
