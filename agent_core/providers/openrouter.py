import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from agent_core.agent.context.message import Message, Role
from agent_core.agent.structs import (
    Completion,
    FinishReason,
    GenerationOptions,
    ModelInfo,
    ProviderInfo,
    StreamChunk,
    TokenUsage,
)
from agent_core.exceptions import (
    ProviderAuthenticationError,
    ProviderConfigurationError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
)
from .base import BaseProvider

logger = logging.getLogger("OpenRouterProvider")

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(BaseProvider):
    """
    Adapter for OpenRouter using OpenAI-compatible chat-completions.
    Works against any OpenAI-compatible base URL.
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_OPENROUTER_BASE_URL,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

        if not self.api_key and client is None:
            raise ProviderConfigurationError(
                "OPENROUTER_API_KEY is required when using OpenRouterProvider.",
                provider_name=self.name,
            )

        self.client = client or AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

    @classmethod
    def from_settings(cls, settings) -> "OpenRouterProvider":
        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
        )

    async def info(self) -> ProviderInfo:
        return ProviderInfo(
            name=self.name,
            supports_streaming=True,
            supports_tools=False,
        )

    async def health_check(self) -> bool:
        try:
            await self.client.models.list()
            return True
        except Exception as exc:
            logger.error("OpenRouter connection failed: %s", exc)
            return False

    async def list_models(self) -> List[ModelInfo]:
        try:
            page = await self.client.models.list()
        except Exception as exc:
            raise self._map_error(exc) from exc

        models = []
        for entry in getattr(page, "data", None) or []:
            extra = self._to_dict(entry)
            models.append(
                ModelInfo(
                    id=entry.id,
                    name=extra.get("name") or entry.id,
                    context_length=extra.get("context_length"),
                )
            )
        return models

    async def complete(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> Completion:
        request_payload = self._build_request(messages, options)

        try:
            response = await self.client.chat.completions.create(**request_payload)
        except Exception as exc:
            logger.error("OpenRouter request failed: %s", exc)
            raise self._map_error(exc, options.model) from exc

        if not response.choices:
            raise ProviderError(
                "OpenRouter returned no choices",
                provider_name=self.name,
                model_name=options.model,
            )

        choice = response.choices[0]
        finish_reason = FinishReason.from_backend(choice.finish_reason)
        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        return Completion(
            content=choice.message.content or "",
            model=response.model or options.model,
            usage=usage,
            truncated=finish_reason == FinishReason.LENGTH,
            finish_reason=finish_reason,
        )

    async def complete_stream(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> AsyncIterator[StreamChunk]:
        request_payload = self._build_request(messages, options)
        request_payload["stream"] = True
        # Requests usage on streamed responses when provider supports it.
        request_payload["stream_options"] = {"include_usage": True}

        usage: Optional[TokenUsage] = None

        try:
            stream = await self.client.chat.completions.create(**request_payload)

            async for chunk in stream:
                if chunk.usage is not None:
                    usage = TokenUsage(
                        prompt_tokens=chunk.usage.prompt_tokens or 0,
                        completion_tokens=chunk.usage.completion_tokens or 0,
                        total_tokens=chunk.usage.total_tokens or 0,
                    )
                for choice in chunk.choices or []:
                    content = choice.delta.content if choice.delta else None
                    if content:
                        yield StreamChunk(delta=content)

        except Exception as exc:
            logger.error("OpenRouter stream failed: %s", exc, exc_info=True)
            raise self._map_error(exc, options.model) from exc

        yield StreamChunk(delta="", done=True, usage=usage)

    def _build_request(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": options.model,
            "messages": self._serialize_messages(messages, options),
            "temperature": options.temperature,
            "top_p": options.top_p,
            "max_tokens": options.max_tokens,
        }
        if options.stop_sequences:
            payload["stop"] = list(options.stop_sequences)
        return payload

    @staticmethod
    def _serialize_messages(
        messages: Sequence[Message], options: GenerationOptions
    ) -> List[Dict[str, Any]]:
        """
        Convert messages into OpenAI-compatible payload format.

        Tool results carry no native tool_call_id here, so they are sent
        as user context instead of the `tool` role.
        """
        serialized: List[Dict[str, Any]] = []

        if options.system_prompt and not (
            messages and messages[0].role == Role.SYSTEM
        ):
            serialized.append({"role": "system", "content": options.system_prompt})

        for message in messages:
            role = message.role.value
            if message.role == Role.TOOL:
                role = Role.USER.value
            item: Dict[str, Any] = {"role": role, "content": message.content or ""}
            if message.name and message.role != Role.TOOL:
                item["name"] = message.name
            serialized.append(item)

        return serialized

    @staticmethod
    def _to_dict(value: Any) -> Dict[str, Any]:
        if isinstance(value, dict):
            return value
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            dumped = model_dump()
            if isinstance(dumped, dict):
                return dumped
        return {}

    @staticmethod
    def _retry_after(exc: Exception) -> Optional[int]:
        response = getattr(exc, "response", None)
        headers = getattr(response, "headers", None)
        if not headers:
            return None
        value = headers.get("retry-after")
        if value is None:
            return None
        try:
            return int(float(value))
        except ValueError:
            return None

    def _map_error(self, exc: Exception, model: Optional[str] = None) -> ProviderError:
        if isinstance(exc, ProviderError):
            return exc

        kwargs = {"provider_name": self.name, "model_name": model, "original_error": exc}

        if isinstance(exc, openai.RateLimitError):
            return ProviderRateLimitError(
                f"OpenRouter API error (429 rate_limited): {exc}",
                retry_after=self._retry_after(exc),
                **kwargs,
            )
        if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return ProviderAuthenticationError(
                f"OpenRouter API error ({exc.status_code} unauthorized): {exc}", **kwargs
            )
        if isinstance(exc, openai.APIConnectionError):
            # Includes APITimeoutError.
            return ProviderNotAvailableError(
                f"OpenRouter unreachable at {self.base_url}: {exc}", **kwargs
            )
        if isinstance(exc, openai.APIStatusError):
            return ProviderError(
                f"OpenRouter API error ({exc.status_code} api_error): {exc}", **kwargs
            )
        return ProviderError(f"OpenRouter request failed: {exc}", **kwargs)
