import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx
from ollama import AsyncClient, ResponseError

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
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
)
from .base import BaseProvider

logger = logging.getLogger("OllamaProvider")

DEFAULT_OLLAMA_HOST = "http://localhost:11434"


class OllamaProvider(BaseProvider):
    """
    Adapter for Ollama (Local & Cloud).
    Maps native SDK objects -> Completion / StreamChunk.
    """

    name = "ollama"

    def __init__(
        self,
        host: str = DEFAULT_OLLAMA_HOST,
        api_key: Optional[str] = None,
        client: Optional[AsyncClient] = None,
    ):
        self.host = host
        self.api_key = api_key

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        # One client per provider, reused across calls.
        self.client = client or AsyncClient(host=self.host, headers=headers)

    @classmethod
    def from_settings(cls, settings) -> "OllamaProvider":
        return cls(host=settings.ollama_host, api_key=settings.ollama_api_key)

    async def info(self) -> ProviderInfo:
        return ProviderInfo(
            name=self.name,
            supports_streaming=True,
            supports_tools=False,
        )

    async def health_check(self) -> bool:
        try:
            await self.client.list()
            return True
        except Exception as e:
            logger.error(f"Ollama Connection Failed: {e}")
            return False

    async def list_models(self) -> List[ModelInfo]:
        try:
            response = await self.client.list()
        except Exception as e:
            raise self._map_error(e) from e

        models = []
        for entry in getattr(response, "models", None) or []:
            model_id = getattr(entry, "model", None) or str(entry)
            models.append(ModelInfo(id=model_id, name=model_id))
        return models

    async def complete(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> Completion:
        payload = self._serialize_messages(messages, options)

        try:
            response = await self.client.chat(
                model=options.model,
                messages=payload,
                options=self._build_options(options),
                stream=False,
            )
        except Exception as e:
            logger.error(f"Ollama request failed: {e}")
            raise self._map_error(e, options.model) from e

        finish_reason = FinishReason.from_backend(getattr(response, "done_reason", None))
        return Completion(
            content=response.message.content or "",
            model=getattr(response, "model", None) or options.model,
            usage=TokenUsage.from_counts(
                getattr(response, "prompt_eval_count", None),
                getattr(response, "eval_count", None),
            ),
            truncated=finish_reason == FinishReason.LENGTH,
            finish_reason=finish_reason,
        )

    async def complete_stream(
        self, messages: Sequence[Message], options: GenerationOptions
    ) -> AsyncIterator[StreamChunk]:
        payload = self._serialize_messages(messages, options)

        try:
            stream = await self.client.chat(
                model=options.model,
                messages=payload,
                options=self._build_options(options),
                stream=True,
            )

            async for chunk in stream:
                if chunk.done:
                    yield StreamChunk(
                        delta=chunk.message.content or "",
                        done=True,
                        usage=TokenUsage.from_counts(
                            chunk.prompt_eval_count, chunk.eval_count
                        ),
                    )
                    return
                if chunk.message.content:
                    yield StreamChunk(delta=chunk.message.content)

        except Exception as e:
            logger.error(f"Stream Error: {e}", exc_info=True)
            raise self._map_error(e, options.model) from e

        # Backend closed the stream without a terminal chunk.
        yield StreamChunk(delta="", done=True)

    @staticmethod
    def _build_options(options: GenerationOptions) -> Dict[str, Any]:
        built: Dict[str, Any] = {
            "temperature": options.temperature,
            "top_p": options.top_p,
            "num_predict": options.max_tokens,
        }
        if options.stop_sequences:
            built["stop"] = list(options.stop_sequences)
        return built

    @staticmethod
    def _serialize_messages(
        messages: Sequence[Message], options: GenerationOptions
    ) -> List[Dict[str, Any]]:
        """
        Convert messages into the Ollama chat payload.

        Tool results go back as user context: the text protocol does not
        use native tool-call ids, so a `tool` role would be rejected.
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
            serialized.append({"role": role, "content": message.content})

        return serialized

    def _map_error(self, exc: Exception, model: Optional[str] = None) -> ProviderError:
        if isinstance(exc, ProviderError):
            return exc

        kwargs = {"provider_name": self.name, "model_name": model, "original_error": exc}

        if isinstance(exc, ResponseError):
            status = getattr(exc, "status_code", None)
            if status == 429:
                return ProviderRateLimitError(f"Ollama rate limited: {exc.error}", **kwargs)
            if status in (401, 403):
                return ProviderAuthenticationError(
                    f"Ollama rejected credentials ({status}): {exc.error}", **kwargs
                )
            return ProviderError(f"Ollama API error ({status}): {exc.error}", **kwargs)

        if isinstance(exc, (httpx.TransportError, ConnectionError)):
            return ProviderNotAvailableError(
                f"Ollama unreachable at {self.host}: {exc}", **kwargs
            )

        return ProviderError(f"Ollama request failed: {exc}", **kwargs)
