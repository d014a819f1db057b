import logging
from dataclasses import replace
from typing import Optional, Union

from agent_core.agent.core.agent import Agent, AgentConfig
from agent_core.exceptions import ConfigurationError
from agent_core.protocol.bus import EventBus
from agent_core.providers.base import BaseProvider
from agent_core.providers.chain import ProviderChain
from agent_core.tools.base import BaseTool
from agent_core.tools.registry import ToolRegistry

logger = logging.getLogger("AgentBuilder")


class AgentBuilder:
    """
    Fluent construction of an Agent.

    Example:
        agent = (
            AgentBuilder()
            .provider(OllamaProvider())
            .tool(CalculatorTool())
            .model("llama3.2")
            .max_iterations(5)
            .build()
        )
    """

    def __init__(self):
        self._provider: Optional[Union[BaseProvider, ProviderChain]] = None
        self._registry = ToolRegistry()
        self._config = AgentConfig()
        self._bus: Optional[EventBus] = None

    @classmethod
    def from_settings(cls, settings) -> "AgentBuilder":
        """
        Seed generation options, limits, context budget and system prompt
        from Settings.
        The provider is not created here; see providers.create_provider_chain.
        """
        builder = cls()
        builder._config = AgentConfig(
            system_prompt=settings.system_prompt or builder._config.system_prompt,
            max_iterations=settings.max_iterations,
            generation=settings.generation_options(),
            tool_timeout=settings.tool_timeout,
            auto_truncate=settings.auto_truncate,
            max_context_tokens=settings.max_context_tokens,
        )
        return builder

    def provider(self, provider: Union[BaseProvider, ProviderChain]) -> "AgentBuilder":
        self._provider = provider
        return self

    def tool(self, tool: BaseTool) -> "AgentBuilder":
        self._registry.register(tool)
        return self

    def tools(self, registry: ToolRegistry) -> "AgentBuilder":
        """Replace the registry wholesale (tools added earlier are dropped)."""
        self._registry = registry
        return self

    def system_prompt(self, prompt: str) -> "AgentBuilder":
        self._config.system_prompt = prompt
        return self

    def model(self, model: str) -> "AgentBuilder":
        self._config.generation = replace(self._config.generation, model=model)
        return self

    def temperature(self, temperature: float) -> "AgentBuilder":
        self._config.generation = replace(self._config.generation, temperature=temperature)
        return self

    def max_tokens(self, max_tokens: int) -> "AgentBuilder":
        self._config.generation = replace(self._config.generation, max_tokens=max_tokens)
        return self

    def max_iterations(self, limit: int) -> "AgentBuilder":
        self._config.max_iterations = limit
        return self

    def inject_tool_descriptions(self, enabled: bool = True) -> "AgentBuilder":
        self._config.inject_tool_descriptions = enabled
        return self

    def auto_truncate(self, enabled: bool = True) -> "AgentBuilder":
        self._config.auto_truncate = enabled
        return self

    def max_context_tokens(self, budget: int) -> "AgentBuilder":
        self._config.max_context_tokens = budget
        return self

    def tool_timeout(self, seconds: Optional[float]) -> "AgentBuilder":
        self._config.tool_timeout = seconds
        return self

    def bus(self, bus: EventBus) -> "AgentBuilder":
        self._bus = bus
        return self

    def build(self) -> Agent:
        """
        Raises:
            ConfigurationError: If no provider was supplied.
        """
        if self._provider is None:
            raise ConfigurationError("Provider is required")

        logger.debug(
            "Building agent: model=%s tools=%d max_iterations=%d",
            self._config.generation.model,
            len(self._registry),
            self._config.max_iterations,
        )
        return Agent(
            provider=self._provider,
            registry=self._registry,
            config=replace(self._config),
            bus=self._bus,
        )
