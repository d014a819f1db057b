import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from agent_core.agent.context import DEFAULT_MAX_CONTEXT_TOKENS, Conversation, Message
from agent_core.agent.core.execution import ToolExecutor
from agent_core.agent.core.state_machine import LoopState, StateMachine
from agent_core.agent.logic.parsers import ToolCallParser
from agent_core.agent.structs import AgentStatus, Completion, GenerationOptions
from agent_core.exceptions import MaxIterationsError, OperationCancelledError
from agent_core.protocol.bus import EventBus
from agent_core.protocol.events import EventTypes
from agent_core.providers.base import BaseProvider
from agent_core.providers.chain import ProviderChain
from agent_core.tools.base import ToolResult
from agent_core.tools.registry import ToolRegistry

DEFAULT_MAX_ITERATIONS = 10

DEFAULT_SYSTEM_PROMPT = """You are a helpful AI assistant.

When you need to use a tool, respond with a JSON block in this exact format:
```tool
{"tool": "tool_name", "arguments": {"arg1": "value1"}}
```

After receiving tool results, synthesize them into a helpful response.
If you can answer directly without tools, do so.
Be concise and accurate."""


@dataclass
class AgentConfig:
    """
    Static configuration for one Agent.

    Attributes:
        system_prompt: Template used when a conversation has no system message.
        max_iterations: Provider round-trips allowed per run.
        generation: Options passed to every provider call.
        inject_tool_descriptions: Append the registry's tool section to the
            synthesized system prompt.
        auto_truncate: Run Conversation.truncate_to_fit() before each
            provider call.
        tool_timeout: Seconds before a tool call is abandoned. None waits
            indefinitely.
        max_context_tokens: Budget given to conversations created by ask().
    """

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    generation: GenerationOptions = field(default_factory=GenerationOptions)
    inject_tool_descriptions: bool = True
    auto_truncate: bool = False
    tool_timeout: Optional[float] = None
    max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS


class Agent:
    """
    The bounded ReAct loop.

    Each iteration:
    1. Ask the provider for a completion of the whole conversation.
    2. Record the raw text as an assistant message.
    3. If it contains a tool call, dispatch it, record the result as a
       tool message and loop. Otherwise return the text.

    The agent holds no per-run state, so several runs (on different
    conversations) may share one Agent, provider and registry.
    """

    def __init__(
        self,
        provider: Union[BaseProvider, ProviderChain],
        registry: Optional[ToolRegistry] = None,
        config: Optional[AgentConfig] = None,
        bus: Optional[EventBus] = None,
    ):
        self._provider = provider
        self._registry = registry if registry is not None else ToolRegistry()
        self._config = config or AgentConfig()
        self._bus = bus
        self._executor = ToolExecutor(timeout_seconds=self._config.tool_timeout)
        self._logger = logging.getLogger("Agent")

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def tools(self) -> ToolRegistry:
        return self._registry

    @property
    def provider(self) -> Union[BaseProvider, ProviderChain]:
        return self._provider

    def build_system_prompt(self) -> str:
        """Configured template plus, if enabled, the tool capability section."""
        prompt = self._config.system_prompt
        if self._config.inject_tool_descriptions and len(self._registry) > 0:
            prompt = f"{prompt}\n\n{self._registry.generate_prompt_section()}"
        return prompt

    async def ask(self, question: str) -> str:
        """Run a one-off question in a fresh conversation."""
        conversation = Conversation.with_system_prompt(
            self.build_system_prompt(), max_context_tokens=self._config.max_context_tokens
        )
        conversation.push(Message.user(question))
        return await self.run(conversation)

    async def run(
        self, conversation: Conversation, cancel_event: Optional[asyncio.Event] = None
    ) -> str:
        """
        Drive the loop until the model answers without a tool call.

        The conversation is mutated in place and keeps every appended
        message whether the run succeeds or fails.

        Raises:
            MaxIterationsError: The iteration bound was exceeded.
            OperationCancelledError: cancel_event was set between iterations.
            ProviderError: Any provider failure, unmodified.
        """
        state = StateMachine()
        self._prime_system_prompt(conversation)

        iteration = 0
        while True:
            iteration += 1
            await self._set_status(state, LoopState.LOOPING, "Thinking...", iteration)

            if iteration > self._config.max_iterations:
                await self._set_status(
                    state,
                    LoopState.LIMIT_EXCEEDED,
                    f"Stopped after {self._config.max_iterations} iterations",
                    iteration,
                )
                error = MaxIterationsError(self._config.max_iterations)
                await self._fail(state, error, iteration)
                raise error

            if cancel_event is not None and cancel_event.is_set():
                error = OperationCancelledError(iteration=iteration)
                await self._fail(state, error, iteration)
                raise error

            if self._config.auto_truncate:
                removed = conversation.truncate_to_fit()
                if removed:
                    await self._emit(
                        EventTypes.CONTEXT_TRUNCATED,
                        {"removed": removed, "tokens": conversation.estimate_tokens()},
                    )

            try:
                completion = await self._generate(conversation)
            except Exception as e:
                self._logger.error(f"Provider call failed: {e}")
                await self._fail(state, e, iteration)
                raise

            content = completion.content
            conversation.push(self._assistant_message(completion))

            tool_call = ToolCallParser.parse(content)
            if tool_call is None:
                await self._set_status(state, LoopState.NO_TOOL, "Answer ready", iteration)
                await self._set_status(state, LoopState.DONE, "Ready", iteration)
                await self._emit(EventTypes.RESPONSE_COMPLETE, {"content": content})
                return content

            await self._set_status(
                state, LoopState.TOOL_DETECTED, f"Tool requested: {tool_call.name}", iteration
            )
            await self._set_status(
                state, LoopState.EXECUTING, f"Executing {tool_call.name}...", iteration
            )
            self._logger.debug(f"Executing tool {tool_call.name}")
            await self._emit(
                EventTypes.TOOL_EXECUTION_START,
                {
                    "tool_name": tool_call.name,
                    "tool_call_id": tool_call.id,
                    "arguments": tool_call.arguments,
                },
            )

            result = await self._executor.execute(tool_call, self._registry)

            await self._emit(EventTypes.TOOL_EXECUTION_COMPLETE, result)
            if not result.success:
                await self._emit(
                    EventTypes.WARNING,
                    {
                        "message": f"Tool '{result.name}' failed: {result.output}",
                        "tool_name": result.name,
                        "tool_call_id": result.id,
                    },
                )
            conversation.push(Message.tool(self.format_tool_result(result), tool_call.id))

    @staticmethod
    def format_tool_result(result: ToolResult) -> str:
        verb = "returned" if result.success else "failed"
        return f"[Tool '{result.name}' {verb}]\n{result.output}"

    def _prime_system_prompt(self, conversation: Conversation) -> None:
        if conversation.system_prompt() is None:
            conversation.prepend_system(Message.system(self.build_system_prompt()))

    async def _generate(self, conversation: Conversation) -> Completion:
        provider = self._provider
        if isinstance(provider, ProviderChain):
            provider = provider.require_provider()

        await self._emit(EventTypes.THINKING_STARTED, None)
        return await provider.complete(conversation.messages(), self._config.generation)

    def _assistant_message(self, completion: Completion) -> Message:
        message = Message.assistant(completion.content, model=completion.model)
        if completion.usage is not None:
            message.update_metadata(tokens=completion.usage.completion_tokens)
        if completion.finish_reason is not None:
            message.update_metadata(finish_reason=completion.finish_reason.value)
        return message

    async def _fail(self, state: StateMachine, error: Exception, iteration: int) -> None:
        await self._set_status(state, LoopState.FAILED, f"Error: {error}", iteration)
        await self._emit(
            EventTypes.ERROR,
            {"message": str(error), "type": type(error).__name__, "iteration": iteration},
        )

    async def _set_status(
        self, state: StateMachine, new_state: LoopState, message: str, iteration: int
    ) -> None:
        """
        Helper to update loop state and emit event in one go.
        """
        state.transition_to(new_state)
        await self._emit(
            EventTypes.STATUS_CHANGED,
            AgentStatus(status=new_state.value, message=message, iteration=iteration),
        )

    async def _emit(self, event_type: EventTypes, data: Any) -> None:
        if self._bus is not None:
            await self._bus.emit(event_type, data)
