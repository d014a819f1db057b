import asyncio

import pytest

from agent_core.agent.context import Conversation, Message, Role
from agent_core.agent.core import Agent, AgentBuilder, AgentConfig, DEFAULT_SYSTEM_PROMPT
from agent_core.exceptions import (
    ConfigurationError,
    MaxIterationsError,
    OperationCancelledError,
    ProviderRateLimitError,
)
from agent_core.protocol import EventBus, EventTypes
from agent_core.providers import ProviderChain, ProviderStrategy
from agent_core.tools import ToolRegistry

from conftest import ExplodingTool, FailingProvider, ScriptedProvider, fenced


def _agent(provider, *tools, **config):
    return Agent(provider, ToolRegistry(tools), AgentConfig(**config))


def _user_conversation(text="What is 2 + 2?"):
    conv = Conversation()
    conv.push(Message.user(text))
    return conv


class TestRun:
    @pytest.mark.asyncio
    async def test_direct_answer_takes_one_iteration(self):
        provider = ScriptedProvider(["The answer is 4."])
        conv = _user_conversation()

        answer = await _agent(provider).run(conv)

        assert answer == "The answer is 4."
        assert len(provider.calls) == 1
        assert [m.role for m in conv] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]

    @pytest.mark.asyncio
    async def test_system_prompt_primed_once_with_tool_section(self, calculator):
        provider = ScriptedProvider(
            [fenced("calculate", {"expression": "2 + 2"}), "It is 4."]
        )
        conv = _user_conversation()

        await _agent(provider, calculator).run(conv)

        system = conv.messages()[0]
        assert system.role == Role.SYSTEM
        assert system.content.startswith(DEFAULT_SYSTEM_PROMPT)
        assert "### calculate" in system.content
        assert conv.count(Role.SYSTEM) == 1
        # Second provider call sees the same single system message.
        assert provider.calls[1][0] is system

    @pytest.mark.asyncio
    async def test_existing_system_prompt_is_kept(self):
        provider = ScriptedProvider(["ok"])
        conv = Conversation.with_system_prompt("custom")
        conv.push(Message.user("hi"))

        await _agent(provider).run(conv)

        assert conv.messages()[0].content == "custom"

    @pytest.mark.asyncio
    async def test_tool_descriptions_can_be_disabled(self, calculator):
        provider = ScriptedProvider(["ok"])
        conv = _user_conversation()

        await _agent(provider, calculator, inject_tool_descriptions=False).run(conv)

        assert conv.messages()[0].content == DEFAULT_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_tool_round_trip(self, calculator):
        provider = ScriptedProvider(
            [
                "Let me compute.\n" + fenced("calculate", {"expression": "2 + 2"}, "c1"),
                "2 + 2 = 4",
            ]
        )
        conv = _user_conversation()

        answer = await _agent(provider, calculator).run(conv)

        assert answer == "2 + 2 = 4"
        roles = [m.role for m in conv]
        assert roles == [Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.TOOL, Role.ASSISTANT]
        tool_msg = conv.messages()[3]
        assert tool_msg.content == "[Tool 'calculate' returned]\n4"
        assert tool_msg.tool_call_id == "c1"

    @pytest.mark.asyncio
    async def test_assistant_metadata_records_model_and_tokens(self):
        provider = ScriptedProvider(["abcdefgh"])
        conv = _user_conversation()

        await _agent(provider).run(conv)

        meta = conv.last().metadata
        assert meta.model == "llama3.2"
        assert meta.tokens == 2

    @pytest.mark.asyncio
    async def test_iteration_limit_preserves_conversation(self, calculator):
        limit = 3
        provider = ScriptedProvider([fenced("calculate", {"expression": "1 + 1"})])
        conv = _user_conversation()

        with pytest.raises(MaxIterationsError) as exc_info:
            await _agent(provider, calculator, max_iterations=limit).run(conv)

        assert exc_info.value.limit == limit
        assert str(exc_info.value) == "Maximum iterations (3) reached"
        assert len(provider.calls) == limit
        assert conv.count(Role.ASSISTANT) == limit
        assert conv.count(Role.TOOL) == limit

    @pytest.mark.asyncio
    async def test_validation_failure_becomes_failed_tool_message(self, calculator):
        provider = ScriptedProvider([fenced("calculate", {}), "Sorry."])
        conv = _user_conversation()

        answer = await _agent(provider, calculator).run(conv)

        assert answer == "Sorry."
        tool_msg = conv.messages()[3]
        assert tool_msg.content.startswith("[Tool 'calculate' failed]\nError: ")
        assert "expression" in tool_msg.content
        assert calculator.invocations == 0

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_failed_tool_message(self):
        provider = ScriptedProvider([fenced("teleport", {"to": "mars"}), "Cannot."])
        conv = _user_conversation()

        assert await _agent(provider).run(conv) == "Cannot."
        assert "Tool not found: teleport" in conv.messages()[3].content

    @pytest.mark.asyncio
    async def test_tool_crash_does_not_abort_loop(self):
        provider = ScriptedProvider([fenced("explode", {}), "Recovered."])
        conv = _user_conversation()

        assert await _agent(provider, ExplodingTool()).run(conv) == "Recovered."
        assert conv.messages()[3].content == "[Tool 'explode' failed]\nError: boom"

    @pytest.mark.asyncio
    async def test_provider_error_propagates_unmodified(self):
        error = ProviderRateLimitError("slow down", retry_after=5)
        provider = FailingProvider(error)
        conv = _user_conversation()

        with pytest.raises(ProviderRateLimitError) as exc_info:
            await _agent(provider).run(conv)

        assert exc_info.value is error
        assert len(provider.calls) == 1
        assert [m.role for m in conv] == [Role.SYSTEM, Role.USER]

    @pytest.mark.asyncio
    async def test_cancel_event_checked_between_iterations(self):
        provider = ScriptedProvider(["unused"])
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(OperationCancelledError):
            await _agent(provider).run(_user_conversation(), cancel_event=cancel)
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_auto_truncate_before_provider_call(self):
        provider = ScriptedProvider(["done"])
        conv = Conversation(max_context_tokens=40)
        for i in range(6):
            conv.push(Message.user(f"old {i} " + "x" * 60))

        await _agent(provider, auto_truncate=True).run(conv)

        sent = provider.calls[0]
        assert sent[0].role == Role.SYSTEM
        assert len(sent) < 7

    @pytest.mark.asyncio
    async def test_ask_uses_fresh_conversation(self):
        provider = ScriptedProvider(["Paris"])
        agent = _agent(provider)

        assert await agent.ask("Capital of France?") == "Paris"
        sent = provider.calls[0]
        assert [m.role for m in sent] == [Role.SYSTEM, Role.USER]
        assert sent[1].content == "Capital of France?"

    @pytest.mark.asyncio
    async def test_round_robin_chain_rotates_per_iteration(self, calculator):
        first = ScriptedProvider([fenced("calculate", {"expression": "1 + 1"})], "a")
        second = ScriptedProvider(["2"], "b")
        chain = ProviderChain([first, second], ProviderStrategy.ROUND_ROBIN)

        answer = await _agent(chain, calculator).run(_user_conversation())

        assert answer == "2"
        assert len(first.calls) == 1
        assert len(second.calls) == 1


class TestEvents:
    @pytest.mark.asyncio
    async def test_emits_lifecycle_events(self, calculator):
        bus = EventBus()
        seen = []

        async def record(data):
            seen.append(data)

        statuses = []

        async def record_status(data):
            statuses.append(data.status)

        for event in (
            EventTypes.TOOL_EXECUTION_START,
            EventTypes.TOOL_EXECUTION_COMPLETE,
            EventTypes.RESPONSE_COMPLETE,
        ):
            await bus.subscribe(event, record)
        await bus.subscribe(EventTypes.STATUS_CHANGED, record_status)

        provider = ScriptedProvider([fenced("calculate", {"expression": "2 + 2"}), "4"])
        agent = Agent(provider, ToolRegistry([calculator]), bus=bus)
        await agent.run(_user_conversation())

        assert seen[0]["tool_name"] == "calculate"
        assert seen[1].success
        assert seen[2] == {"content": "4"}
        assert statuses == [
            "looping",
            "tool_detected",
            "executing",
            "looping",
            "no_tool",
            "done",
        ]

    @pytest.mark.asyncio
    async def test_emits_error_on_limit(self, calculator):
        bus = EventBus()
        errors = []

        async def record(data):
            errors.append(data)

        await bus.subscribe(EventTypes.ERROR, record)
        provider = ScriptedProvider([fenced("calculate", {"expression": "1 + 1"})])
        agent = Agent(provider, ToolRegistry([calculator]), AgentConfig(max_iterations=1), bus)

        with pytest.raises(MaxIterationsError):
            await agent.run(_user_conversation())
        assert errors[0]["type"] == "MaxIterationsError"


class TestBuilder:
    def test_build_without_provider_fails(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AgentBuilder().build()
        assert exc_info.value.category == "configuration"

    def test_fluent_configuration(self, calculator):
        provider = ScriptedProvider(["ok"])
        agent = (
            AgentBuilder()
            .provider(provider)
            .tool(calculator)
            .system_prompt("Be terse.")
            .model("mistral")
            .temperature(0.1)
            .max_tokens(128)
            .max_iterations(4)
            .inject_tool_descriptions(False)
            .build()
        )

        assert agent.config.system_prompt == "Be terse."
        assert agent.config.generation.model == "mistral"
        assert agent.config.generation.temperature == 0.1
        assert agent.config.generation.max_tokens == 128
        assert agent.config.max_iterations == 4
        assert "calculate" in agent.tools
        assert agent.build_system_prompt() == "Be terse."

    def test_tools_replaces_registry(self, calculator, clock):
        registry = ToolRegistry([clock])
        agent = AgentBuilder().provider(ScriptedProvider(["ok"])).tool(calculator).tools(registry).build()
        assert agent.tools.names() == ["datetime"]

    def test_built_agents_do_not_share_config(self):
        builder = AgentBuilder().provider(ScriptedProvider(["ok"]))
        first = builder.build()
        builder.max_iterations(2)
        assert first.config.max_iterations == 10

    @pytest.mark.asyncio
    async def test_model_reaches_provider(self):
        provider = ScriptedProvider(["ok"])
        agent = AgentBuilder().provider(provider).model("qwen2.5").build()
        await agent.ask("hi")
        assert provider.options[0].model == "qwen2.5"


class TestWarnings:
    @pytest.mark.asyncio
    async def test_failed_tool_emits_warning(self):
        bus = EventBus()
        warnings = []

        async def record(data):
            warnings.append(data)

        await bus.subscribe(EventTypes.WARNING, record)
        provider = ScriptedProvider([fenced("explode", {}, call_id="c1"), "Recovered."])
        agent = Agent(provider, ToolRegistry([ExplodingTool()]), bus=bus)

        assert await agent.run(_user_conversation()) == "Recovered."
        assert len(warnings) == 1
        assert warnings[0]["tool_name"] == "explode"
        assert warnings[0]["tool_call_id"] == "c1"
        assert "Error: boom" in warnings[0]["message"]

    @pytest.mark.asyncio
    async def test_successful_tool_emits_no_warning(self, calculator):
        bus = EventBus()
        warnings = []

        async def record(data):
            warnings.append(data)

        await bus.subscribe(EventTypes.WARNING, record)
        provider = ScriptedProvider([fenced("calculate", {"expression": "2 + 2"}), "4"])
        await Agent(provider, ToolRegistry([calculator]), bus=bus).run(_user_conversation())

        assert warnings == []
