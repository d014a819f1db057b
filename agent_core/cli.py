"""
Interactive console for agent-core.

    python -m agent_core              # REPL
    python -m agent_core --once TEXT  # single question
    python -m agent_core --check      # provider health check
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.theme import Theme

from agent_core.agent.context import Conversation, Message
from agent_core.agent.core import Agent, AgentBuilder
from agent_core.config.settings import Settings, load_settings
from agent_core.exceptions import AgentCoreError
from agent_core.protocol.bus import EventBus
from agent_core.protocol.events import EventTypes
from agent_core.providers import ProviderChain, ProviderStrategy, create_provider_chain
from agent_core.utils.logger import EventLogger, setup_logging

THEME = Theme(
    {
        "agent.text": "chartreuse1",
        "agent.border": "medium_purple3",
        "user.text": "bright_black",
        "tech.cyan": "bold turquoise2",
        "success": "bright_green",
        "error": "bold red3",
        "warning": "bold gold1",
    }
)

console = Console(theme=THEME)
logger = logging.getLogger("CLI")

EXIT_COMMANDS = {"/exit", "/quit"}
FAILOVER_STRATEGIES = {ProviderStrategy.FAILOVER, ProviderStrategy.MODEL_ROUTED}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent_core", description="Tool-using ReAct agent console"
    )
    parser.add_argument("--once", metavar="TEXT", help="answer one question and exit")
    parser.add_argument(
        "--check", action="store_true", help="run a provider health check and exit"
    )
    parser.add_argument("--model", help="override MODEL_NAME")
    parser.add_argument("--provider", choices=["ollama", "openrouter"])
    parser.add_argument("--log-level", help="override LOG_LEVEL")
    return parser


async def _show_tool_start(data) -> None:
    console.print(f"[tech.cyan]→ {data.get('tool_name')}[/] {data.get('arguments')}")


async def _show_tool_result(result) -> None:
    style = "success" if result.success else "error"
    console.print(f"[{style}]← {result.name}[/]: {result.output}")


async def build_agent(settings: Settings, bus: EventBus) -> Agent:
    chain = create_provider_chain(settings)
    await bus.subscribe(EventTypes.TOOL_EXECUTION_START, _show_tool_start)
    await bus.subscribe(EventTypes.TOOL_EXECUTION_COMPLETE, _show_tool_result)
    return AgentBuilder.from_settings(settings).provider(chain).bus(bus).build()


async def check_providers(chain: ProviderChain) -> bool:
    healthy = True
    for provider in chain.providers:
        info = await provider.info()
        ok = await provider.health_check()
        healthy = healthy and ok
        status = "[success]ok[/]" if ok else "[error]unreachable[/]"
        console.print(f"{info.name}: {status}")
    return healthy


def render_answer(text: str) -> None:
    console.print(
        Panel(Markdown(text), border_style="agent.border", style="agent.text")
    )


def fail_over(agent: Agent, error: AgentCoreError) -> bool:
    """
    Point a failover or model-routed chain at its next backend after a
    retryable failure. Returns True when the chain moved.
    """
    chain = agent.provider
    if not error.retryable or not isinstance(chain, ProviderChain):
        return False
    if chain.strategy not in FAILOVER_STRATEGIES or len(chain) < 2:
        return False

    chain.advance()
    logger.warning(f"Provider failed ({error}); switching to the next backend")
    console.print("[warning]Switching to the next provider.[/]")
    return True


async def answer_once(agent: Agent, question: str) -> str:
    """Ask one question, trying each backend of a failover chain at most once."""
    attempts = len(agent.provider) if isinstance(agent.provider, ProviderChain) else 1
    attempt = 1
    while True:
        try:
            return await agent.ask(question)
        except AgentCoreError as e:
            if attempt >= attempts or not fail_over(agent, e):
                raise
            attempt += 1


async def repl(agent: Agent) -> None:
    session = PromptSession(mouse_support=False, complete_while_typing=False)
    conversation = Conversation.with_system_prompt(
        agent.build_system_prompt(), max_context_tokens=agent.config.max_context_tokens
    )
    console.print("[user.text]Type /exit to quit, /clear to reset the conversation.[/]")

    while True:
        try:
            # patch_stdout keeps log output above the prompt line
            with patch_stdout():
                text = await session.prompt_async("  › ")
        except (EOFError, KeyboardInterrupt):
            break

        text = text.strip()
        if not text:
            continue
        if text in EXIT_COMMANDS:
            break
        if text == "/clear":
            conversation.clear_history()
            console.print("[user.text]History cleared.[/]")
            continue

        conversation.push(Message.user(text))
        try:
            with console.status("[agent.text]Thinking...[/]"):
                answer = await agent.run(conversation)
        except AgentCoreError as e:
            logger.debug("Run failed", exc_info=True)
            console.print(f"[error]{e.user_message}[/] [user.text]({e})[/]")
            fail_over(agent, e)
            continue
        render_answer(answer)


async def main_async(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.model:
        overrides["model_name"] = args.model
    if args.provider:
        overrides["llm_provider"] = args.provider
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        settings = load_settings(**overrides)
    except AgentCoreError as e:
        console.print(f"[error]{e}[/]")
        return 2

    setup_logging(settings.log_level)
    bus = EventBus()
    await EventLogger(bus).start()

    try:
        agent = await build_agent(settings, bus)
    except AgentCoreError as e:
        console.print(f"[error]{e.user_message}[/]")
        return 2

    if args.check:
        return 0 if await check_providers(agent.provider) else 1

    if args.once:
        try:
            render_answer(await answer_once(agent, args.once))
        except AgentCoreError as e:
            console.print(f"[error]{e.user_message}[/] [user.text]({e})[/]")
            return 1
        return 0

    await repl(agent)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    sys.exit(asyncio.run(main_async(argv)))
