from .agent import Agent, AgentConfig, DEFAULT_MAX_ITERATIONS, DEFAULT_SYSTEM_PROMPT
from .builder import AgentBuilder
from .execution import ToolExecutor
from .state_machine import LoopState, StateMachine

__all__ = [
    "Agent",
    "AgentBuilder",
    "AgentConfig",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_SYSTEM_PROMPT",
    "LoopState",
    "StateMachine",
    "ToolExecutor",
]
