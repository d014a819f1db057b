"""
Conversation model, shared structs and the reasoning loop.

The loop itself lives in ``agent_core.agent.core``; it is not imported here
so that providers can depend on the message model without a cycle.
"""
