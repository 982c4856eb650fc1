"""Tool call handler contract.

When a run requires action, every pending tool call is handed to a
ToolCallHandler and the returned string is submitted as that call's output.
"""

from collections.abc import Awaitable, Callable

from assistant_chat.models.schemas import ToolCall

ToolCallHandler = Callable[[ToolCall], Awaitable[str]]


async def empty_tool_call_handler(tool_call: ToolCall) -> str:
    """Default handler: answer every tool call with an empty output."""
    return ""
