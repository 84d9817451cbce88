"""
Fragments travelling from the backend stream to the session, through the pump queue.
"""

from typing import Any, Literal, TypedDict, Union


class TokenEvent(TypedDict):
    type: Literal['token']
    text: str


class ToolCallEvent(TypedDict):
    type: Literal['tool_call']
    tool: str
    args: dict[str, Any]


class DoneEvent(TypedDict):
    type: Literal['done']


class ErrorEvent(TypedDict):
    type: Literal['error']
    message: str


Fragment = Union[TokenEvent, ToolCallEvent]

QueueEvent = Union[TokenEvent, ToolCallEvent, DoneEvent, ErrorEvent]


def token(text: str) -> TokenEvent:
    return {'type': 'token', 'text': text}


def tool_call(name: str, args: dict[str, Any] | None = None) -> ToolCallEvent:
    return {'type': 'tool_call', 'tool': name, 'args': dict(args or {})}


def tool_marker(name: str) -> str:
    """Inline annotation shown in the response where a tool was invoked."""
    return f'\n[Tool Call: {name}]\n'
