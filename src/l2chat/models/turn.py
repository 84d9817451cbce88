"""
Data models for the L2 chat client.
"""
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

Role = Literal['user', 'assistant', 'system']
ROLES = ('user', 'assistant', 'system')


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation the backend reported while answering."""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {'name': self.name, 'arguments': dict(self.arguments)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolCall":
        if not isinstance(data, Mapping):
            raise ValueError(f'tool call must be an object, got {type(data).__name__}')
        name = data.get('name')
        if not isinstance(name, str):
            raise ValueError(f'tool call without a name: {data!r}')
        args = data.get('arguments') or {}
        if not isinstance(args, dict):
            raise ValueError(f'tool call arguments must be an object: {args!r}')
        return cls(name=name, arguments=args)


@dataclass(frozen=True)
class Turn:
    """
    One role-tagged message of the conversation.

    Turns never change once they are in a history; build a new one instead.
    """
    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role='user', content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls=()) -> "Turn":
        return cls(role='assistant', content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def system(cls, content: str) -> "Turn":
        return cls(role='system', content=content)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'role': self.role, 'content': self.content}
        if self.tool_calls:
            data['tool_calls'] = [tc.to_dict() for tc in self.tool_calls]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Turn":
        if not isinstance(data, Mapping):
            raise ValueError(f'turn must be an object, got {type(data).__name__}')
        role = data.get('role')
        if role not in ROLES:
            raise ValueError(f'unknown role: {role!r}')
        content = data.get('content') or ''
        if not isinstance(content, str):
            raise ValueError('turn content must be a string')
        raw_calls = data.get('tool_calls') or []
        if not isinstance(raw_calls, list):
            raise ValueError('tool_calls must be a list')
        calls = tuple(ToolCall.from_dict(tc) for tc in raw_calls)
        return cls(role=role, content=content, tool_calls=calls)
