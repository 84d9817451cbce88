"""
Capability interface for the language-model backend, and its langchain adapter.
"""
from typing import Any, AsyncIterator, Protocol, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from l2chat.core.agents.conlang import build_agent, build_llm
from l2chat.core.domain import Fragment
from l2chat.core.langgraph_adapter import adapt_events
from l2chat.models import Turn


class BackendError(Exception):
    pass


class StreamStartError(BackendError):
    """The backend failed before delivering the first fragment."""


class ChatBackend(Protocol):
    async def invoke(self, turns: Sequence[Turn]) -> Turn: ...

    def stream(self, turns: Sequence[Turn]) -> AsyncIterator[Fragment]: ...


def to_langchain(turns: Sequence[Turn]) -> list[BaseMessage]:
    # Recorded tool calls are informational only; replaying them would need
    # matching tool results, so assistant turns go out as plain text.
    out: list[BaseMessage] = []
    for turn in turns:
        if turn.role == 'system':
            out.append(SystemMessage(turn.content))
        elif turn.role == 'user':
            out.append(HumanMessage(turn.content))
        else:
            out.append(AIMessage(turn.content))
    return out


def _message_text(msg: Any) -> str:
    content = getattr(msg, 'content', '')
    if isinstance(content, list):
        return ''.join(
            part.get('text', '') for part in content
            if isinstance(part, dict) and part.get('type') == 'text'
        )
    return content if isinstance(content, str) else str(content)


class LangGraphBackend:
    def __init__(self, settings, tools: list[Any]):
        self.llm = build_llm(settings.model, settings.api_key, settings.base_url)
        self.agent = build_agent(self.llm, tools)

    async def invoke(self, turns: Sequence[Turn]) -> Turn:
        ai_msg = await self.llm.ainvoke(to_langchain(turns))
        return Turn.assistant(_message_text(ai_msg))

    def stream(self, turns: Sequence[Turn]) -> AsyncIterator[Fragment]:
        payload = {'messages': to_langchain(turns)}
        return adapt_events(self.agent.astream_events(payload, version='v2'))
