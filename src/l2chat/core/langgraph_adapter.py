
from typing import Any, AsyncIterator, Dict, Mapping, Optional

from l2chat.core.domain import Fragment, token, tool_call


def _extract_text(data: Mapping[str, Any]) -> Optional[str]:
    ch = data.get('chunk')
    if isinstance(ch, str):
        return ch or None

    text = getattr(ch, 'content', None)
    if isinstance(text, list):
        # content blocks from providers that split text and reasoning
        text = ''.join(
            part.get('text', '') for part in text
            if isinstance(part, dict) and part.get('type') == 'text'
        )
    return text if isinstance(text, str) and text else None


def _tool_args(ev: Mapping[str, Any]) -> dict[str, Any]:
    data = ev.get('data') or {}
    tool_input = data.get('input') or {}
    return dict(tool_input) if isinstance(tool_input, Mapping) else {'input': tool_input}


async def adapt_events(stream: AsyncIterator[Dict[str, Any]]) -> AsyncIterator[Fragment]:
    """
    Turn langgraph ``astream_events`` (v2) into text and tool-call fragments.
    """
    async for ev in stream:
        event = ev.get('event')
        data = ev.get('data') or {}

        if event == 'on_chat_model_stream':
            text = _extract_text(data)
            if text:
                yield token(text)

        elif event == 'on_tool_start':
            yield tool_call(ev.get('name') or 'unknown', _tool_args(ev))
