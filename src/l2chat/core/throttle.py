import time
from typing import Callable, Optional, Sequence

from l2chat.models import Turn

DEFAULT_INTERVAL = 0.10
MEDIUM_INTERVAL = 0.15
LONG_INTERVAL = 0.20

MEDIUM_RESPONSE = 5_000
LONG_RESPONSE = 10_000

STREAMING_HEADER = "=== Streaming Response ===\n\n"
CURSOR = "▌"


def interval_for(response_length: int) -> float:
    """Minimum seconds between rebuilds for a response of this many characters."""
    if response_length > LONG_RESPONSE:
        return LONG_INTERVAL
    if response_length > MEDIUM_RESPONSE:
        return MEDIUM_INTERVAL
    return DEFAULT_INTERVAL


def render_buffer(
    history: Sequence[Turn],
    pending: str,
    streaming: bool,
    max_history_display: int = 10,
) -> str:
    """
    Build the visible content: the last ``max_history_display`` turns plus the
    whole in-progress response.
    """
    lines = []
    shown = list(history)
    if len(shown) > max_history_display:
        shown = shown[-max_history_display:]
        lines.append(f"... (showing last {max_history_display} messages) ...\n\n")

    for turn in shown:
        if turn.role == 'user':
            lines.append(f"👤 User: {turn.content}\n\n")
        elif turn.role == 'assistant':
            lines.append(f"🤖 Assistant: {turn.content}\n\n")

    if streaming:
        lines.append(STREAMING_HEADER)
        lines.append(pending)
        if pending:
            lines.append(CURSOR)

    return "".join(lines)


class RenderThrottle:
    """
    Decides when the content buffer may be rebuilt while a response streams.
    """

    def __init__(self, max_history_display: int = 10, clock: Callable[[], float] = time.monotonic):
        self.max_history_display = max_history_display
        self.clock = clock
        self.last_flush: Optional[float] = None
        self.min_interval = DEFAULT_INTERVAL

    def adjust(self, response_length: int) -> None:
        self.min_interval = interval_for(response_length)

    def should_flush(self, force: bool = False) -> bool:
        now = self.clock()
        if not force and self.last_flush is not None and now - self.last_flush < self.min_interval:
            return False
        self.last_flush = now
        return True

    def reset(self) -> None:
        self.min_interval = DEFAULT_INTERVAL
        self.last_flush = None

    def render(self, history: Sequence[Turn], pending: str, streaming: bool) -> str:
        return render_buffer(history, pending, streaming, self.max_history_display)
