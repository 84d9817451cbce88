"""
Session lifecycle: Idle -> Streaming -> Idle, and Exiting on quit.

All session state is changed from the interactive loop. The pump's
background task only writes to its queue (and the token counter); the loop
drains that queue on each ``tick``.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from l2chat.core.backend import StreamStartError
from l2chat.core.condenser import ContextCondenser
from l2chat.core.domain import tool_marker
from l2chat.core.pump import TokenStreamPump
from l2chat.core.storage import RecordNotFound, Store, StorageError
from l2chat.core.throttle import RenderThrottle
from l2chat.models import ToolCall, Turn, UsageStats

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    EXITING = "exiting"


def load_history(store: Store) -> list[Turn]:
    try:
        return store.read_history()
    except RecordNotFound:
        return []
    except (StorageError, OSError) as e:
        logger.warning("could not load conversation, starting empty: %s", e)
        return []


def load_stats(store: Store) -> UsageStats:
    try:
        return store.read_stats()
    except RecordNotFound:
        return UsageStats()
    except (StorageError, OSError) as e:
        logger.warning("could not load stats, starting from zero: %s", e)
        return UsageStats()


class Session:
    def __init__(
        self,
        store: Store,
        condenser: ContextCondenser,
        pump: TokenStreamPump,
        throttle: Optional[RenderThrottle] = None,
        on_render: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.condenser = condenser
        self.pump = pump
        self.throttle = throttle or RenderThrottle()
        self.on_render = on_render

        self.history: list[Turn] = load_history(store)
        self.stats: UsageStats = load_stats(store)
        self.state = SessionState.IDLE
        self.pending_response = ""
        self.content = ""

        self._queue: Optional[asyncio.Queue] = None
        self._tool_calls: list[ToolCall] = []

    @property
    def streaming(self) -> bool:
        return self.state is SessionState.STREAMING

    def accepts(self, text: str) -> bool:
        return self.state is SessionState.IDLE and bool(text and text.strip())

    def ensure_system_prompt(self, prompt: str) -> None:
        if not any(t.role == 'system' and t.content == prompt for t in self.history):
            self.history.append(Turn.system(prompt))

    # --- Idle -> Streaming ------------------------------------------------

    def begin(self, text: str) -> bool:
        """
        Accept a user submission. Returns False (and changes nothing) for
        empty input or while a response is still streaming.
        """
        if not self.accepts(text):
            return False

        self.history.append(Turn.user(text))
        self.pending_response = ""
        self._tool_calls = []
        self._queue = None
        self.state = SessionState.STREAMING
        self.flush()
        return True

    async def start_stream(self, text: str) -> None:
        """Condense the history and open the backend stream for ``text``."""
        messages = await self.condenser.condense(self.history, text)
        try:
            self._queue = await self.pump.start(messages, self.stats)
        except StreamStartError as e:
            logger.warning("could not start response stream: %s", e)
            self._abort()

    async def submit(self, text: str) -> bool:
        if not self.begin(text):
            return False
        await self.start_stream(text)
        return True

    def _abort(self) -> None:
        self.state = SessionState.IDLE
        self.throttle.reset()
        self.flush()
        self.persist_history()

    # --- Streaming --------------------------------------------------------

    def tick(self) -> bool:
        """
        Drain whatever the pump has queued without blocking.

        Returns True when the stream finished during this tick.
        """
        if not self.streaming or self._queue is None:
            return False

        while True:
            try:
                ev = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return False

            kind = ev.get('type')
            if kind == 'token':
                self._append(ev['text'])
            elif kind == 'tool_call':
                self._tool_calls.append(ToolCall(ev['tool'], ev.get('args') or {}))
                self._append(tool_marker(ev['tool']))
            elif kind in ('done', 'error'):
                self._finish()
                return True

    def _append(self, text: str) -> None:
        self.pending_response += text
        self.throttle.adjust(len(self.pending_response))
        self.flush()

    # --- Streaming -> Idle ------------------------------------------------

    def _finish(self) -> None:
        self.history.append(Turn.assistant(self.pending_response, self._tool_calls))
        self._queue = None
        self._tool_calls = []
        self.state = SessionState.IDLE
        self.flush(force=True)
        self.throttle.reset()
        self.persist_history()

    # --- Exiting ----------------------------------------------------------

    def shutdown(self) -> None:
        """Persist history and stats, best effort, and stop accepting input."""
        self.state = SessionState.EXITING
        self.persist_history()
        self.persist_stats()

    # --- rendering & persistence -------------------------------------------

    def flush(self, force: bool = False) -> bool:
        if not self.throttle.should_flush(force):
            return False
        self.content = self.throttle.render(self.history, self.pending_response, self.streaming)
        if self.on_render is not None:
            self.on_render(self.content)
        return True

    def persist_history(self) -> bool:
        try:
            self.store.write_history(self.history)
        except Exception as e:
            logger.warning("could not save conversation: %s", e)
            return False
        return True

    def persist_stats(self) -> bool:
        try:
            self.store.write_stats(self.stats)
        except Exception as e:
            logger.warning("could not save stats: %s", e)
            return False
        return True
