"""
L2 conlang chat client
"""

import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from l2chat.config import ConfigurationError, Settings
from l2chat.core.backend import LangGraphBackend
from l2chat.core.condenser import ContextCondenser
from l2chat.core.pump import TokenStreamPump
from l2chat.core.session import Session
from l2chat.core.storage import Store
from l2chat.core.throttle import RenderThrottle
from l2chat.logs import init_logger
from l2chat.models import UsageStats
from l2chat.tools import build_tools
from l2chat.widgets import ChatLog, InputArea

logger = logging.getLogger(__name__)


class ChatApp(App):
    CSS = """
#banner {
    text-align: center;
    text-style: bold;
    color: $accent;
}
#chat_log {
    height: 1fr;
}
#status {
    height: 1;
    color: $text-muted;
    padding: 0 1;
}
    """
    BINDINGS = [
        Binding("ctrl+c", "quit_session", "Quit", priority=True),
        Binding("ctrl+q", "quit_session", "Quit", priority=True),
    ]

    def __init__(self, session: Session, tick_interval: float = 0.05):
        """Wire the app to a ready session; the app only drives it."""
        super().__init__()
        self.session = session
        self.tick_interval = tick_interval

    def compose(self) -> ComposeResult:
        yield Static("L2", id="banner")
        yield ChatLog(id="chat_log")
        yield Static(id="status")
        yield InputArea(id="input_text", placeholder="Ask about your conlang")

    def on_mount(self) -> None:
        self.session.on_render = self._render
        self.session.flush()
        self._update_status()
        self.set_interval(self.tick_interval, self._tick)
        self.set_focus(self.query_one("#input_text", InputArea))

    async def on_input_area_submit(self, message: InputArea.Submit) -> None:
        """
        Start a new turn. Empty input, or input sent while a response is
        still streaming, is dropped.
        """
        if self.session.begin(message.value):
            self._update_status()
            self.run_stream(message.value)

    @work(group='stream')
    async def run_stream(self, user_input: str) -> None:
        """Condense context and open the backend stream off the key handler."""
        await self.session.start_stream(user_input)
        self._update_status()

    def _tick(self) -> None:
        finished = self.session.tick()
        if finished or self.session.streaming:
            self._update_status()

    def _render(self, content: str) -> None:
        self.query_one("#chat_log", ChatLog).set_content(content)

    def _update_status(self) -> None:
        state = "streaming..." if self.session.streaming else "ready"
        self.query_one("#status", Static).update(
            f"{state}  |  tokens: {self.session.stats.total_tokens}  |  ctrl+c to quit"
        )

    def action_quit_session(self) -> None:
        self.session.shutdown()
        self.exit()


def build_session(settings: Settings) -> Session:
    store = Store(settings.home)
    try:
        system_prompt = store.read_system()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"cannot read the system prompt: {e}") from e

    backend = LangGraphBackend(settings, build_tools(store))
    session = Session(
        store,
        ContextCondenser(
            backend,
            verbatim_window=settings.verbatim_window,
            fallback_window=settings.fallback_window,
            summary_timeout=settings.summary_timeout,
        ),
        TokenStreamPump(backend, maxsize=settings.queue_size),
        RenderThrottle(max_history_display=settings.max_history_display),
    )
    session.ensure_system_prompt(system_prompt)
    return session


def exit_stats(stats: UsageStats) -> Panel:
    body = Text.assemble(
        ("Session stats:", "bold"),
        f"\nTotal tokens used: {stats.total_tokens}\n",
    )
    return Panel(body, padding=1)


def main():
    try:
        settings = Settings.from_env()
        try:
            init_logger(settings.home, settings.log_level)
        except OSError as e:
            raise ConfigurationError(f"cannot write logs under {settings.home}: {e}") from e
        session = build_session(settings)
    except ConfigurationError as e:
        print(f"l2: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("starting with %d turns of history", len(session.history))
    app = ChatApp(session, tick_interval=settings.tick_interval)
    app.run()
    Console().print(exit_stats(session.stats))


if __name__ == "__main__":
    main()
