"""
Scrollable view of the conversation content buffer.
"""
from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static


class ChatLog(VerticalScroll):
    DEFAULT_CSS = """
ChatLog {
    border: round $secondary;
    padding: 0 1;
}
    """

    def compose(self) -> ComposeResult:
        yield Static(id="chat_content")

    def set_content(self, text: str) -> None:
        """Replace the rendered buffer and keep the newest content in view."""
        self.query_one("#chat_content", Static).update(Markdown(text))
        self.scroll_end(animate=False)
