"""
Single-line prompt input.
"""
from textual.message import Message
from textual.widgets import Input


class InputArea(Input):
    """Prompt line; Enter posts ``Submit`` with the text and clears the line."""

    class Submit(Message, bubble=True):
        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    async def action_submit(self) -> None:
        value, self.value = self.value, ""
        self.post_message(self.Submit(value))
