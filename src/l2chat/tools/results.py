from typing import Any

from pydantic import BaseModel


class ToolResult(BaseModel):
    """Common shape of every tool reply: success flag, message, optional payload."""
    success: bool
    message: str

    def reply(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
