from typing import Optional

from langchain.tools import tool
from pydantic import BaseModel, Field

from l2chat.core.storage import RecordNotFound, Store
from l2chat.tools.results import ToolResult


class File(BaseModel):
    path: str = Field(description="The path of the file to operate on")
    content: str = Field(default="", description="The content to write to the file (required for write operations)")


class FileResult(ToolResult):
    content: Optional[str] = None


def add_file(store: Store, file: File) -> FileResult:
    if not file.path:
        return FileResult(success=False, message="File path is required")
    if not file.content:
        return FileResult(success=False, message="File content is required for write operations")

    try:
        store.write_named(file.path, file.content.encode("utf-8"))
    except (OSError, ValueError) as e:
        return FileResult(success=False, message=f"Failed to write file: {e}")
    return FileResult(success=True, message="File written successfully")


def read_file(store: Store, file: File) -> FileResult:
    if not file.path:
        return FileResult(success=False, message="File path is required")

    try:
        data = store.read_named(file.path)
    except (RecordNotFound, OSError, ValueError) as e:
        return FileResult(success=False, message=f"Failed to read file: {e}")
    return FileResult(success=True, message="File read successfully",
                      content=data.decode("utf-8", errors="replace"))


def file_tools(store: Store) -> list:
    @tool("add_file", args_schema=File)
    def add_file_tool(path: str, content: str = "") -> dict:
        """Create or overwrite a file with specified content. Use this tool to store conlang documentation, grammar rules, vocabulary lists, and other language resources."""
        return add_file(store, File(path=path, content=content)).reply()

    @tool("read_file", args_schema=File)
    def read_file_tool(path: str, content: str = "") -> dict:
        """Read the content of a file. Use this tool to retrieve stored conlang documentation, grammar rules, vocabulary lists, and other language resources."""
        return read_file(store, File(path=path)).reply()

    return [add_file_tool, read_file_tool]
