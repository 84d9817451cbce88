import json
import logging
from typing import Optional

from langchain.tools import tool
from pydantic import BaseModel, Field

from l2chat.core.storage import RecordNotFound, Store
from l2chat.tools.results import ToolResult

logger = logging.getLogger(__name__)

LEXICON_FILE = "lexicon.json"


class LexiconEntry(BaseModel):
    word: str = Field(description="The word to add to lexicon")
    definition: str = Field(description="The definition of the word")
    part_of_speech: str = Field(default="", description="Part of speech")
    etymology: str = Field(default="", description="Etymology of the word")


class GetLexiconRequest(BaseModel):
    pass


class LexiconResult(ToolResult):
    entries: Optional[list[LexiconEntry]] = None


def _load_entries(store: Store) -> list[LexiconEntry]:
    data = json.loads(store.read_named(LEXICON_FILE))
    return [LexiconEntry.model_validate(item) for item in data]


def add_lexicon_entry(store: Store, entry: LexiconEntry) -> LexiconResult:
    if not entry.word:
        return LexiconResult(success=False, message="Word is required")
    if not entry.definition:
        return LexiconResult(success=False, message="Definition is required")

    try:
        entries = _load_entries(store)
    except RecordNotFound:
        entries = []
    except ValueError as e:
        logger.warning("existing lexicon is unreadable, starting over: %s", e)
        entries = []

    if any(existing.word == entry.word for existing in entries):
        return LexiconResult(success=False, message="Word already exists in lexicon")

    entries.append(entry)
    payload = json.dumps([e.model_dump() for e in entries], indent=2, ensure_ascii=False)
    try:
        store.write_named(LEXICON_FILE, payload.encode("utf-8"))
    except OSError as e:
        return LexiconResult(success=False, message=f"Failed to save lexicon: {e}")

    return LexiconResult(success=True, message="Lexicon entry added successfully", entries=[entry])


def get_lexicon(store: Store) -> LexiconResult:
    try:
        entries = _load_entries(store)
    except (RecordNotFound, OSError) as e:
        return LexiconResult(success=False, message=f"Failed to read lexicon: {e}")
    except ValueError as e:
        return LexiconResult(success=False, message=f"Failed to parse lexicon: {e}")

    return LexiconResult(
        success=True,
        message=f"Retrieved {len(entries)} lexicon entries",
        entries=entries,
    )


def lexicon_tools(store: Store) -> list:
    @tool("add_lexicon_entry", args_schema=LexiconEntry)
    def add_entry_tool(word: str, definition: str, part_of_speech: str = "", etymology: str = "") -> dict:
        """Add a word to the conlang lexicon with definition, part of speech, and etymology information."""
        entry = LexiconEntry(word=word, definition=definition,
                             part_of_speech=part_of_speech, etymology=etymology)
        return add_lexicon_entry(store, entry).reply()

    @tool("get_lexicon", args_schema=GetLexiconRequest)
    def get_lexicon_tool() -> dict:
        """Retrieve all entries from the conlang lexicon for review and analysis."""
        return get_lexicon(store).reply()

    return [add_entry_tool, get_lexicon_tool]
