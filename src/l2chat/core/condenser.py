"""
Bounded context for each request.

History is never sent verbatim. Every turn the backend receives the system
turns, one synthetic ``CONTEXT:`` message standing in for the conversation,
and the raw request. Short conversations are transcribed as they are, long
ones are summarized by the backend.
"""
import asyncio
import logging
import re
from typing import Sequence

from l2chat.core.backend import ChatBackend
from l2chat.models import Turn

logger = logging.getLogger(__name__)

CONTEXT_PREFIX = "CONTEXT: "
REQUEST_PREFIX = "REQUEST: "
NO_CONVERSATION = "No previous conversation"

SUMMARY_PROMPT = """Please provide a detailed summary of the conlang conversation so far, focusing on:

**CRITICAL INFORMATION TO INCLUDE:**
- **Vocabulary and word definitions** that were discussed or created
- **Phonology rules and sound systems** that were established
- **Grammar rules and structures** that were defined
- **Writing systems or orthography** that were developed
- **Example sentences or translations** that were provided
- **Specific conlang features** (cases, tenses, aspects, etc.)
- **Cultural or naming conventions** that were established
- **Any specific words, roots, or morphemes** that were created
- **Tool call results and data operations** that were performed:
  - Lexicon entries that were added via add_lexicon_entry
  - Lexicon data that was retrieved via get_lexicon
  - Files that were created or read via the file tools
  - Phonology analysis results from analyze_phonology
  - Grammar validation results from validate_grammar

**Format the summary to include:**
- Key vocabulary with definitions (including any from tool results)
- Phonological rules and sound inventory
- Grammatical structures and patterns
- Writing system details
- Example sentences or phrases
- Any constraints or preferences mentioned
- **Current lexicon state** (what words have been added)
- **Tool operations performed** and their results

**IMPORTANT: Include any lexicon entries that were added through tool calls, as these are part of the established vocabulary.**

Be comprehensive and include specific details rather than generic descriptions."""

_TOOL_MARKER = re.compile(r"\[Tool Call: ([^\]\n]*)\]")


def format_transcript(turns: Sequence[Turn], window: int = 10) -> str:
    """Role-labelled transcript of the last ``window`` turns."""
    if not turns:
        return NO_CONVERSATION
    turns = list(turns)[-window:]

    parts = ["Previous conversation includes:\n\n"]
    for turn in turns:
        role = "Assistant" if turn.role == "assistant" else "User"
        content = _TOOL_MARKER.sub(r"**[Tool Call: \1]**", turn.content)
        parts.append(f"**{role}:** {content}\n\n")
    return "".join(parts)


class ContextCondenser:
    def __init__(
        self,
        backend: ChatBackend,
        verbatim_window: int = 10,
        fallback_window: int = 5,
        summary_timeout: float = 10.0,
    ):
        self.backend = backend
        self.verbatim_window = verbatim_window
        self.fallback_window = fallback_window
        self.summary_timeout = summary_timeout

    async def condense(self, history: Sequence[Turn], request: str) -> list[Turn]:
        """
        Build the outbound message list for ``request``.

        ``history`` is read only. Backend failures while summarizing never
        escape; they fall back to a transcript of the most recent turns.
        """
        system_turns = [t for t in history if t.role == 'system']
        dialogue = [t for t in history if t.role in ('user', 'assistant')]

        context = await self.context_text(dialogue)
        return [
            *system_turns,
            Turn.system(CONTEXT_PREFIX + context),
            Turn.user(REQUEST_PREFIX + request),
        ]

    async def context_text(self, dialogue: Sequence[Turn]) -> str:
        if len(dialogue) <= self.verbatim_window:
            return format_transcript(dialogue, self.verbatim_window)
        return await self.summarize(dialogue[:-1])

    async def summarize(self, turns: Sequence[Turn]) -> str:
        messages = [Turn.system(SUMMARY_PROMPT), *turns]
        try:
            reply = await asyncio.wait_for(self.backend.invoke(messages), self.summary_timeout)
        except asyncio.TimeoutError:
            logger.warning("context summary timed out after %.1fs; using recent transcript",
                           self.summary_timeout)
        except Exception as e:
            logger.warning("context summary failed (%s); using recent transcript", e)
        else:
            return reply.content
        return format_transcript(turns[-self.fallback_window:], self.fallback_window)
