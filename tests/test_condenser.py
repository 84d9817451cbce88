# tests/test_condenser.py
"""
Tests for context condensation.
"""
import asyncio

import pytest

from l2chat.core.condenser import (
    CONTEXT_PREFIX,
    NO_CONVERSATION,
    REQUEST_PREFIX,
    SUMMARY_PROMPT,
    ContextCondenser,
    format_transcript,
)
from l2chat.models import Turn
from tests.conftest import FakeBackend, dialogue


class TestFormatTranscript:
    def test_empty(self):
        assert format_transcript([]) == NO_CONVERSATION

    def test_role_labels_in_order(self):
        text = format_transcript([Turn.user("hola"), Turn.assistant("hello")])

        assert text.startswith("Previous conversation includes:")
        assert text.index("**User:** hola") < text.index("**Assistant:** hello")

    def test_tool_markers_are_bracketed(self):
        text = format_transcript([Turn.assistant("ok\n[Tool Call: get_lexicon]\n")])
        assert "**[Tool Call: get_lexicon]**" in text

    def test_window_keeps_latest(self):
        text = format_transcript(dialogue(8), window=3)

        assert "question 4" not in text
        assert "answer 5" in text
        assert "question 6" in text
        assert "answer 7" in text


class TestCondense:
    @pytest.mark.asyncio
    async def test_message_layout(self):
        condenser = ContextCondenser(FakeBackend())
        history = [Turn.system("prompt A"), *dialogue(2), Turn.system("prompt B"), Turn.user("now")]

        messages = await condenser.condense(history, "now")

        assert [m.role for m in messages] == ["system", "system", "system", "user"]
        assert messages[0].content == "prompt A"
        assert messages[1].content == "prompt B"
        assert messages[2].content.startswith(CONTEXT_PREFIX)
        assert messages[3].content == REQUEST_PREFIX + "now"

    @pytest.mark.asyncio
    async def test_short_history_is_verbatim(self):
        backend = FakeBackend()
        condenser = ContextCondenser(backend)
        history = dialogue(10)

        messages = await condenser.condense(history, "next")
        context = messages[-2].content

        positions = [context.index(t.content) for t in history]
        assert positions == sorted(positions)
        assert backend.invoked_with == []

    @pytest.mark.asyncio
    async def test_history_is_not_mutated(self):
        condenser = ContextCondenser(FakeBackend())
        history = dialogue(12)
        before = list(history)

        await condenser.condense(history, "x")

        assert history == before

    @pytest.mark.asyncio
    async def test_long_history_is_summarized(self):
        backend = FakeBackend(summary="they built a vowel system")
        condenser = ContextCondenser(backend)
        history = [Turn.system("prompt"), *dialogue(11)]

        messages = await condenser.condense(history, "question 10")

        assert messages[-2].content == CONTEXT_PREFIX + "they built a vowel system"
        sent = backend.invoked_with[0]
        assert sent[0] == Turn.system(SUMMARY_PROMPT)
        # everything but the latest dialogue turn, system turns excluded
        assert sent[1:] == dialogue(11)[:-1]

    @pytest.mark.asyncio
    async def test_summary_failure_falls_back_to_last_five(self):
        backend = FakeBackend(invoke_error=RuntimeError("503"))
        condenser = ContextCondenser(backend)
        history = dialogue(12)

        messages = await condenser.condense(history, "x")
        context = messages[-2].content

        prior = history[:-1]
        for turn in prior[-5:]:
            assert turn.content in context
        for turn in prior[:-5]:
            assert f"** {turn.content}\n" not in context
        assert history[-1].content not in context

    @pytest.mark.asyncio
    async def test_summary_timeout_falls_back(self):
        backend = FakeBackend(invoke_delay=1.0)
        condenser = ContextCondenser(backend, summary_timeout=0.01)

        messages = await condenser.condense(dialogue(12), "x")

        assert "Previous conversation includes:" in messages[-2].content
        assert "answer 10" in messages[-2].content
