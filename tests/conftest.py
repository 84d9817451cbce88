# tests/conftest.py
"""
Shared pytest fixtures: a temporary store and a scripted backend.
"""

import asyncio
import logging

import pytest

from l2chat.core.domain import token, tool_call
from l2chat.core.storage import Store
from l2chat.models import Turn

logging.basicConfig(level=logging.WARNING)
logging.getLogger("l2chat").setLevel(logging.DEBUG)


class FakeBackend:
    """
    Backend double. ``script`` is the list of fragments the next stream
    yields; ``fail_at`` makes the stream raise before that fragment index.
    """

    def __init__(self, script=None, summary="SUMMARY", fail_at=None, invoke_error=None,
                 invoke_delay=0.0):
        self.script = list(script or [])
        self.summary = summary
        self.fail_at = fail_at
        self.invoke_error = invoke_error
        self.invoke_delay = invoke_delay
        self.invoked_with = []
        self.streamed_with = []

    async def invoke(self, turns):
        self.invoked_with.append(list(turns))
        if self.invoke_delay:
            await asyncio.sleep(self.invoke_delay)
        if self.invoke_error is not None:
            raise self.invoke_error
        return Turn.assistant(self.summary)

    def stream(self, turns):
        self.streamed_with.append(list(turns))
        return self._stream()

    async def _stream(self):
        for i, fragment in enumerate(self.script):
            if self.fail_at == i:
                raise ConnectionError("backend went away")
            await asyncio.sleep(0)
            yield fragment
        if self.fail_at is not None and self.fail_at >= len(self.script):
            raise ConnectionError("backend went away")


@pytest.fixture
def store(tmp_path):
    return Store(tmp_path / "l2")


@pytest.fixture
def backend():
    return FakeBackend([token("Hi"), token(" there"), token("!")])


@pytest.fixture
def tool_backend():
    return FakeBackend([
        token("Adding it."),
        tool_call("add_lexicon_entry", {"word": "kala", "definition": "water"}),
        token("Done."),
    ])


def dialogue(n):
    """n alternating user/assistant turns numbered from 0."""
    return [
        Turn.user(f"question {i}") if i % 2 == 0 else Turn.assistant(f"answer {i}")
        for i in range(n)
    ]
