# tests/test_pump.py
"""
Tests for the background token stream pump.
"""
import asyncio

import pytest

from l2chat.core.backend import StreamStartError
from l2chat.core.domain import token, tool_call
from l2chat.core.pump import TokenStreamPump
from l2chat.models import Turn, UsageStats
from tests.conftest import FakeBackend


async def drain(queue):
    events = []
    while True:
        ev = await asyncio.wait_for(queue.get(), timeout=1)
        events.append(ev)
        if ev['type'] in ('done', 'error'):
            return events


class TestTokenStreamPump:
    @pytest.mark.asyncio
    async def test_forwards_fragments_in_order(self, backend):
        pump = TokenStreamPump(backend)
        queue = await pump.start([Turn.user("REQUEST: Hello")], UsageStats())

        events = await drain(queue)

        assert events == [token("Hi"), token(" there"), token("!"), {'type': 'done'}]
        assert backend.streamed_with == [[Turn.user("REQUEST: Hello")]]

    @pytest.mark.asyncio
    async def test_counts_one_per_text_fragment(self):
        long_fragment = "x" * 500
        backend = FakeBackend([token(long_fragment), token("a"), token("bc"), token("d")])
        stats = UsageStats(total_tokens=10)
        pump = TokenStreamPump(backend)

        await drain(await pump.start([], stats))

        assert stats.total_tokens == 14

    @pytest.mark.asyncio
    async def test_tool_calls_are_forwarded_not_counted(self, tool_backend):
        stats = UsageStats()
        pump = TokenStreamPump(tool_backend)

        events = await drain(await pump.start([], stats))

        assert events[1] == tool_call("add_lexicon_entry", {"word": "kala", "definition": "water"})
        assert stats.total_tokens == 2

    @pytest.mark.asyncio
    async def test_failure_before_first_fragment_raises(self):
        pump = TokenStreamPump(FakeBackend([token("never")], fail_at=0))
        stats = UsageStats()

        with pytest.raises(StreamStartError):
            await pump.start([], stats)
        assert stats.total_tokens == 0
        assert not pump.running

    @pytest.mark.asyncio
    async def test_mid_stream_failure_keeps_partial_output(self):
        backend = FakeBackend([token("one"), token("two"), token("three")], fail_at=2)
        stats = UsageStats()
        pump = TokenStreamPump(backend)

        events = await drain(await pump.start([], stats))

        assert events[:2] == [token("one"), token("two")]
        assert events[2]['type'] == 'error'
        assert "went away" in events[2]['message']
        assert stats.total_tokens == 2

    @pytest.mark.asyncio
    async def test_empty_stream_ends_cleanly(self):
        pump = TokenStreamPump(FakeBackend([]))
        events = await drain(await pump.start([], UsageStats()))
        assert events == [{'type': 'done'}]

    @pytest.mark.asyncio
    async def test_queue_is_bounded(self):
        backend = FakeBackend([token(str(i)) for i in range(10)])
        pump = TokenStreamPump(backend, maxsize=3)

        queue = await pump.start([], UsageStats())
        for _ in range(5):
            await asyncio.sleep(0)

        assert queue.maxsize == 3
        assert queue.qsize() <= 3
        assert pump.running

        events = await drain(queue)
        assert len(events) == 11
