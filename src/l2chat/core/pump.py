import asyncio
import logging
from typing import AsyncIterator, Optional, Sequence

from l2chat.core.backend import ChatBackend, StreamStartError
from l2chat.core.domain import Fragment, QueueEvent
from l2chat.models import Turn, UsageStats

logger = logging.getLogger(__name__)


class TokenStreamPump:
    """
    Runs the backend stream in a background task and forwards its fragments
    through a bounded queue.

    The task is the only writer of the queue. It ends every stream with a
    ``done`` or ``error`` event, and it is the only writer of
    ``stats.total_tokens`` while the stream runs (one increment per text
    fragment).
    """

    def __init__(self, backend: ChatBackend, maxsize: int = 100):
        self.backend = backend
        self.maxsize = maxsize
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, messages: Sequence[Turn], stats: UsageStats) -> asyncio.Queue:
        """
        Open the stream and return the queue it feeds.

        Raises ``StreamStartError`` when the backend fails before the first
        fragment; nothing has been queued in that case.
        """
        try:
            source = aiter(self.backend.stream(messages))
            first = await anext(source)
        except StopAsyncIteration:
            first = None
        except Exception as e:
            raise StreamStartError(str(e)) from e

        queue: asyncio.Queue[QueueEvent] = asyncio.Queue(maxsize=self.maxsize)
        self._task = asyncio.create_task(self._run(first, source, queue, stats))
        return queue

    async def _emit(self, queue: asyncio.Queue, fragment: Fragment, stats: UsageStats):
        if fragment['type'] == 'token':
            stats.record_fragment()
        await queue.put(fragment)

    async def _run(
        self,
        first: Optional[Fragment],
        source: AsyncIterator[Fragment],
        queue: asyncio.Queue,
        stats: UsageStats,
    ) -> None:
        try:
            if first is not None:
                await self._emit(queue, first, stats)
                async for fragment in source:
                    await self._emit(queue, fragment, stats)
        except Exception as e:
            logger.warning("stream ended early: %s", e)
            await queue.put({'type': 'error', 'message': str(e)})
        else:
            await queue.put({'type': 'done'})
