"""Typewriter effect - reveals a line into a text sink one character at a time.

A run goes through two phases:

    REVEALING  write text[:1], text[:2], ... to the sink, waiting `char_delay`
               after each write. A skip raised during the reveal is picked up
               after the current wait and jumps the sink to the full line.
    HELD       the full line stays on screen; the run polls every
               `hold_delay` until a skip/advance arrives, then returns.

Only one run exists per typewriter. `play()` cancels and awaits the previous
run before starting the next, so two reveals never write the same sink.

The `sleep` coroutine is injectable; hosts driven by a frame clock and the
tests pass their own.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Awaitable, Callable, Iterator

from babel_dialogue.ui import TextSink

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_CHAR_DELAY = 0.08
DEFAULT_HOLD_DELAY = 0.1


class TypewriterPhase(str, Enum):
    IDLE = "idle"
    REVEALING = "revealing"
    HELD = "held"


def prefixes(text: str) -> Iterator[str]:
    """Yield text[:1], text[:2], ..., text."""
    for i in range(1, len(text) + 1):
        yield text[:i]


class Typewriter:
    def __init__(
        self,
        sink: TextSink,
        char_delay: float = DEFAULT_CHAR_DELAY,
        hold_delay: float = DEFAULT_HOLD_DELAY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._sink = sink
        self.char_delay = char_delay
        self.hold_delay = hold_delay
        self._sleep = sleep
        self._skip = False
        self._task: asyncio.Task | None = None
        self._phase = TypewriterPhase.IDLE
        self.on_phase: Callable[[TypewriterPhase], None] | None = None
        self.text = ""

    @property
    def phase(self) -> TypewriterPhase:
        return self._phase

    @phase.setter
    def phase(self, value: TypewriterPhase) -> None:
        self._phase = value
        if self.on_phase is not None:
            self.on_phase(value)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def skip(self) -> None:
        self._skip = True

    def clear_skip(self) -> None:
        self._skip = False

    async def play(self, text: str) -> None:
        """Reveal `text`, hold it, and return once the hold is released."""
        await self.cancel()
        self._task = asyncio.create_task(self._run(text))
        await self._task

    async def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.phase = TypewriterPhase.IDLE

    async def _run(self, text: str) -> None:
        self.text = text
        try:
            await self._reveal(text)
            await self._hold()
        finally:
            self.phase = TypewriterPhase.IDLE

    async def _reveal(self, text: str) -> None:
        self.phase = TypewriterPhase.REVEALING
        self._sink.text = ""
        for prefix in prefixes(text):
            self._sink.text = prefix
            await self._sleep(self.char_delay)
            if self._skip:
                self._skip = False
                self._sink.text = text
                logger.debug("reveal skipped at %d/%d chars", len(prefix), len(text))
                break

    async def _hold(self) -> None:
        self.phase = TypewriterPhase.HELD
        while not self._skip:
            await self._sleep(self.hold_delay)
        self._skip = False
