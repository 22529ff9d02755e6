"""Dialogue controller - the state machine behind one conversation at a time.

States:

    IDLE               no session; panel hidden
    DISPLAYING         the typewriter is revealing a queued line
    HELD_FOR_ADVANCE   the line is fully shown, waiting for skip/advance
    AWAITING_INPUT     queue drained; the player may type, skip or stop
    AWAITING_RESPONSE  a gateway request is in flight

Session flow:
  1. start_dialogue(npc) marks the NPC, shows the panel and queues the
     session source (the NPC's greeting unless another is given).
  2. Queued lines are revealed in FIFO order; each waits for an advance.
  3. send_data(text) starts the gateway request and a waiter polling the
     response slot. On success the user line and the reply are appended to
     the NPC's history and the reply is queued for display. On failure
     nothing is appended and the session returns to AWAITING_INPUT.
  4. stop_dialogue() tears the session down from any state.

All timed work for a session runs in a single task. Anything that starts new
work (a reveal, a request, a stop) cancels and awaits that task first, so the
sink, the queue and the response slot only ever have one writer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Union

from babel_dialogue.config import Settings
from babel_dialogue.gateway import GatewayFailure, ResponseGateway, ResponseSlot
from babel_dialogue.models import NPC
from babel_dialogue.typewriter import Sleep, Typewriter, TypewriterPhase
from babel_dialogue.ui import DialoguePanel, TextSink

logger = logging.getLogger(__name__)


class DialogueState(str, Enum):
    IDLE = "idle"
    DISPLAYING = "displaying"
    HELD_FOR_ADVANCE = "held_for_advance"
    AWAITING_INPUT = "awaiting_input"
    AWAITING_RESPONSE = "awaiting_response"


# ---------------------------------------------------------------------------
# Session sources - both end up as lines in the sentence queue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StaticLines:
    lines: tuple[str, ...]

    def sentences(self) -> list[str]:
        return list(self.lines)


@dataclass(frozen=True)
class GatewayReply:
    text: str

    def sentences(self) -> list[str]:
        return [self.text]


SessionSource = Union[StaticLines, GatewayReply]


def greeting_source(npc: NPC) -> SessionSource:
    return StaticLines(tuple(npc.greeting))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class DialogueController:
    def __init__(
        self,
        sink: TextSink,
        panel: DialoguePanel,
        gateway: ResponseGateway,
        settings: Settings | None = None,
        typewriter: Typewriter | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self._sink = sink
        self._panel = panel
        self._gateway = gateway
        self._sleep = sleep
        self.typewriter = typewriter or Typewriter(
            sink,
            char_delay=self.settings.char_delay,
            hold_delay=self.settings.hold_delay,
            sleep=sleep,
        )
        self.slot = ResponseSlot()

        self._sentences: deque[str] = deque()
        self._npc: NPC | None = None
        self._state = DialogueState.IDLE
        self._task: asyncio.Task | None = None
        self._changed = asyncio.Event()
        self.typewriter.on_phase = lambda _phase: self._changed.set()

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def is_talking(self) -> bool:
        return self._npc is not None

    @property
    def npc(self) -> NPC | None:
        return self._npc

    @property
    def sentences(self) -> list[str]:
        return list(self._sentences)

    @property
    def state(self) -> DialogueState:
        if self._state is DialogueState.DISPLAYING and self.typewriter.phase is TypewriterPhase.HELD:
            return DialogueState.HELD_FOR_ADVANCE
        return self._state

    async def wait_until(self, *states: DialogueState) -> DialogueState:
        """Suspend until the controller reaches one of `states`."""
        while self.state not in states:
            self._changed.clear()
            await self._changed.wait()
        return self.state

    # ------------------------------------------------------------------
    # Player-facing operations
    # ------------------------------------------------------------------

    async def start_dialogue(self, npc: NPC, source: SessionSource | None = None) -> None:
        if self._npc is not None:
            if self.settings.reentrant_policy == "reject":
                raise ReentrantStartError(
                    f"Cannot talk to {npc.name}: already talking to {self._npc.name}"
                )
            logger.info("closing dialogue with %s to start %s", self._npc.name, npc.name)
            await self.stop_dialogue()

        self._npc = npc
        npc.in_dialogue = True
        self._panel.show()
        self._panel.clear_choices()
        self._sentences.clear()
        self._sentences.extend((source or greeting_source(npc)).sentences())
        logger.info("dialogue started with %s (%d queued)", npc.name, len(self._sentences))
        logger.debug("%s", npc.summary())
        await self.display_next_sentence()

    async def display_next_sentence(self) -> None:
        if self._npc is None:
            return
        await self._cancel_task()
        if not self._sentences:
            self._set_state(DialogueState.AWAITING_INPUT)
            return
        self.typewriter.clear_skip()
        sentence = self._sentences.popleft()
        self._set_state(DialogueState.DISPLAYING)
        self._task = asyncio.create_task(self._display_from(sentence))

    def skip_sentence(self) -> None:
        if self._npc is None:
            return
        self.typewriter.skip()

    async def send_data(self, text: str) -> None:
        if self._npc is None:
            logger.warning("send_data ignored: no active dialogue")
            return
        text = text.strip()
        if not text:
            return
        await self._cancel_task()
        self.slot.clear()
        self.typewriter.clear_skip()
        self._set_state(DialogueState.AWAITING_RESPONSE)
        self._task = asyncio.create_task(self._exchange(self._npc, text))

    async def stop_dialogue(self) -> None:
        await self._cancel_task()
        self._sentences.clear()
        self._sink.clear()
        self.typewriter.clear_skip()
        self._panel.hide()
        npc, self._npc = self._npc, None
        if npc is not None:
            npc.in_dialogue = False
            logger.info("dialogue with %s stopped", npc.name)
        self._set_state(DialogueState.IDLE)

    async def aclose(self) -> None:
        await self.stop_dialogue()

    # ------------------------------------------------------------------
    # Session tasks
    # ------------------------------------------------------------------

    async def _display_from(self, sentence: str) -> None:
        while True:
            await self.typewriter.play(sentence)
            if not self._sentences:
                break
            sentence = self._sentences.popleft()
        self._set_state(DialogueState.AWAITING_INPUT)

    async def _exchange(self, npc: NPC, text: str) -> None:
        request = asyncio.create_task(self._request(npc, text))
        try:
            reply = await self.slot.wait(
                self.settings.poll_interval, self.settings.response_timeout, self._sleep
            )
        except GatewayFailure as e:
            logger.warning("%s failed to respond: %s", npc.name, e)
            self._set_state(DialogueState.AWAITING_INPUT)
            return
        finally:
            if not request.done():
                request.cancel()

        npc.remember("user", text)
        npc.remember(self.settings.reply_role, reply)
        self._sentences.extend(GatewayReply(reply).sentences())
        sentence = self._sentences.popleft()
        self._set_state(DialogueState.DISPLAYING)
        self.typewriter.clear_skip()
        await self._display_from(sentence)

    async def _request(self, npc: NPC, text: str) -> None:
        try:
            reply = await self._gateway.request_reply(npc, text)
        except GatewayFailure as e:
            self.slot.fail(e)
            return
        except Exception as e:
            logger.exception("gateway raised for %s", npc.name)
            self.slot.fail(GatewayFailure(str(e) or type(e).__name__))
            return
        if not reply or not reply.strip():
            self.slot.fail(GatewayFailure(f"{npc.name} returned no reply"))
            return
        self.slot.set(reply)

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.typewriter.cancel()

    def _set_state(self, state: DialogueState) -> None:
        if state is not self._state:
            logger.debug("dialogue state %s -> %s", self._state.value, state.value)
        self._state = state
        self._changed.set()


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ReentrantStartError(RuntimeError):
    """Raised by start_dialogue() under the "reject" policy while a session is active."""
