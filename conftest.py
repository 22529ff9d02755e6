import asyncio

import pytest

from babel_dialogue.config import Settings
from babel_dialogue.controller import DialogueController, DialogueState
from babel_dialogue.demo import esmeralda, teddy
from babel_dialogue.gateway import GatewayFailure
from babel_dialogue.models import NPC
from babel_dialogue.registry import NPCRegistry
from babel_dialogue.ui import BufferPanel, BufferSink


class FakeClock:
    """Stand-in for asyncio.sleep: records each requested delay and yields once.

    Every recorded delay is one scheduler tick, so tests can count ticks
    without waiting in real time.
    """

    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        await asyncio.sleep(0)

    def count(self, delay: float) -> int:
        return sum(1 for d in self.sleeps if d == delay)


class StubGateway:
    """Gateway returning canned replies in order.

    A reply that is an exception instance is raised instead. A reply of
    None never resolves, imitating a backend that stays silent.
    """

    def __init__(self, replies=()) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, str]] = []
        self.cancelled = 0

    async def request_reply(self, npc: NPC, text: str) -> str:
        self.calls.append((npc.name, text))
        reply = self.replies.pop(0) if self.replies else GatewayFailure("no canned reply")
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        return reply


async def reach(controller: DialogueController, *states: DialogueState) -> DialogueState:
    return await asyncio.wait_for(controller.wait_until(*states), timeout=2)


async def advance_to_input(controller: DialogueController) -> None:
    """Skip through every queued line until the player can type."""
    for _ in range(10_000):
        if controller.state is DialogueState.AWAITING_INPUT:
            return
        controller.skip_sentence()
        await asyncio.sleep(0)
    raise AssertionError(f"stuck in {controller.state}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> BufferSink:
    return BufferSink()


@pytest.fixture
def panel() -> BufferPanel:
    return BufferPanel()


@pytest.fixture
def teddy_npc() -> NPC:
    return teddy()


@pytest.fixture
def esmeralda_npc() -> NPC:
    return esmeralda()


@pytest.fixture
def registry(teddy_npc: NPC, esmeralda_npc: NPC) -> NPCRegistry:
    reg = NPCRegistry()
    reg.register(teddy_npc)
    reg.register(esmeralda_npc)
    return reg


@pytest.fixture
async def make_controller(sink, panel, clock):
    """Factory for controllers wired to the buffer sink/panel and the fake clock.

    Every controller built here is closed at teardown so no reveal task is
    left polling when the event loop shuts down.
    """
    built: list[DialogueController] = []

    def _make(gateway=None, **settings) -> DialogueController:
        controller = DialogueController(
            sink,
            panel,
            gateway or StubGateway(),
            Settings(**settings),
            sleep=clock.sleep,
        )
        built.append(controller)
        return controller

    yield _make
    for controller in built:
        await controller.aclose()
