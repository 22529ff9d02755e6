"""Babel dialogue core - NPC conversations with a typewriter reveal and an optional LLM backend."""

from .config import Settings  # noqa: F401
from .controller import (  # noqa: F401
    DialogueController,
    DialogueState,
    GatewayReply,
    ReentrantStartError,
    StaticLines,
)
from .gateway import (  # noqa: F401
    EchoGateway,
    GatewayFailure,
    GatewayTimeout,
    HttpGateway,
    ResponseGateway,
    ResponseSlot,
    make_gateway,
)
from .models import NPC, Message, ScheduleEntry  # noqa: F401
from .registry import DuplicateIdError, NotFoundError, NPCRegistry  # noqa: F401
from .typewriter import Typewriter, TypewriterPhase  # noqa: F401
