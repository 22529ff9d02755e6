"""In-memory NPC registry, keyed by NPC id.

NPCs are registered at scene-load time, before any dialogue session starts,
so the registry does no locking. `all()` hands out a snapshot so callers can
iterate while new NPCs are being registered.

NPC definitions can also be loaded from a JSON file holding an array of NPC
objects (same field names as `babel_dialogue.models.NPC`).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from babel_dialogue.models import NPC

logger = logging.getLogger(__name__)


class NPCRegistry:
    def __init__(self) -> None:
        self._npcs: dict[int, NPC] = {}

    @classmethod
    def from_json(cls, path: Path) -> NPCRegistry:
        registry = cls()
        registry.load_json(path)
        return registry

    def register(self, npc: NPC) -> NPC:
        if npc.id in self._npcs:
            raise DuplicateIdError(
                f"NPC id {npc.id} is already taken by {self._npcs[npc.id].name!r}"
            )
        self._npcs[npc.id] = npc
        logger.debug("registered npc id=%d name=%s", npc.id, npc.name)
        return npc

    def find(self, npc_id: int) -> NPC:
        try:
            return self._npcs[npc_id]
        except KeyError:
            raise NotFoundError(f"No NPC with id {npc_id}") from None

    def all(self) -> tuple[NPC, ...]:
        """Snapshot of every registered NPC, in registration order."""
        return tuple(self._npcs.values())

    def talking(self) -> NPC | None:
        """The NPC currently in a dialogue session, if any."""
        for npc in self._npcs.values():
            if npc.in_dialogue:
                return npc
        return None

    def load_json(self, path: Path) -> list[NPC]:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON array of NPCs, got {type(data).__name__}")
        loaded = [self.register(NPC.model_validate(item)) for item in data]
        logger.info("loaded %d npcs from %s", len(loaded), path)
        return loaded

    def __len__(self) -> int:
        return len(self._npcs)

    def __contains__(self, npc_id: object) -> bool:
        return npc_id in self._npcs


# ---------------------------------------------------------------------------
# Errors - registry misuse is a programming error, not a runtime condition
# ---------------------------------------------------------------------------

class RegistryError(LookupError):
    """Base class for NPC registry misuse."""


class DuplicateIdError(RegistryError):
    """Raised when registering an NPC whose id is already taken."""


class NotFoundError(RegistryError):
    """Raised when looking up an NPC id that was never registered."""
