"""Scene-side trigger that opens a dialogue with one NPC.

The host calls try_interact() every frame the player overlaps the NPC's
interaction area. A dialogue only starts when the overlapping actor is the
player, the interact button is held, the game is not paused and no other
dialogue is running.
"""

from __future__ import annotations

import logging

from babel_dialogue.controller import DialogueController
from babel_dialogue.models import NPC

logger = logging.getLogger(__name__)


class TalkTrigger:
    def __init__(self, npc: NPC, controller: DialogueController) -> None:
        self.npc = npc
        self.controller = controller

    def can_interact(self, *, actor_is_player: bool, interact_pressed: bool, paused: bool) -> bool:
        return (
            actor_is_player
            and interact_pressed
            and not paused
            and not self.controller.is_talking
        )

    async def try_interact(
        self, *, actor_is_player: bool, interact_pressed: bool, paused: bool = False
    ) -> bool:
        """Start talking to the NPC if the guard allows it. Returns True if started."""
        if not self.can_interact(
            actor_is_player=actor_is_player,
            interact_pressed=interact_pressed,
            paused=paused,
        ):
            return False
        logger.debug("%s trigger fired", self.npc.name)
        await self.controller.start_dialogue(self.npc)
        return True
