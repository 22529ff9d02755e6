"""Babel dialogue - console launcher. Talk to one of the demo NPCs in a terminal.

Controls:
  <Enter> on an empty line   skip the reveal / advance to the next line
  any text + <Enter>         say something (sent to the backend)
  /quit                      end the conversation
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from babel_dialogue.config import Settings
from babel_dialogue.controller import DialogueController
from babel_dialogue.demo import create_demo_registry
from babel_dialogue.gateway import EchoGateway, make_gateway
from babel_dialogue.registry import NPCRegistry
from babel_dialogue.triggers import TalkTrigger
from babel_dialogue.ui import ConsolePanel, ConsoleSink

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")


async def talk(registry: NPCRegistry, npc_name: str, settings: Settings, echo: bool) -> None:
    matches = [n for n in registry.all() if n.name.lower() == npc_name.lower()]
    if not matches:
        names = ", ".join(n.name for n in registry.all())
        sys.exit(f"Unknown NPC {npc_name!r} (known: {names})")
    npc = matches[0]

    gateway = EchoGateway() if echo else make_gateway(settings)
    controller = DialogueController(
        ConsoleSink(), ConsolePanel(title=f"{npc.name} the {npc.job}"), gateway, settings
    )
    trigger = TalkTrigger(npc, controller)
    await trigger.try_interact(actor_is_player=True, interact_pressed=True)

    try:
        while controller.is_talking:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line or line.strip() == "/quit":
                break
            if line.strip():
                await controller.send_data(line)
            else:
                controller.skip_sentence()
    finally:
        await controller.aclose()
    logging.getLogger(__name__).debug("%s", npc.summary())


def main():
    parser = argparse.ArgumentParser(description="Babel dialogue console")
    parser.add_argument("--npc", default="Teddy",
                        help="Name of the NPC to talk to (default: Teddy)")
    parser.add_argument("--data", type=Path, default=None,
                        help="JSON file with NPC definitions (default: built-in demo cast)")
    parser.add_argument("--echo", action="store_true",
                        help="Use the offline echo gateway even if a backend is configured")
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: BABEL_LOG_LEVEL or INFO)")
    args = parser.parse_args()

    settings = Settings.from_env(ROOT / ".env")
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = NPCRegistry.from_json(args.data) if args.data else create_demo_registry()
    asyncio.run(talk(registry, args.npc, settings, args.echo))


if __name__ == "__main__":
    main()
