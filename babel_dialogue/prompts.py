"""Conversation context sent to the backend for one player line.

build_messages() produces a chat transcript:

    system     - who the NPC is (name, job, description, personality, location)
    ...        - the NPC's stored history, in order
    user       - the new player line

render_prompt() flattens that transcript for text-completion backends that
take a single prompt string.
"""

from __future__ import annotations

from babel_dialogue.models import NPC, Message

HISTORY_LIMIT = 40


def persona_prompt(npc: NPC) -> str:
    lines = [f"You are {npc.name}"]
    if npc.job:
        lines[0] += f", the {npc.job.lower()} of the town of Babel"
    lines[0] += "."
    if npc.description:
        lines.append(npc.description)
    if npc.personality:
        lines.append(f"Personality: {', '.join(npc.personality)}.")
    if npc.current_location:
        lines.append(f"You are currently at the {npc.current_location}.")
    lines.append(
        "Stay in character. Reply with one or two short spoken lines, "
        "no narration and no stage directions."
    )
    return "\n".join(lines)


def build_messages(npc: NPC, text: str) -> list[Message]:
    history = npc.messages[-HISTORY_LIMIT:]
    return [
        Message(role="system", content=persona_prompt(npc)),
        *history,
        Message(role="user", content=text),
    ]


def render_prompt(messages: list[Message], npc_name: str = "NPC") -> str:
    speaker = {"user": "Player", "assistant": npc_name}
    parts: list[str] = []
    for m in messages:
        if m.role == "system":
            parts.append(m.content)
        else:
            parts.append(f"{speaker[m.role]}: {m.content}")
    parts.append(f"{npc_name}:")
    return "\n\n".join(parts)
