"""Conversation entities.

The dialogue controller, the gateway and the registry all operate on these
types. Pydantic is used for validation at every data boundary (NPC files,
gateway payloads).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["user", "system", "assistant"]

Coordinates = tuple[float, float]


class Message(BaseModel):
    """A single turn in an NPC's conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ScheduleEntry(BaseModel):
    """One waypoint in an NPC's daily schedule."""

    model_config = ConfigDict(frozen=True)

    waypoint: str = ""
    time: int = 0  # game hour the NPC should be at this waypoint
    location: str
    coordinates: Coordinates = (0.0, 0.0)


class NPC(BaseModel):
    """A non-player character the player can talk to."""

    model_config = ConfigDict(validate_assignment=True)

    id: int
    name: str
    job: str = ""
    description: str = Field(default="", frozen=True)
    personality: tuple[str, ...] = Field(default=(), frozen=True)
    greeting: list[str] = Field(default_factory=list)
    schedule: list[ScheduleEntry] = Field(default_factory=list)

    in_dialogue: bool = False
    current_location: str = ""
    current_coordinates: Coordinates = (0.0, 0.0)

    messages: list[Message] = Field(default_factory=list)

    @field_validator("greeting", mode="before")
    @classmethod
    def _greeting_as_lines(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("schedule")
    @classmethod
    def _schedule_in_time_order(cls, value: list[ScheduleEntry]) -> list[ScheduleEntry]:
        times = [e.time for e in value]
        if times != sorted(times):
            raise ValueError("schedule entries must be in time order")
        return value

    # ------------------------------------------------------------------
    # Conversation history (append-only)
    # ------------------------------------------------------------------

    def remember(self, role: Role, content: str) -> Message:
        msg = Message(role=role, content=content)
        self.messages.append(msg)
        return msg

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def entry_at(self, time: int) -> ScheduleEntry | None:
        """Return the schedule entry in effect at `time`.

        That is the last entry starting at or before `time`. Before the first
        entry of the day the NPC is still at the previous day's last waypoint.
        """
        if not self.schedule:
            return None
        current = self.schedule[-1]
        for entry in self.schedule:
            if entry.time > time:
                break
            current = entry
        return current

    def sync_location(self, time: int) -> ScheduleEntry | None:
        entry = self.entry_at(time)
        if entry is not None:
            self.current_location = entry.location
            self.current_coordinates = entry.coordinates
        return entry

    def summary(self) -> str:
        """Multi-line debug dump of the NPC and its conversation history."""
        lines = [
            f"NPC #{self.id} {self.name} ({self.job})",
            f"  greeting: {' / '.join(self.greeting)}",
            f"  description: {self.description}",
            f"  personality: {', '.join(self.personality)}",
            f"  location: {self.current_location} @ {self.current_coordinates}",
            f"  in dialogue: {self.in_dialogue}",
            f"  messages: {len(self.messages)}",
        ]
        lines.extend(f"    [{m.role}] {m.content}" for m in self.messages)
        return "\n".join(lines)
