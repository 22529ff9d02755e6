"""UI seams the dialogue core writes to.

The core only needs two collaborators from the host:

    TextSink       - one mutable text surface; the typewriter writes partial
                     and complete lines into it.
    DialoguePanel  - the dialogue window: shown on session start, hidden on
                     stop, and able to drop leftover choice widgets.

Two implementations of each are provided:

    BufferSink / BufferPanel    - in-memory, for headless hosts and tests.
    ConsoleSink / ConsolePanel  - redraw the current line on a terminal.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class TextSink(Protocol):
    text: str

    def clear(self) -> None: ...


class DialoguePanel(Protocol):
    visible: bool

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def clear_choices(self) -> None: ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------

class BufferSink:
    """Keeps the current text and every write, in order."""

    def __init__(self) -> None:
        self._text = ""
        self.history: list[str] = []

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        self.history.append(value)

    def clear(self) -> None:
        self.text = ""


class BufferPanel:
    def __init__(self) -> None:
        self.visible = False
        self.choices: list[str] = []

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def clear_choices(self) -> None:
        self.choices.clear()


# ---------------------------------------------------------------------------
# Terminal implementations
# ---------------------------------------------------------------------------

class ConsoleSink:
    """Redraws the current line in place with a carriage return."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        width = max(len(self._text), len(value))
        self._text = value
        self._stream.write("\r" + value.ljust(width))
        self._stream.flush()

    def clear(self) -> None:
        self.text = ""
        self._stream.write("\r")
        self._stream.flush()


class ConsolePanel:
    def __init__(self, title: str = "", stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self.title = title
        self.visible = False

    def show(self) -> None:
        self.visible = True
        self._stream.write(f"\n── {self.title} ──\n" if self.title else "\n")
        self._stream.flush()

    def hide(self) -> None:
        if self.visible:
            self._stream.write("\n")
            self._stream.flush()
        self.visible = False

    def clear_choices(self) -> None:
        # Terminal dialogue has no choice widgets.
        pass
