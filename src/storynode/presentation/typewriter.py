"""Progressive text reveal for the node on screen."""
from __future__ import annotations

from typing import Callable

from storynode.core.timers import Scheduler, TimerHandle
from storynode.core.types import RevealMode
from storynode.domain.defs import StoryNodeDef

REVEAL_MODES: tuple[RevealMode, ...] = ("typewriter", "instant", "fade")


class TypewriterReveal:
    """Reveals node text one character per tick.

    Purely cosmetic: it never calls back into the engine. A new ``show`` or a
    ``skip`` cancels the tick that is in flight, so at most one timer is live.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        interval_ms: int = 30,
        mode: RevealMode = "typewriter",
        on_update: Callable[[str], None] | None = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("Typewriter interval must be positive.")
        if mode not in REVEAL_MODES:
            raise ValueError(f"Unknown reveal mode: {mode}")
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        self._mode = mode
        self._on_update = on_update
        self._full_text = ""
        self._visible_count = 0
        self._tick: TimerHandle | None = None

    @property
    def mode(self) -> RevealMode:
        return self._mode

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def is_revealing(self) -> bool:
        return self._tick is not None

    @property
    def visible_text(self) -> str:
        return self._full_text[: self._visible_count]

    @property
    def full_text(self) -> str:
        return self._full_text

    def show(self, node: StoryNodeDef | None) -> None:
        """Start revealing ``node``'s text, replacing whatever was on screen."""
        self.cancel()
        self._full_text = node.text if node is not None and node.text else ""
        if not self._full_text or self._mode != "typewriter":
            self._visible_count = len(self._full_text)
            self._emit()
            return
        self._visible_count = 0
        self._emit()
        self._schedule()

    def skip(self) -> bool:
        """Jump to the full text. Returns False when nothing was being revealed."""
        if not self.is_revealing:
            return False
        self.cancel()
        self._visible_count = len(self._full_text)
        self._emit()
        return True

    def cancel(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _schedule(self) -> None:
        self._tick = self._scheduler.call_later(self._interval_ms, self._advance)

    def _advance(self) -> None:
        self._tick = None
        self._visible_count += 1
        self._emit()
        if self._visible_count < len(self._full_text):
            self._schedule()

    def _emit(self) -> None:
        if self._on_update is not None:
            self._on_update(self.visible_text)
