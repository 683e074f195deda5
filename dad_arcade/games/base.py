"""Shared lifecycle for the arcade games.

Every game is a state machine advanced by two kinds of calls:

    handle(event)  a user input (click, flip, answer, pointer move)
    tick(dt)       simulated seconds elapsed since the previous tick

All timers (countdowns, reveal delays, spawn intervals) are plain floats
decremented inside tick(), so nothing fires after finish() or teardown().
Async collaborator work (fetching trivia questions) happens in prepare(),
which the host awaits after every input and tick.

Outcomes:
  "completed"  the game reached its own terminal condition
  "ended"      the player pressed End; the score still counts
  "abandoned"  the session is dropped and nothing is reported
"""

from __future__ import annotations

import random
from typing import Any, Literal

Outcome = Literal["completed", "ended", "abandoned"]


class Game:
    game_type: str = ""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.score = 0
        self.finished = False
        self.outcome: Outcome | None = None
        self.torn_down = False
        self.elapsed = 0.0
        self._reset_state()

    # ── Lifecycle ────────────────────────────────────────

    def start(self) -> None:
        """Begin a fresh run."""
        self.reset()

    def reset(self) -> None:
        self.score = 0
        self.finished = False
        self.outcome = None
        self.elapsed = 0.0
        self._reset_state()

    def finish(self, outcome: Outcome) -> None:
        """Mark the game over. Only the first call has any effect."""
        if self.finished:
            return
        self.finished = True
        self.outcome = outcome

    def end(self) -> None:
        """Voluntary end from the player."""
        self.finish("ended")

    def teardown(self) -> None:
        self.torn_down = True

    @property
    def active(self) -> bool:
        return not (self.finished or self.torn_down)

    # ── Driving ──────────────────────────────────────────

    def handle(self, event: dict[str, Any]) -> None:
        if not self.active:
            return
        self._handle(event)

    def tick(self, dt: float) -> None:
        if not self.active or dt <= 0:
            return
        self.elapsed += dt
        self._tick(dt)

    async def prepare(self) -> None:
        """Run pending async effects. Most games have none."""

    def snapshot(self) -> dict[str, Any]:
        return {
            "game_type": self.game_type,
            "score": self.score,
            "finished": self.finished,
            "outcome": self.outcome,
            **self._snapshot(),
        }

    # ── Subclass hooks ───────────────────────────────────

    def _reset_state(self) -> None:
        raise NotImplementedError

    def _handle(self, event: dict[str, Any]) -> None:
        raise NotImplementedError

    def _tick(self, dt: float) -> None:
        raise NotImplementedError

    def _snapshot(self) -> dict[str, Any]:
        return {}


def event_index(event: dict[str, Any]) -> int | None:
    """Read an integer cell index from an input event, or None if absent."""
    value = event.get("index")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
