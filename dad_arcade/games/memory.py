"""Memory match: flip cards two at a time to find every pair."""

from __future__ import annotations

import random
from typing import Any

from dad_arcade.games.base import Game, event_index

EMOJIS = ("🎮", "🎯", "🏆", "⭐", "🎨", "🎪")

REVEAL_DELAY = 1.0
START_SCORE = 1000
MOVE_PENALTY = 10


def memory_score(moves: int, pairs: int) -> int:
    """Every move beyond the perfect pair count costs MOVE_PENALTY points."""
    return max(0, START_SCORE - MOVE_PENALTY * max(0, moves - pairs))


class MemoryGame(Game):
    """Input: {"type": "flip", "index": i}.

    A second flip counts one move and starts the reveal timer. While the
    timer runs every flip is ignored. When it expires the two face-up cards
    either lock as matched or turn back down.
    """

    game_type = "memory"

    def __init__(
        self,
        rng: random.Random | None = None,
        emojis: tuple[str, ...] = EMOJIS,
        reveal_delay: float = REVEAL_DELAY,
    ) -> None:
        self.emojis = emojis
        self.reveal_delay = reveal_delay
        super().__init__(rng)

    def _reset_state(self) -> None:
        self.deck = [*self.emojis, *self.emojis]
        self.rng.shuffle(self.deck)  # Fisher-Yates
        self.face_up: list[int] = []
        self.matched: set[int] = set()
        self.moves = 0
        self.reveal_timer: float | None = None
        self.score = START_SCORE

    @property
    def pairs(self) -> int:
        return len(self.emojis)

    @property
    def won(self) -> bool:
        return len(self.matched) == len(self.deck)

    def end(self) -> None:
        # Leaving before every pair is found drops the run.
        self.finish("abandoned")

    def flip(self, index: int) -> None:
        if not self.active or self.reveal_timer is not None:
            return
        if not 0 <= index < len(self.deck):
            return
        if index in self.matched or index in self.face_up:
            return
        self.face_up.append(index)
        if len(self.face_up) == 2:
            self.moves += 1
            self.score = memory_score(self.moves, self.pairs)
            self.reveal_timer = self.reveal_delay

    def _handle(self, event: dict[str, Any]) -> None:
        index = event_index(event)
        if event.get("type") == "flip" and index is not None:
            self.flip(index)

    def _tick(self, dt: float) -> None:
        if self.reveal_timer is None:
            return
        self.reveal_timer -= dt
        if self.reveal_timer > 0:
            return
        self.reveal_timer = None
        first, second = self.face_up
        if self.deck[first] == self.deck[second]:
            self.matched.update((first, second))
        self.face_up = []
        if self.won:
            self.finish("completed")

    def _snapshot(self) -> dict[str, Any]:
        cards = [
            {
                "emoji": emoji if i in self.matched or i in self.face_up else None,
                "flipped": i in self.face_up,
                "matched": i in self.matched,
            }
            for i, emoji in enumerate(self.deck)
        ]
        return {"cards": cards, "moves": self.moves, "revealing": self.reveal_timer is not None}
