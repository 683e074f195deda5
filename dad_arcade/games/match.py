"""Emoji match: click every cell showing the target emoji before time runs out."""

from __future__ import annotations

import random
from typing import Any

from dad_arcade.games.base import Game, event_index

EMOJIS = ("😀", "😎", "🤔", "😴", "🤗", "😂", "🥳", "😊", "🤩", "😋")

GRID_SIZE = 5
TARGET_DENSITY = 0.3
CORRECT_POINTS = 10
WRONG_PENALTY = 5
ROUND_BONUS = 50
TIME_LIMIT = 60.0


class MatchGame(Game):
    """A grid_size x grid_size board. Cleared cells are None.

    Input: {"type": "click", "index": i} with i in row-major order.
    """

    game_type = "match"

    def __init__(
        self,
        rng: random.Random | None = None,
        grid_size: int = GRID_SIZE,
        time_limit: float = TIME_LIMIT,
    ) -> None:
        self.grid_size = grid_size
        self.time_limit = time_limit
        super().__init__(rng)

    def _reset_state(self) -> None:
        self.time_left = self.time_limit
        self.round = 0
        self.target = ""
        self.cells: list[str | None] = []
        self._seed_round()

    def _seed_round(self) -> None:
        self.round += 1
        self.target = self.rng.choice(EMOJIS)
        others = [e for e in EMOJIS if e != self.target]
        self.cells = [
            self.target if self.rng.random() < TARGET_DENSITY else self.rng.choice(others)
            for _ in range(self.grid_size * self.grid_size)
        ]
        if self.target not in self.cells:
            self.cells[self.rng.randrange(len(self.cells))] = self.target

    @property
    def targets_left(self) -> int:
        return self.cells.count(self.target)

    def click(self, index: int) -> None:
        if not self.active or not 0 <= index < len(self.cells):
            return
        cell = self.cells[index]
        if cell is None:
            return
        if cell != self.target:
            self.score = max(0, self.score - WRONG_PENALTY)
            return
        self.score += CORRECT_POINTS
        self.cells[index] = None
        if self.targets_left == 0:
            self.score += ROUND_BONUS
            self._seed_round()

    def _handle(self, event: dict[str, Any]) -> None:
        index = event_index(event)
        if event.get("type") == "click" and index is not None:
            self.click(index)

    def _tick(self, dt: float) -> None:
        self.time_left = max(0.0, self.time_left - dt)
        if self.time_left == 0.0:
            self.finish("completed")

    def _snapshot(self) -> dict[str, Any]:
        return {
            "round": self.round,
            "target": self.target,
            "cells": list(self.cells),
            "grid_size": self.grid_size,
            "time_left": round(self.time_left, 3),
        }
