"""Tests for the emoji match game."""

import random

from dad_arcade.games.match import (
    CORRECT_POINTS,
    EMOJIS,
    ROUND_BONUS,
    WRONG_PENALTY,
    MatchGame,
)

TARGET = EMOJIS[0]
OTHER = EMOJIS[1]


def _game_with(cells: list[str | None], score: int = 0) -> MatchGame:
    game = MatchGame(rng=random.Random(7))
    game.start()
    game.target = TARGET
    game.cells = list(cells)
    game.score = score
    return game


class TestSeeding:
    def test_grid_is_five_by_five(self) -> None:
        game = MatchGame(rng=random.Random(1))
        assert game.grid_size == 5
        assert len(game.cells) == 25

    def test_every_round_has_a_target(self) -> None:
        for seed in range(200):
            game = MatchGame(rng=random.Random(seed))
            assert game.targets_left >= 1

    def test_fresh_game_state(self) -> None:
        game = MatchGame(rng=random.Random(3))
        assert game.score == 0
        assert game.time_left == 60.0
        assert game.round == 1
        assert None not in game.cells


class TestClicks:
    def test_two_correct_clicks(self) -> None:
        game = _game_with([TARGET] * 3 + [OTHER] * 22)
        game.click(0)
        game.click(1)
        assert game.score == 2 * CORRECT_POINTS
        assert game.cells.count(None) == 2
        assert game.cells[0] is None and game.cells[1] is None

    def test_wrong_click_penalizes(self) -> None:
        game = _game_with([TARGET] + [OTHER] * 24, score=20)
        game.click(5)
        assert game.score == 20 - WRONG_PENALTY
        assert game.cells[5] == OTHER

    def test_wrong_click_clamps_at_zero(self) -> None:
        game = _game_with([TARGET] + [OTHER] * 24, score=3)
        game.click(5)
        assert game.score == 0
        game.click(6)
        assert game.score == 0

    def test_empty_cell_ignored(self) -> None:
        game = _game_with([None, TARGET, TARGET] + [OTHER] * 22, score=10)
        game.click(0)
        assert game.score == 10

    def test_out_of_range_ignored(self) -> None:
        game = _game_with([TARGET] * 2 + [OTHER] * 23)
        game.click(-1)
        game.click(25)
        assert game.score == 0

    def test_last_target_gives_bonus_and_reseeds(self) -> None:
        game = _game_with([TARGET] + [OTHER] * 24)
        game.click(0)
        assert game.score == CORRECT_POINTS + ROUND_BONUS
        assert game.round == 2
        assert None not in game.cells
        assert game.targets_left >= 1

    def test_click_event(self) -> None:
        game = _game_with([TARGET] * 2 + [OTHER] * 23)
        game.handle({"type": "click", "index": 0})
        game.handle({"type": "click", "index": "1"})
        assert game.score == CORRECT_POINTS


class TestTimer:
    def test_countdown_ends_game(self) -> None:
        game = MatchGame(rng=random.Random(2))
        game.start()
        game.tick(30.0)
        assert not game.finished
        game.tick(30.0)
        assert game.finished
        assert game.outcome == "completed"
        assert game.time_left == 0.0

    def test_no_clicks_after_finish(self) -> None:
        game = _game_with([TARGET] * 2 + [OTHER] * 23)
        game.tick(60.0)
        game.click(0)
        assert game.score == 0

    def test_reset_restores_fresh_round(self) -> None:
        game = _game_with([TARGET] + [OTHER] * 24)
        game.click(0)
        game.tick(60.0)
        game.reset()
        assert game.score == 0
        assert not game.finished
        assert game.round == 1
        assert game.time_left == 60.0
