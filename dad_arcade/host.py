"""Game session host: runs one arcade game at a time.

Lifecycle of one session:

  start_game(type)   build the engine, open the session
  handle_input/tick  drive the engine, then await its async effects
  (game finishes)    GameSession finalized once, score listeners fired,
                     recorder awaited, post-game display timer started
  close()            tear the engine down; mid-game this drops the session
                     without reporting it

After `display_delay` simulated seconds the host closes itself and calls
`on_close`, which hands control back to the arcade stage.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from dad_arcade.games.base import Game
from dad_arcade.games.catch import CatchGame
from dad_arcade.games.match import MatchGame
from dad_arcade.games.memory import MemoryGame
from dad_arcade.games.trivia import TriviaGame
from dad_arcade.models import GAME_TYPES, GameSession
from dad_arcade.trivia import LocalTriviaSource, TriviaSource

logger = logging.getLogger(__name__)

DISPLAY_DELAY = 2.0

Recorder = Callable[[GameSession], "Awaitable[bool] | bool"]
GameFactory = Callable[[str], Game]


def make_game_factory(
    trivia_source: TriviaSource | None = None,
    rng: random.Random | None = None,
) -> GameFactory:
    """Build a factory that creates engines sharing one trivia source and RNG."""
    source = trivia_source or LocalTriviaSource(rng=rng)

    def factory(game_type: str) -> Game:
        if game_type == "match":
            return MatchGame(rng=rng)
        if game_type == "memory":
            return MemoryGame(rng=rng)
        if game_type == "trivia":
            return TriviaGame(source, rng=rng)
        if game_type == "catch":
            return CatchGame(rng=rng)
        raise UnknownGame(game_type)

    return factory


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameHandle:
    """Returned by start_game(). Register score listeners with on_end()."""

    def __init__(self, session_id: str, game_type: str, game: Game) -> None:
        self.session_id = session_id
        self.game_type = game_type
        self.game = game
        self._listeners: list[Callable[[int], Any]] = []
        self._fired = False

    def on_end(self, callback: Callable[[int], Any]) -> None:
        self._listeners.append(callback)

    def _fire(self, score: int) -> None:
        if self._fired:
            return
        self._fired = True
        for callback in self._listeners:
            callback(score)


class GameHost:
    """Hosts at most one game session for a single user.

    Args:
        recorder:       Persists a finished GameSession; may be sync or async.
                        Exceptions and a False return are logged, never raised.
        user_id:        Owner written into every GameSession.
        factory:        game_type -> Game. Defaults to make_game_factory().
        display_delay:  Seconds the final score stays up before auto-close.
        clock:          Returns the current time for session timestamps.
        on_close:       Called after every close, automatic or manual.
    """

    def __init__(
        self,
        recorder: Recorder,
        user_id: str,
        factory: GameFactory | None = None,
        display_delay: float = DISPLAY_DELAY,
        clock: Callable[[], datetime] = _utcnow,
        on_close: Callable[[], Any] | None = None,
    ) -> None:
        self.recorder = recorder
        self.user_id = user_id
        self.factory = factory or make_game_factory()
        self.display_delay = display_delay
        self.clock = clock
        self.on_close = on_close
        self.handle: GameHandle | None = None
        self.last_session: GameSession | None = None
        self._session: GameSession | None = None
        self._started_at: datetime | None = None
        self._display_timer: float | None = None

    @property
    def active(self) -> bool:
        return self.handle is not None

    @property
    def game(self) -> Game | None:
        return self.handle.game if self.handle else None

    def start_game(self, game_type: str) -> GameHandle:
        if self.handle is not None:
            raise GameAlreadyActive(self.handle.game_type)
        if game_type not in GAME_TYPES:
            raise UnknownGame(game_type)

        game = self.factory(game_type)
        game.start()
        self.handle = GameHandle(uuid.uuid4().hex, game_type, game)
        self._session = None
        self._display_timer = None
        self._started_at = self.clock()
        logger.info("Game started: user=%s type=%s", self.user_id, game_type)
        return self.handle

    def _require_game(self) -> Game:
        if self.handle is None:
            raise NoActiveGame(self.user_id)
        return self.handle.game

    async def handle_input(self, event: dict[str, Any]) -> None:
        game = self._require_game()
        game.handle(event)
        await game.prepare()
        await self._after_step()

    async def tick(self, dt: float) -> None:
        game = self._require_game()
        # The display countdown starts on the tick after the game finishes.
        counting_down = self._display_timer is not None
        game.tick(dt)
        await game.prepare()
        await self._after_step()
        if counting_down and self.handle is not None and dt > 0:
            self._display_timer -= dt
            if self._display_timer <= 0:
                self.close()

    async def end(self) -> None:
        """Voluntary end. Reports the score unless the game treats it as an abandon."""
        game = self._require_game()
        game.end()
        await self._after_step()

    async def _after_step(self) -> None:
        if self.handle is None:
            return
        game = self.handle.game
        if not game.finished or self._session is not None:
            return
        if game.outcome == "abandoned":
            logger.info("Game abandoned: user=%s type=%s", self.user_id, self.handle.game_type)
            self.close()
            return

        handle = self.handle
        self._session = self._finalize(game)
        self.last_session = self._session
        handle._fire(self._session.score)
        await self._record(self._session)
        if self.handle is not handle:
            # Closed while the recorder was running.
            return
        if self.display_delay <= 0:
            self.close()
        else:
            self._display_timer = self.display_delay

    def _finalize(self, game: Game) -> GameSession:
        assert self.handle is not None and self._started_at is not None
        session = GameSession(
            id=self.handle.session_id,
            user_id=self.user_id,
            game_type=self.handle.game_type,
            score=max(0, game.score),
            started_at=self._started_at,
            ended_at=self.clock(),
            completed=game.outcome == "completed",
            duration_seconds=int(round(game.elapsed)),
        )
        logger.info(
            "Game finished: user=%s type=%s score=%d outcome=%s",
            self.user_id, session.game_type, session.score, game.outcome,
        )
        return session

    async def _record(self, session: GameSession) -> None:
        try:
            result = self.recorder(session)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.warning("Recording game session %s failed: %s", session.id, e)
            return
        if result is False:
            logger.warning("Recorder rejected game session %s", session.id)

    def close(self) -> None:
        """Tear down the current game. Safe to call when nothing is open."""
        if self.handle is None:
            return
        handle = self.handle
        handle.game.teardown()
        if self._session is None:
            logger.info(
                "Game closed before finishing, not recorded: user=%s type=%s",
                self.user_id, handle.game_type,
            )
        self.handle = None
        self._session = None
        self._display_timer = None
        self._started_at = None
        if self.on_close is not None:
            self.on_close()

    def snapshot(self) -> dict[str, Any]:
        return {
            "active": self.handle is not None,
            "session_id": self.handle.session_id if self.handle else None,
            "game_type": self.handle.game_type if self.handle else None,
            "game": self.handle.game.snapshot() if self.handle else None,
            "display_remaining": (
                max(0.0, self._display_timer) if self._display_timer is not None else None
            ),
            "last_session": (
                self.last_session.model_dump(mode="json") if self.last_session else None
            ),
        }

    async def run(self, fps: int = 60) -> None:
        """Tick the open game at roughly `fps` until the host closes."""
        loop = asyncio.get_running_loop()
        frame = 1.0 / fps
        last = loop.time()
        while self.handle is not None:
            await asyncio.sleep(frame)
            if self.handle is None:
                break
            now = loop.time()
            await self.tick(now - last)
            last = now


class GameError(Exception):
    """Base class for session host errors."""


class GameAlreadyActive(GameError):
    def __init__(self, game_type: str) -> None:
        super().__init__(f"A {game_type} game is already running")


class UnknownGame(GameError):
    def __init__(self, game_type: str) -> None:
        super().__init__(f"Unknown game type: {game_type!r}")


class NoActiveGame(GameError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"No game is running for user {user_id!r}")
