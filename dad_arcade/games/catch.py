"""Catch-ball: steer a paddle to catch falling balls.

The world is simulated in playfield pixels (origin top-left, y grows down)
and simulated seconds. One tick runs these phases in order:

  1. read level     gravity, spawn interval and spawn speed use the level at tick start
  2. integrate      v += g*dt, p += v*dt, reflect off the side walls
  3. collide        ball-paddle (circle vs AABB, swept across the paddle top)
                    only for balls descending onto the top face
                    ball-floor (ball top below the playfield)
  4. mutate         score, lives, level; zero lives ends the game
  5. spawn          fixed-interval accumulator, capped at max_balls
  6. particles      age and expire

A ball leaves the world exactly once, either caught or missed.
"""

from __future__ import annotations

import itertools
import math
import random
from dataclasses import dataclass
from typing import Any

from dad_arcade.games.base import Game

WIDTH = 400
HEIGHT = 300
PADDLE_WIDTH = 60
PADDLE_HEIGHT = 10
PADDLE_TOP = HEIGHT - 20
BALL_RADIUS = 10
START_LIVES = 3
CATCH_POINTS = 10
POINTS_PER_LEVEL = 100
MAX_BALLS = 24
MAX_HORIZONTAL_SPEED = 40.0
PARTICLES_PER_BURST = 8
PARTICLE_LIFETIME = 0.5
BALL_EMOJIS = ("⚽", "🏀", "⚾", "🎾", "🏈", "🏐")


def level_for(score: int) -> int:
    return score // POINTS_PER_LEVEL + 1


def gravity_for(level: int) -> float:
    """Downward acceleration in px/s²."""
    return 120.0 + 40.0 * (level - 1)


def spawn_interval_for(level: int) -> float:
    return max(1.0 - 0.1 * level, 0.3)


def fall_speed_for(level: int) -> float:
    """Initial downward speed of a new ball in px/s (2 + 0.5*level px per 60 Hz frame)."""
    return (2.0 + 0.5 * level) * 60.0


@dataclass
class Ball:
    id: int
    x: float
    y: float
    vx: float
    vy: float
    radius: float = BALL_RADIUS
    emoji: str = "⚽"


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    age: float = 0.0


@dataclass
class Paddle:
    x: float
    width: float = PADDLE_WIDTH
    height: float = PADDLE_HEIGHT
    top: float = PADDLE_TOP

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.top + self.height


def circle_hits_rect(cx: float, cy: float, r: float, paddle: Paddle) -> bool:
    nearest_x = min(max(cx, paddle.left), paddle.right)
    nearest_y = min(max(cy, paddle.top), paddle.bottom)
    dx = cx - nearest_x
    dy = cy - nearest_y
    return dx * dx + dy * dy <= r * r


class CatchGame(Game):
    """Input: {"type": "pointer", "x": px}.

    Args:
        max_balls:   Live-ball cap; spawns beyond it are skipped.
        auto_spawn:  When False only spawn_ball() adds balls.
    """

    game_type = "catch"

    def __init__(
        self,
        rng: random.Random | None = None,
        max_balls: int = MAX_BALLS,
        auto_spawn: bool = True,
    ) -> None:
        self.max_balls = max_balls
        self.auto_spawn = auto_spawn
        super().__init__(rng)

    def _reset_state(self) -> None:
        self.paddle = Paddle(x=WIDTH / 2)
        self.balls: list[Ball] = []
        self.particles: list[Particle] = []
        self.lives = START_LIVES
        self.caught = 0
        self.missed = 0
        self.spawn_timer = 0.0
        self._ids = itertools.count(1)

    @property
    def level(self) -> int:
        return level_for(self.score)

    # ── Input ────────────────────────────────────────────

    def move_pointer(self, x: float) -> None:
        """Center the paddle on x, clamped so the paddle stays in the playfield."""
        if not self.active or not math.isfinite(x):
            return
        half = self.paddle.width / 2
        self.paddle.x = min(max(x, half), WIDTH - half)

    def _handle(self, event: dict[str, Any]) -> None:
        x = event.get("x")
        if event.get("type") == "pointer" and isinstance(x, (int, float)) and not isinstance(x, bool):
            self.move_pointer(float(x))

    def spawn_ball(self, x: float | None = None, level: int | None = None) -> Ball | None:
        """Add a ball at the top of the playfield. Returns None at the cap.

        `level` sets the fall speed; the tick passes the level it started with.
        """
        if not self.active or len(self.balls) >= self.max_balls:
            return None
        if x is None:
            x = self.rng.uniform(BALL_RADIUS, WIDTH - BALL_RADIUS)
        ball = Ball(
            id=next(self._ids),
            x=min(max(x, BALL_RADIUS), WIDTH - BALL_RADIUS),
            y=-BALL_RADIUS,
            vx=self.rng.uniform(-MAX_HORIZONTAL_SPEED, MAX_HORIZONTAL_SPEED),
            vy=fall_speed_for(self.level if level is None else level),
            emoji=self.rng.choice(BALL_EMOJIS),
        )
        self.balls.append(ball)
        return ball

    # ── Simulation ───────────────────────────────────────

    def _tick(self, dt: float) -> None:
        level = self.level
        gravity = gravity_for(level)

        caught: list[Ball] = []
        missed: list[Ball] = []
        survivors: list[Ball] = []
        for ball in self.balls:
            prev_y = ball.y
            self._integrate(ball, gravity, dt)
            if self._hits_paddle(ball, prev_y):
                caught.append(ball)
            elif ball.y - ball.radius > HEIGHT:
                missed.append(ball)
            else:
                survivors.append(ball)
        self.balls = survivors

        for ball in caught:
            self._burst(ball.x, self.paddle.top)
        self.caught += len(caught)
        self.missed += len(missed)
        self.score += CATCH_POINTS * len(caught)
        self.lives = max(0, self.lives - len(missed))
        if self.lives == 0:
            self.finish("completed")
            self.balls = []

        if not self.finished and self.auto_spawn:
            self.spawn_timer += dt
            interval = spawn_interval_for(level)
            while self.spawn_timer >= interval:
                self.spawn_timer -= interval
                self.spawn_ball(level=level)

        self._age_particles(dt)

    @staticmethod
    def _integrate(ball: Ball, gravity: float, dt: float) -> None:
        ball.vy += gravity * dt
        ball.x += ball.vx * dt
        ball.y += ball.vy * dt
        if ball.x - ball.radius < 0:
            ball.x = ball.radius
            ball.vx = abs(ball.vx)
        elif ball.x + ball.radius > WIDTH:
            ball.x = WIDTH - ball.radius
            ball.vx = -abs(ball.vx)

    def _hits_paddle(self, ball: Ball, prev_y: float) -> bool:
        # Only a ball coming down onto the top face is caught.
        if prev_y + ball.radius > self.paddle.top:
            return False
        if circle_hits_rect(ball.x, ball.y, ball.radius, self.paddle):
            return True
        # A fast ball can step over the paddle in one tick.
        crossed_top = self.paddle.top <= ball.y + ball.radius
        return crossed_top and self.paddle.left <= ball.x <= self.paddle.right

    def _burst(self, x: float, y: float) -> None:
        for _ in range(PARTICLES_PER_BURST):
            angle = self.rng.uniform(0, 2 * math.pi)
            speed = self.rng.uniform(40.0, 120.0)
            self.particles.append(
                Particle(x=x, y=y, vx=math.cos(angle) * speed, vy=math.sin(angle) * speed)
            )

    def _age_particles(self, dt: float) -> None:
        for p in self.particles:
            p.age += dt
            p.x += p.vx * dt
            p.y += p.vy * dt
        self.particles = [p for p in self.particles if p.age < PARTICLE_LIFETIME]

    def _snapshot(self) -> dict[str, Any]:
        return {
            "width": WIDTH,
            "height": HEIGHT,
            "lives": self.lives,
            "level": self.level,
            "paddle": {
                "x": self.paddle.x,
                "width": self.paddle.width,
                "height": self.paddle.height,
                "top": self.paddle.top,
            },
            "balls": [
                {"id": b.id, "x": b.x, "y": b.y, "radius": b.radius, "emoji": b.emoji}
                for b in self.balls
            ],
            "particles": [
                {"x": p.x, "y": p.y, "life": 1.0 - p.age / PARTICLE_LIFETIME}
                for p in self.particles
            ],
        }
