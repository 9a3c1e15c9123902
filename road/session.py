from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from road.config import GameConfig
from road.entities.obstacle import ObstacleKind
from road.entities.player import Player
from road.internal.math import Rect, Vector2D
from road.logic.machine import EventData, Machine, State
from road.logic.obstacles import ObstacleManager

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    RUNNING = "running"
    TERMINAL = "terminal"


class EndReason(Enum):
    HIT_BARRIER = "You hit the barrier!"
    LEFT_ROAD = "You left the road!"
    HIT_OBSTACLE = "You hit an obstacle!"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class Running:
    pass


@dataclass(frozen=True)
class Terminal:
    reason: EndReason

    @property
    def message(self) -> str:
        return self.reason.message


GameStatus = Union[Running, Terminal]


@dataclass(frozen=True)
class ObstacleView:
    kind: ObstacleKind
    rect: Rect
    has_scored: bool


@dataclass(frozen=True)
class GameView:
    """Read-only snapshot of a session, all the renderer needs for one frame."""

    width: int
    height: int
    player: Rect
    player_color: str
    obstacles: Tuple[ObstacleView, ...]
    score: int
    speed: float
    status: GameStatus

    @property
    def running(self) -> bool:
        return isinstance(self.status, Running)


class GameSession:
    """One play-through of the road: player, obstacles, score and speed.

    The session is advanced by calling :meth:`step` once per display frame
    with a monotonically increasing timestamp in milliseconds. Pointer input
    is fed in between frames through :meth:`pointer_move` and
    :meth:`pointer_leave`. Once the session is terminal every call is a
    no-op; a new game needs a new session.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = (config or GameConfig()).validate()
        if rng is None:
            rng = np.random.default_rng()
        self.rng = rng

        cfg = self.config
        self.player = Player(
            position=Vector2D(
                cfg.canvas_width / 2 - cfg.player_width / 2,
                cfg.canvas_height - cfg.player_bottom_offset,
            ),
            size=Vector2D(cfg.player_width, cfg.player_height),
        )
        self.obstacles = ObstacleManager(cfg, rng=self.rng)

        self.score: int = 0
        self.last_timestamp: Optional[float] = None
        self.frame_count: int = 0

        self._end_reason: Optional[EndReason] = None
        self.machine = Machine(
            states=[
                State(GamePhase.RUNNING),
                State(GamePhase.TERMINAL, on_enter=self._on_terminal, final=True),
            ],
            initial_state=GamePhase.RUNNING,
        )
        for reason in EndReason:
            self.machine.add_transition(GamePhase.RUNNING, GamePhase.TERMINAL, reason)

    @property
    def running(self) -> bool:
        return self.machine.is_state(GamePhase.RUNNING)

    @property
    def status(self) -> GameStatus:
        if self._end_reason is None:
            return Running()
        return Terminal(self._end_reason)

    @property
    def speed(self) -> float:
        return self.obstacles.speed

    @property
    def last_spawn_time(self) -> float:
        return self.obstacles.last_spawn_time

    # ------------------------------------------------------------------ #
    # Input
    # ------------------------------------------------------------------ #
    def pointer_move(self, pointer_x: float) -> None:
        if not self.running:
            return
        self.player.set_target(pointer_x)

    def pointer_leave(self) -> bool:
        return self.end(EndReason.LEFT_ROAD)

    # ------------------------------------------------------------------ #
    # Frame update
    # ------------------------------------------------------------------ #
    def step(self, timestamp: float) -> bool:
        """Advance one frame. Returns True while the session keeps running."""
        if not self.running:
            return False

        scale = self._frame_scale(timestamp)
        self.last_timestamp = timestamp
        cfg = self.config

        self.player.follow_target(self._smoothing_factor(scale))
        left = cfg.player_left_limit
        right = cfg.player_right_limit
        if not self.player.is_within(left, right):
            self.end(EndReason.HIT_BARRIER)
        # Keep the car on the road for the final frame too
        self.player.clamp_to(left, right)
        if not self.running:
            return False

        self.obstacles.maybe_spawn(timestamp)

        for obstacle in self.obstacles.advance(scale):
            self.score += 1
            logger.debug(
                "Passed %s, score=%d speed=%.1f",
                obstacle.kind.value, self.score, self.speed
            )

        self.obstacles.prune()

        if self.obstacles.first_collision(self.player.bounds()) is not None:
            self.end(EndReason.HIT_OBSTACLE)
            return False

        self.frame_count += 1
        return True

    def end(self, reason: EndReason) -> bool:
        """Move to the terminal phase. Only the first reason is kept."""
        return self.machine.trigger(reason, reason=reason)

    def view(self) -> GameView:
        return GameView(
            width=self.config.canvas_width,
            height=self.config.canvas_height,
            player=self.player.bounds(),
            player_color=self.player.color,
            obstacles=tuple(
                ObstacleView(o.kind, o.bounds(), o.has_scored)
                for o in self.obstacles
            ),
            score=self.score,
            speed=self.speed,
            status=self.status,
        )

    def _on_terminal(self, data: EventData) -> None:
        self._end_reason = data.kwargs["reason"]
        logger.info("GAME OVER: %s (score=%d)", self._end_reason.message, self.score)

    def _frame_scale(self, timestamp: float) -> float:
        if not self.config.frame_normalized or self.last_timestamp is None:
            return 1.0
        dt = max(0.0, timestamp - self.last_timestamp)
        return dt / self.config.reference_frame_ms

    def _smoothing_factor(self, scale: float) -> float:
        smoothing = self.config.smoothing
        if scale == 1.0:
            return smoothing
        return 1.0 - (1.0 - smoothing) ** scale
