from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from road.config import GameConfig
from road.entities.obstacle import Obstacle, ObstacleKind
from road.internal.math import Rect, Vector2D

logger = logging.getLogger(__name__)


class ObstacleManager:
    """Spawns, scrolls, scores and prunes the obstacles on the road.

    The manager also owns the scroll speed, which rises by
    ``speed_increment`` every time an obstacle is passed.

    Scoring and removal are separate events: an obstacle scores once when it
    crosses the bottom edge of the canvas and is only dropped after it has
    travelled ``prune_margin`` further.
    """

    def __init__(
        self,
        config: GameConfig,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config
        if rng is None:
            rng = np.random.default_rng()
        self.rng = rng

        self.obstacles: List[Obstacle] = []
        self.last_spawn_time: float = 0.0
        self.speed: float = config.initial_speed

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self):
        return iter(self.obstacles)

    def maybe_spawn(self, timestamp: float) -> Optional[Obstacle]:
        if timestamp - self.last_spawn_time <= self.config.spawn_interval_ms:
            return None
        self.last_spawn_time = timestamp
        return self.spawn()

    def spawn(self) -> Obstacle:
        cfg = self.config
        if self.rng.random() < 0.5:
            kind = ObstacleKind.LOG
            size = Vector2D(float(self.rng.uniform(*cfg.log_width_range)), cfg.log_height)
        else:
            kind = ObstacleKind.POTHOLE
            size = Vector2D(cfg.pothole_width, cfg.pothole_height)

        x_min = cfg.road_left
        x_max = cfg.road_right - size.x
        x = x_min + float(self.rng.random()) * (x_max - x_min)

        obstacle = Obstacle(kind, Vector2D(x, cfg.spawn_y), size)
        self.obstacles.append(obstacle)
        logger.debug("Spawned %r", obstacle)
        return obstacle

    def add(self, obstacle: Obstacle) -> None:
        self.obstacles.append(obstacle)

    def advance(self, scale: float = 1.0) -> List[Obstacle]:
        """Scroll every obstacle down and return those that scored this frame.

        Each pass speeds the road up before the next obstacle in the list
        moves, so later obstacles travel at the raised speed in the same frame.
        """
        bottom = self.config.canvas_height
        scored: List[Obstacle] = []
        for obstacle in self.obstacles:
            obstacle.advance(self.speed * scale)
            if obstacle.position.y > bottom and obstacle.mark_scored():
                self.speed += self.config.speed_increment
                scored.append(obstacle)
        return scored

    def prune(self) -> int:
        limit = self.config.canvas_height + self.config.prune_margin
        kept = [o for o in self.obstacles if o.position.y < limit]
        removed = len(self.obstacles) - len(kept)
        self.obstacles = kept
        if removed:
            logger.debug("Pruned %d obstacle(s)", removed)
        return removed

    def first_collision(self, rect: Rect) -> Optional[Obstacle]:
        for obstacle in self.obstacles:
            if obstacle.bounds().intersects(rect):
                return obstacle
        return None
