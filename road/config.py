from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Tuning constants for a session.

    Distances are canvas pixels, times are milliseconds unless the name says
    otherwise. Speeds and smoothing apply per frame; see ``frame_normalized``.
    """

    canvas_width: int = 400
    canvas_height: int = 600
    road_margin: float = 80.0

    player_width: float = 40.0
    player_height: float = 70.0
    player_bottom_offset: float = 110.0
    smoothing: float = 0.2

    spawn_interval_ms: float = 1000.0
    initial_speed: float = 4.0
    speed_increment: float = 0.2

    log_width_range: tuple[float, float] = (70.0, 130.0)
    log_height: float = 24.0
    pothole_width: float = 50.0
    pothole_height: float = 30.0
    spawn_y: float = -100.0
    prune_margin: float = 80.0

    frame_period: float = 1 / 60.0  # seconds
    # Scale motion by elapsed time instead of applying raw per-frame steps
    frame_normalized: bool = False

    @property
    def road_width(self) -> float:
        return self.canvas_width - self.road_margin * 2

    @property
    def road_left(self) -> float:
        return self.road_margin

    @property
    def road_right(self) -> float:
        return self.road_margin + self.road_width

    @property
    def player_left_limit(self) -> float:
        return self.road_left

    @property
    def player_right_limit(self) -> float:
        return self.road_right - self.player_width

    @property
    def reference_frame_ms(self) -> float:
        return self.frame_period * 1000.0

    def validate(self) -> "GameConfig":
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError("Canvas size must be positive.")
        if self.road_margin < 0:
            raise ValueError("Road margin cannot be negative.")
        if self.player_width <= 0 or self.player_height <= 0:
            raise ValueError("Player size must be positive.")
        if not 0.0 < self.smoothing <= 1.0:
            raise ValueError(f"Smoothing must be in (0, 1], got {self.smoothing}.")
        if self.spawn_interval_ms <= 0 or self.frame_period <= 0:
            raise ValueError("Spawn interval and frame period must be positive.")
        if self.speed_increment < 0:
            raise ValueError("Speed increment cannot be negative.")

        log_min, log_max = self.log_width_range
        if log_min <= 0 or log_max < log_min:
            raise ValueError(f"Invalid log width range {self.log_width_range}.")
        if self.log_height <= 0 or self.pothole_width <= 0 or self.pothole_height <= 0:
            raise ValueError("Obstacle sizes must be positive.")

        widest = max(log_max, self.pothole_width, self.player_width)
        if self.road_width < widest:
            raise ValueError(
                f"Road width {self.road_width} is narrower than {widest}."
            )
        return self
