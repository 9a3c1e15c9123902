from __future__ import annotations

from road.internal.math import Rect, Vector2D, clamp


class Player:
    def __init__(
        self,
        position: Vector2D,
        size: Vector2D,
        color: str = "#38bdf8",
    ):
        self.position: Vector2D = position.copy()
        self.size: Vector2D = size.copy()
        self.color: str = color
        self.target_x: float = self.position.x

    @property
    def half_width(self) -> float:
        return self.size.x * 0.5

    def set_target(self, pointer_x: float) -> None:
        """Aim the car so that its centre follows the pointer.

        The target is left unclamped; the barrier check happens on the
        smoothed position, not here.
        """
        self.target_x = float(pointer_x) - self.half_width

    def follow_target(self, factor: float) -> float:
        self.position.x += (self.target_x - self.position.x) * factor
        return self.position.x

    def is_within(self, left: float, right: float) -> bool:
        return left <= self.position.x <= right

    def clamp_to(self, left: float, right: float) -> None:
        self.position.x = clamp(self.position.x, left, right)

    def bounds(self) -> Rect:
        return Rect.from_corner(self.position, self.size)

    def __repr__(self) -> str:
        return f"Player(position={self.position}, target_x={self.target_x:.2f})"
