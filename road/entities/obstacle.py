from __future__ import annotations

from enum import Enum

from road.internal.math import Rect, Vector2D


class ObstacleKind(Enum):
    LOG = "log"
    POTHOLE = "pothole"


class Obstacle:
    def __init__(
        self,
        kind: ObstacleKind,
        position: Vector2D,
        size: Vector2D,
    ):
        self.kind = kind
        self.position = position.copy()
        self.size = size.copy()

        self._has_scored = False

    @property
    def has_scored(self) -> bool:
        return self._has_scored

    def mark_scored(self) -> bool:
        """Flag the obstacle as passed. Returns False if it already was."""
        if self._has_scored:
            return False
        self._has_scored = True
        return True

    def advance(self, distance: float) -> None:
        self.position.y += distance

    def bounds(self) -> Rect:
        return Rect.from_corner(self.position, self.size)

    def __repr__(self) -> str:
        return (
            f"Obstacle(kind={self.kind.value}, position={self.position}, "
            f"size={self.size}, has_scored={self._has_scored})"
        )
