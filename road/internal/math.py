from dataclasses import dataclass


@dataclass
class Vector2D:
    x: float
    y: float

    def copy(self) -> "Vector2D":
        return Vector2D(self.x, self.y)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def intersects(self, other: "Rect") -> bool:
        # Touching edges count as overlap
        return not (
            self.x + self.width < other.x
            or self.x > other.x + other.width
            or self.y + self.height < other.y
            or self.y > other.y + other.height
        )

    @staticmethod
    def from_corner(
        position: Vector2D,
        size: Vector2D
    ) -> "Rect":
        return Rect(position.x, position.y, size.x, size.y)


def is_colliding(a: Rect, b: Rect) -> bool:
    return a.intersects(b)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))
