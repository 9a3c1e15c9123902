from __future__ import annotations

import math
from dataclasses import dataclass

from ipycanvas import Canvas, hold_canvas

from road.entities.obstacle import ObstacleKind
from road.internal.math import Rect
from road.session import GameView, Terminal


@dataclass(frozen=True)
class Colors:
    background: str = "#020617"
    road: str = "#111827"
    road_edge: str = "#e5e7eb"
    center_line: str = "#9ca3af"
    hud: str = "#e5e7eb"

    car_hood: str = "#0f172a"
    log: str = "#b45309"
    log_ring: str = "rgba(30, 64, 175, 0.4)"
    pothole: str = "#020617"
    pothole_ring: str = "#4b5563"

    overlay: str = "rgba(15, 23, 42, 0.8)"
    overlay_text: str = "#f9fafb"


FONT_FAMILY = "system-ui, -apple-system, sans-serif"


class Renderer:
    """Draws a :class:`GameView` onto an ipycanvas ``Canvas``.

    The renderer never reads the session directly; it only issues draw calls
    for the snapshot it is handed.
    """

    def __init__(
        self,
        canvas: Canvas,
        road_margin: float,
        log_corner_radius: float = 10.0,
    ):
        self.canvas = canvas
        self.road_margin = road_margin
        self.log_corner_radius = log_corner_radius

    def draw(self, view: GameView) -> None:
        with hold_canvas(self.canvas):
            self._draw_scene(view)
            if isinstance(view.status, Terminal):
                self._draw_game_over(view, view.status)

    def _draw_scene(self, view: GameView) -> None:
        canvas = self.canvas
        width = view.width
        height = view.height
        road_width = width - self.road_margin * 2

        canvas.clear()
        canvas.fill_style = Colors.background
        canvas.fill_rect(0, 0, width, height)

        canvas.fill_style = Colors.road
        canvas.fill_rect(self.road_margin, 0, road_width, height)

        canvas.fill_style = Colors.road_edge
        canvas.fill_rect(self.road_margin - 4, 0, 4, height)
        canvas.fill_rect(self.road_margin + road_width, 0, 4, height)

        canvas.stroke_style = Colors.center_line
        canvas.line_width = 4
        canvas.set_line_dash([20, 15])
        canvas.begin_path()
        canvas.move_to(width / 2, 0)
        canvas.line_to(width / 2, height)
        canvas.stroke()
        canvas.set_line_dash([])

        for obstacle in view.obstacles:
            if obstacle.kind is ObstacleKind.LOG:
                self._draw_log(obstacle.rect)
            else:
                self._draw_pothole(obstacle.rect)

        self._draw_car(view.player, view.player_color)

        canvas.fill_style = Colors.hud
        canvas.font = f"16px {FONT_FAMILY}"
        canvas.text_align = "left"
        canvas.fill_text(f"Score: {view.score}", 16, 28)
        canvas.fill_text(f"Speed: {view.speed:.1f}", 16, 50)

    def _draw_car(self, rect: Rect, color: str) -> None:
        canvas = self.canvas
        canvas.fill_style = color
        canvas.fill_rect(rect.x, rect.y, rect.width, rect.height)
        # hood stripe
        canvas.fill_style = Colors.car_hood
        canvas.fill_rect(rect.x + 6, rect.y + 10, rect.width - 12, 6)

    def _draw_log(self, rect: Rect) -> None:
        canvas = self.canvas
        r = min(self.log_corner_radius, rect.width / 2, rect.height / 2)
        x, y, w, h = rect.x, rect.y, rect.width, rect.height

        canvas.fill_style = Colors.log
        canvas.begin_path()
        canvas.move_to(x + r, y)
        canvas.line_to(x + w - r, y)
        canvas.quadratic_curve_to(x + w, y, x + w, y + r)
        canvas.line_to(x + w, y + h - r)
        canvas.quadratic_curve_to(x + w, y + h, x + w - r, y + h)
        canvas.line_to(x + r, y + h)
        canvas.quadratic_curve_to(x, y + h, x, y + h - r)
        canvas.line_to(x, y + r)
        canvas.quadratic_curve_to(x, y, x + r, y)
        canvas.close_path()
        canvas.fill()

        # rings
        canvas.stroke_style = Colors.log_ring
        canvas.line_width = 2
        canvas.begin_path()
        canvas.move_to(x + w * 0.3, y + 4)
        canvas.line_to(x + w * 0.3, y + h - 4)
        canvas.move_to(x + w * 0.6, y + 6)
        canvas.line_to(x + w * 0.6, y + h - 6)
        canvas.stroke()

    def _draw_pothole(self, rect: Rect) -> None:
        canvas = self.canvas
        cx = rect.x + rect.width / 2
        cy = rect.y + rect.height / 2
        rx = rect.width / 2
        ry = rect.height / 2

        canvas.save()
        canvas.translate(cx, cy)
        canvas.scale(rx, ry)
        canvas.begin_path()
        canvas.arc(0, 0, 1, 0, 2 * math.pi)
        canvas.restore()
        canvas.fill_style = Colors.pothole
        canvas.fill()

        canvas.stroke_style = Colors.pothole_ring
        canvas.line_width = 2
        canvas.begin_path()
        canvas.ellipse(cx, cy, rx * 0.9, ry * 0.8, 0, 0, 2 * math.pi)
        canvas.stroke()

    def _draw_game_over(self, view: GameView, status: Terminal) -> None:
        canvas = self.canvas
        cx = view.width / 2
        cy = view.height / 2

        canvas.fill_style = Colors.overlay
        canvas.fill_rect(0, 0, view.width, view.height)

        canvas.fill_style = Colors.overlay_text
        canvas.text_align = "center"
        canvas.font = f"bold 32px {FONT_FAMILY}"
        canvas.fill_text("Game Over", cx, cy - 20)

        canvas.font = f"18px {FONT_FAMILY}"
        canvas.fill_text(status.message, cx, cy + 15)
        canvas.fill_text(f"Final Score: {view.score}", cx, cy + 45)
        canvas.fill_text("Run the cell again to play again.", cx, cy + 70)
        canvas.text_align = "left"
