from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import numpy as np
from graphviz import Digraph
from ipycanvas import Canvas
from ipyevents import Event

from road.config import GameConfig
from road.render import Renderer
from road.session import GameSession

logger = logging.getLogger(__name__)


class RoadGame:
    """
    Notebook front end for the road game.

    Show ``game.canvas`` in a cell and call ``game.start()``. Moving the mouse
    over the canvas steers the car; leaving the canvas ends the run.

    Parameters
    ----------
    config: GameConfig | None
        Tuning constants; defaults match the classic game.
    rng_seed: int | None
        Seed for obstacle placement, for reproducible runs.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        rng_seed: Optional[int] = None,
    ) -> None:
        self.session = GameSession(config, rng=np.random.default_rng(rng_seed))
        self.config = self.session.config

        self.width = self.config.canvas_width
        self.height = self.config.canvas_height
        self.canvas: Canvas = Canvas(width=self.width, height=self.height)
        self.canvas.layout.border = "2px solid #444444"
        self.canvas.layout.width = f"{self.width}px"
        self.canvas.layout.height = f"{self.height}px"

        self.renderer = Renderer(self.canvas, road_margin=self.config.road_margin)

        self._frame_task: Optional[asyncio.Task] = None
        self._started_at: Optional[float] = None

        self._bind_events()
        self._draw()

    # ------------------------------------------------------------------ #
    # Input binding
    # ------------------------------------------------------------------ #
    def _bind_events(self) -> None:
        self._event = Event(
            source=self.canvas,
            watched_events=["mousemove", "mouseleave"],
        )
        self._event.on_dom_event(self._handle_dom_event)

    def _handle_dom_event(self, event: Dict[str, Any]) -> None:
        etype = event.get("type")
        if etype == "mousemove":
            x = event.get("relativeX")
            if x is not None:
                self.session.pointer_move(float(x))
        elif etype == "mouseleave":
            self.session.pointer_leave()

    # ------------------------------------------------------------------ #
    # Frame loop
    # ------------------------------------------------------------------ #
    @property
    def running(self) -> bool:
        return self._frame_task is not None and not self._frame_task.done()

    def start(self) -> None:
        if self.running:
            return
        if self._started_at is None:
            self._started_at = time.perf_counter()
        self._frame_task = asyncio.create_task(self._frame_loop())

    def stop(self) -> None:
        if self._frame_task and not self._frame_task.done():
            self._frame_task.cancel()
        self._frame_task = None

    async def _frame_loop(self) -> None:
        try:
            while self._tick(self._now_ms()):
                await asyncio.sleep(self.config.frame_period)
        except asyncio.CancelledError:
            pass
        logger.debug("Frame loop finished after %d frames", self.session.frame_count)

    def _tick(self, timestamp: float) -> bool:
        """Run one frame and draw it. Returns False once the game is over."""
        still_running = self.session.step(timestamp)
        self._draw()
        return still_running

    def _now_ms(self) -> float:
        return (time.perf_counter() - self._started_at) * 1000.0

    def state_diagram(self) -> Digraph:
        """Graph of the game phases, current phase double-circled. Renders inline in Jupyter."""
        return self.session.machine.to_graphviz()

    def _draw(self) -> None:
        self.renderer.draw(self.session.view())
