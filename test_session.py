"""Tests for GameSession: the per-frame loop and its end conditions."""

import unittest
from dataclasses import replace

import numpy as np

from road.config import GameConfig
from road.entities.obstacle import Obstacle, ObstacleKind
from road.internal.math import Vector2D
from road.session import EndReason, GamePhase, GameSession, Running, Terminal

FRAME_MS = 1000 / 60


def make_session(seed=0, **changes):
    return GameSession(replace(GameConfig(), **changes), rng=np.random.default_rng(seed))


def no_spawn_session(**changes):
    return make_session(spawn_interval_ms=1e12, **changes)


def put_obstacle(session, x, y, kind=ObstacleKind.POTHOLE, size=(50, 30)):
    obstacle = Obstacle(kind, Vector2D(x, y), Vector2D(*size))
    session.obstacles.add(obstacle)
    return obstacle


class TestInitialState(unittest.TestCase):

    def test_starts_running(self):
        session = make_session()
        self.assertTrue(session.running)
        self.assertEqual(session.status, Running())
        self.assertTrue(session.machine.is_state(GamePhase.RUNNING))
        self.assertEqual(session.score, 0)
        self.assertEqual(session.speed, 4.0)
        self.assertEqual(session.last_spawn_time, 0)
        self.assertIsNone(session.last_timestamp)
        self.assertEqual(len(session.obstacles), 0)

    def test_player_placement(self):
        player = make_session().player
        self.assertEqual(player.position.x, 180)
        self.assertEqual(player.position.y, 490)
        self.assertEqual(player.target_x, 180)


class TestPlayerControl(unittest.TestCase):

    def test_pointer_sets_centered_target(self):
        session = make_session()
        session.pointer_move(250)
        self.assertEqual(session.player.target_x, 230)

    def test_smoothing_step(self):
        session = no_spawn_session()
        session.pointer_move(250)
        session.step(FRAME_MS)
        self.assertAlmostEqual(session.player.position.x, 180 + (230 - 180) * 0.2)

    def test_converges_towards_target(self):
        session = no_spawn_session()
        session.pointer_move(120)  # target 100
        for i in range(1, 200):
            self.assertTrue(session.step(i * FRAME_MS))
        self.assertAlmostEqual(session.player.position.x, 100, places=3)


class TestScenarios(unittest.TestCase):

    def test_idle_run_keeps_running(self):
        """Steady input and no obstacle near the car keeps score at zero."""
        session = make_session(seed=9)
        session.pointer_move(200)
        for i in range(1, 111):
            self.assertTrue(session.step(i * FRAME_MS))
        self.assertTrue(session.running)
        self.assertEqual(session.score, 0)
        self.assertEqual(session.frame_count, 110)
        self.assertEqual(len(session.obstacles), 1)

    def test_obstacle_on_player_ends_game(self):
        session = no_spawn_session()
        player = session.player
        put_obstacle(
            session, player.position.x, player.position.y,
            kind=ObstacleKind.LOG, size=(player.size.x, player.size.y)
        )
        self.assertFalse(session.step(FRAME_MS))
        self.assertEqual(session.status, Terminal(EndReason.HIT_OBSTACLE))
        self.assertEqual(session.status.message, "You hit an obstacle!")

    def test_barrier_hit_clamps_player(self):
        session = no_spawn_session()
        session.pointer_move(session.config.canvas_width + 500)
        self.assertFalse(session.step(FRAME_MS))
        self.assertEqual(session.status, Terminal(EndReason.HIT_BARRIER))
        self.assertEqual(session.status.message, "You hit the barrier!")
        self.assertEqual(session.player.position.x, session.config.player_right_limit)

    def test_left_barrier(self):
        session = no_spawn_session()
        session.pointer_move(-400)
        session.step(FRAME_MS)
        self.assertEqual(session.status, Terminal(EndReason.HIT_BARRIER))
        self.assertEqual(session.player.position.x, session.config.player_left_limit)

    def test_barrier_frame_skips_rest_of_frame(self):
        session = make_session()
        passing = put_obstacle(session, 90, 599)
        session.pointer_move(1000)
        session.step(5000)
        self.assertEqual(passing.position.y, 599)
        self.assertEqual(session.score, 0)
        self.assertEqual(len(session.obstacles), 1)

    def test_pointer_leave_ends_immediately(self):
        session = make_session()
        self.assertTrue(session.pointer_leave())
        self.assertFalse(session.running)
        self.assertEqual(session.status, Terminal(EndReason.LEFT_ROAD))
        self.assertEqual(session.status.message, "You left the road!")

    def test_first_end_reason_wins(self):
        session = make_session()
        session.pointer_leave()
        self.assertFalse(session.end(EndReason.HIT_OBSTACLE))
        self.assertFalse(session.pointer_leave())
        self.assertEqual(session.status.reason, EndReason.LEFT_ROAD)


class TestScoring(unittest.TestCase):

    def test_score_and_speed_on_pass(self):
        session = no_spawn_session()
        obstacle = put_obstacle(session, 80, 597)
        session.step(FRAME_MS)  # 601
        self.assertTrue(obstacle.has_scored)
        self.assertEqual(session.score, 1)
        self.assertAlmostEqual(session.speed, 4.2)

        session.step(2 * FRAME_MS)
        self.assertEqual(session.score, 1)
        self.assertAlmostEqual(session.speed, 4.2)

    def test_pass_speeds_up_later_obstacles_same_frame(self):
        """Obstacles after a passing one in spawn order move at the raised speed."""
        session = no_spawn_session()
        put_obstacle(session, 80, 597)
        younger = put_obstacle(session, 80, 100)
        session.step(16)
        self.assertEqual(session.score, 1)
        self.assertAlmostEqual(younger.position.y, 104.2)

    def test_pruned_after_margin(self):
        session = no_spawn_session()
        put_obstacle(session, 80, 597)
        frame = 1
        while len(session.obstacles):
            session.step(frame * FRAME_MS)
            frame += 1
            self.assertLess(frame, 100)
        self.assertEqual(session.score, 1)

    def test_score_and_speed_track_each_pass(self):
        """Score rises by one and speed by the increment per passed obstacle."""
        session = no_spawn_session()
        for y in (590, 560, 530):
            put_obstacle(session, 80, y)
        last_score, last_speed = 0, session.speed
        for i in range(1, 40):
            session.step(i * FRAME_MS)
            gained = session.score - last_score
            self.assertIn(gained, (0, 1))
            self.assertAlmostEqual(session.speed - last_speed, gained * 0.2)
            last_score, last_speed = session.score, session.speed
        self.assertEqual(session.score, 3)
        self.assertAlmostEqual(session.speed, 4.6)

    def test_long_run_scores(self):
        session = make_session(seed=1)
        # The car stays centred, so an obstacle may end the run early
        for i in range(1, 2000):
            before = (session.score, session.speed)
            if not session.step(i * FRAME_MS):
                break
            self.assertGreaterEqual(session.score, before[0])
            self.assertGreaterEqual(session.speed, before[1])
        self.assertTrue(
            session.score > 0
            or session.status == Terminal(EndReason.HIT_OBSTACLE)
        )


class TestTerminalFreeze(unittest.TestCase):

    def test_nothing_changes_after_end(self):
        session = make_session(seed=4)
        for i in range(1, 150):
            session.step(i * FRAME_MS)
        put_obstacle(session, 80, 300)
        session.pointer_leave()

        snapshot = session.view()
        session.pointer_move(90)
        for i in range(150, 400):
            self.assertFalse(session.step(i * FRAME_MS))
        self.assertEqual(session.view(), snapshot)
        self.assertEqual(session.player.target_x, 180)


class TestFrameNormalized(unittest.TestCase):

    def test_first_frame_is_unscaled(self):
        session = no_spawn_session(frame_normalized=True)
        obstacle = put_obstacle(session, 80, 0)
        session.step(50)
        self.assertAlmostEqual(obstacle.position.y, 4.0)

    def test_motion_scales_with_elapsed_time(self):
        session = no_spawn_session(frame_normalized=True)
        obstacle = put_obstacle(session, 80, 0)
        session.pointer_move(250)
        session.step(10)
        x_after_first = session.player.position.x
        session.step(10 + 2 * session.config.reference_frame_ms)
        self.assertAlmostEqual(obstacle.position.y, 12.0)
        factor = 1 - 0.8 ** 2
        self.assertAlmostEqual(
            session.player.position.x,
            x_after_first + (230 - x_after_first) * factor
        )

    def test_first_frame_at_time_zero(self):
        """A first frame stamped 0 still counts as the previous frame."""
        session = no_spawn_session(frame_normalized=True)
        obstacle = put_obstacle(session, 80, 0)
        session.step(0.0)
        self.assertAlmostEqual(obstacle.position.y, 4.0)
        session.step(2 * session.config.reference_frame_ms)
        self.assertAlmostEqual(obstacle.position.y, 12.0)

    def test_frame_coupled_by_default(self):
        session = no_spawn_session()
        obstacle = put_obstacle(session, 80, 0)
        session.step(10)
        session.step(500)
        self.assertAlmostEqual(obstacle.position.y, 8.0)


class TestView(unittest.TestCase):

    def test_view_snapshot(self):
        session = no_spawn_session()
        obstacle = put_obstacle(session, 100, 40, kind=ObstacleKind.LOG, size=(90, 24))
        view = session.view()
        self.assertTrue(view.running)
        self.assertEqual(view.width, 400)
        self.assertEqual(view.height, 600)
        self.assertEqual(view.player, session.player.bounds())
        self.assertEqual(len(view.obstacles), 1)
        self.assertEqual(view.obstacles[0].rect, obstacle.bounds())
        self.assertEqual(view.obstacles[0].kind, ObstacleKind.LOG)

        obstacle.position.y = 300
        self.assertEqual(view.obstacles[0].rect.y, 40)

    def test_terminal_view(self):
        session = make_session()
        session.pointer_leave()
        view = session.view()
        self.assertFalse(view.running)
        self.assertEqual(view.status, Terminal(EndReason.LEFT_ROAD))


if __name__ == "__main__":
    unittest.main()
