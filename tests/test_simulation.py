import math
import tempfile
import unittest
from pathlib import Path

import numpy as np

from lqr_tracker.config import OMEGA_MAX, V_MAX
from lqr_tracker.controller import LQRController
from lqr_tracker.data_collector import DataCollector
from lqr_tracker.errors import EmptyPathError
from lqr_tracker.geometry import Pose
from lqr_tracker.paths import circular_arc, lemniscate, straight_line
from lqr_tracker.simulation import Simulator, cross_track_error


class TestCrossTrackError(unittest.TestCase):
    def test_distance_to_polyline(self):
        path_xy = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])
        self.assertAlmostEqual(cross_track_error(Pose(0.5, 0.3), path_xy), 0.3)
        self.assertAlmostEqual(cross_track_error(Pose(1.4, 0.5), path_xy), 0.4)
        self.assertAlmostEqual(cross_track_error(Pose(-3.0, 4.0), path_xy), 5.0)

    def test_single_point_and_duplicates(self):
        self.assertAlmostEqual(cross_track_error(Pose(3.0, 4.0), np.array([[0.0, 0.0]])), 5.0)
        path_xy = np.array([[0.0, 0.0], [0.0, 0.0], [2.0, 0.0]])
        self.assertAlmostEqual(cross_track_error(Pose(1.0, -0.5), path_xy), 0.5)


class TestSimulator(unittest.TestCase):
    def test_straight_line_reaches_goal(self):
        path = straight_line(3.0)
        result = Simulator(LQRController(), max_time=30.0).run(path)

        self.assertTrue(result.goal_reached)
        self.assertLess(result.elapsed_time, 30.0)
        self.assertEqual(result.failed_cycles, 0)
        self.assertLess(result.cross_track_rms, 0.01)
        self.assertEqual(len(result.time), len(result.x))
        self.assertEqual(len(result.lookahead), len(result.time))
        self.assertLess(Pose(result.x[-1], result.y[-1]).distance_to(path[-1]), 0.2)
        self.assertEqual(result.diagnostics["nonconverged_solves"], 0)

    def test_lateral_offset_converges(self):
        path = straight_line(5.0)
        result = Simulator(LQRController(), max_time=40.0).run(path, initial_pose=Pose(0.0, 0.3, 0.0))

        self.assertTrue(result.goal_reached)
        self.assertLess(abs(result.y[-1]), 0.2)
        self.assertLess(result.cross_track[-1], result.cross_track[0])

    def test_arc_reaches_goal(self):
        path = circular_arc(2.0, math.pi / 2)
        result = Simulator(LQRController(), max_time=40.0).run(path)
        self.assertTrue(result.goal_reached)
        self.assertLess(result.max_cross_track, 0.5)

    def test_lemniscate_reaches_goal(self):
        path = lemniscate()
        result = Simulator(LQRController()).run(path)

        self.assertTrue(result.goal_reached)
        self.assertEqual(result.failed_cycles, 0)
        self.assertEqual(result.diagnostics["nonconverged_solves"], 0)

    def test_speed_respects_actuator_limits(self):
        result = Simulator(LQRController(), max_time=10.0).run(straight_line(4.0), initial_pose=Pose(0.0, 1.0, 0.0))
        self.assertTrue(np.all(np.abs(result.speed) <= V_MAX + 1e-12))
        # Commands are unclamped; the simulator clamps before integrating
        self.assertTrue(np.all(np.abs(np.diff(result.heading)) <= OMEGA_MAX * 0.1 + 1e-9))

    def test_time_limit(self):
        result = Simulator(LQRController(), max_time=1.0).run(straight_line(10.0))
        self.assertFalse(result.goal_reached)
        self.assertAlmostEqual(result.elapsed_time, 1.0)
        self.assertEqual(result.summary()["goal_reached"], 0)

    def test_empty_path(self):
        with self.assertRaises(EmptyPathError):
            Simulator(LQRController()).run([])

    def test_summary_includes_diagnostics(self):
        result = Simulator(LQRController(), max_time=30.0).run(straight_line(2.0))
        summary = result.summary()
        for key in ("goal_reached", "elapsed_time", "steps", "cross_track_rms", "cycles", "singular_gains"):
            self.assertIn(key, summary)
        self.assertEqual(summary["singular_gains"], 0)

    def test_records_run_with_data_collector(self):
        with tempfile.TemporaryDirectory() as tmp:
            run_dir = Path(tmp) / "run_sim"
            with DataCollector(run_dir=str(run_dir)) as collector:
                result = Simulator(LQRController(), max_time=30.0, data_collector=collector).run(straight_line(2.0))

            self.assertTrue(result.goal_reached)
            for name in ("path.csv", "trajectory.csv", "controller.csv", "summary.txt"):
                self.assertTrue((run_dir / name).exists(), name)

            trajectory_rows = (run_dir / "trajectory.csv").read_text().strip().splitlines()
            controller_rows = (run_dir / "controller.csv").read_text().strip().splitlines()
            # Header plus one row per cycle in both files
            self.assertEqual(len(trajectory_rows) - 1, len(result.time))
            self.assertEqual(len(controller_rows) - 1, len(result.time))
            self.assertIn("goal_reached: 1", (run_dir / "summary.txt").read_text())


if __name__ == "__main__":
    unittest.main()
