import math
import unittest

from lqr_tracker.errors import EmptyPathError, NoPathError
from lqr_tracker.geometry import Pose
from lqr_tracker.path_tracker import PathTracker


def line_path(n, spacing=1.0):
    return [Pose(i * spacing, 0.0, 0.0) for i in range(n)]


class TestSetPath(unittest.TestCase):
    def setUp(self):
        self.tracker = PathTracker(1.0, 0.2, 1.0, 2.0)

    def test_empty_path_rejected(self):
        with self.assertRaises(EmptyPathError):
            self.tracker.set_path([])
        self.assertFalse(self.tracker.has_path)

    def test_empty_path_keeps_previous(self):
        path = line_path(3)
        self.tracker.set_path(path)
        with self.assertRaises(EmptyPathError):
            self.tracker.set_path([])
        self.assertEqual(self.tracker.path, tuple(path))
        self.assertEqual(self.tracker.goal, path[-1])

    def test_new_path_resets_cursor(self):
        self.tracker.set_path(line_path(5))
        self.tracker.prune(Pose(3.0, 0.0, 0.0))
        self.assertEqual(self.tracker.cursor, 3)
        self.tracker.set_path(line_path(5))
        self.assertEqual(self.tracker.cursor, 0)

    def test_prune_without_path(self):
        with self.assertRaises(NoPathError):
            self.tracker.prune(Pose(0.0, 0.0, 0.0))


class TestPrune(unittest.TestCase):
    def setUp(self):
        self.tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        self.tracker.set_path(line_path(11))

    def test_drops_passed_waypoints(self):
        pruned = self.tracker.prune(Pose(5.2, 0.0, 0.0))
        self.assertEqual(pruned.start_index, 5)
        self.assertEqual(len(pruned), 6)
        self.assertEqual(pruned.waypoints[0], Pose(5.0, 0.0, 0.0))

    def test_cursor_never_moves_backward(self):
        self.tracker.prune(Pose(5.2, 0.0, 0.0))
        pruned = self.tracker.prune(Pose(1.0, 0.0, 0.0))
        self.assertEqual(pruned.start_index, 5)

        cursors = []
        for x in [0.0, 2.5, 1.0, 7.3, 4.0, 9.9, 0.0]:
            cursors.append(self.tracker.prune(Pose(x, 0.5, 0.0)).start_index)
        self.assertEqual(cursors, sorted(cursors))

    def test_final_waypoint_never_dropped(self):
        pruned = self.tracker.prune(Pose(50.0, 0.0, 0.0))
        self.assertEqual(len(pruned), 1)
        self.assertEqual(pruned.waypoints[0], Pose(10.0, 0.0, 0.0))

    def test_trailing_waypoint_dropped(self):
        tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        tracker.set_path([Pose(0.0, 0.0), Pose(10.0, 0.0)])
        # First waypoint is behind the agent and outside the trailing radius
        pruned = tracker.prune(Pose(3.0, 1.0, 0.0))
        self.assertEqual(pruned.start_index, 1)

    def test_waypoint_ahead_kept(self):
        tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        tracker.set_path([Pose(0.0, 0.0), Pose(10.0, 0.0)])
        # Same distance, but the agent faces the first waypoint
        pruned = tracker.prune(Pose(3.0, 1.0, math.pi))
        self.assertEqual(pruned.start_index, 0)

    def test_duplicate_waypoints_skipped(self):
        tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        tracker.set_path([Pose(0.0, 0.0), Pose(0.0, 0.0), Pose(1.0, 0.0)])
        pruned = tracker.prune(Pose(0.0, 0.0, 0.0))
        self.assertEqual(pruned.start_index, 1)


class TestLookaheadDistance(unittest.TestCase):
    def test_clamped_to_bounds(self):
        tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        self.assertAlmostEqual(tracker.lookahead_distance(0.0), 0.2)
        self.assertAlmostEqual(tracker.lookahead_distance(0.5), 0.5)
        self.assertAlmostEqual(tracker.lookahead_distance(5.0), 1.0)
        self.assertAlmostEqual(tracker.lookahead_distance(-1.0), 0.2)

    def test_non_decreasing_in_signed_speed(self):
        tracker = PathTracker(1.0, 0.2, 1.0, 2.0)
        speeds = [-2.0, -0.5, 0.0, 0.3, 0.7, 1.5]
        distances = [tracker.lookahead_distance(s) for s in speeds]
        self.assertEqual(distances, sorted(distances))
        # Reversing does not lengthen the lookahead
        self.assertAlmostEqual(tracker.lookahead_distance(-0.7), 0.2)

    def test_always_within_bounds(self):
        tracker = PathTracker(1.5, 0.3, 0.9, 2.0)
        for speed in [-3.0, 0.0, 0.1, 0.25, 0.6, 2.0, 100.0]:
            distance = tracker.lookahead_distance(speed)
            self.assertGreaterEqual(distance, 0.3)
            self.assertLessEqual(distance, 0.9)


class TestLookaheadPoint(unittest.TestCase):
    def setUp(self):
        self.tracker = PathTracker(1.0, 0.2, 1.0, 2.0)

    def lookahead(self, path, pose, distance):
        self.tracker.set_path(path)
        pruned = self.tracker.prune(pose)
        return self.tracker.lookahead_point(distance, pose, pruned)

    def test_interpolates_on_straight_path(self):
        point = self.lookahead(line_path(3), Pose(0.0, 0.0, 0.0), 0.5)
        self.assertAlmostEqual(point.x, 0.5)
        self.assertAlmostEqual(point.y, 0.0)
        self.assertAlmostEqual(point.heading, 0.0)

    def test_walks_around_corner(self):
        path = [Pose(0.0, 0.0), Pose(1.0, 0.0), Pose(1.0, 1.0)]
        point = self.lookahead(path, Pose(0.0, 0.0, 0.0), 1.5)
        self.assertAlmostEqual(point.x, 1.0)
        self.assertAlmostEqual(point.y, 0.5)
        self.assertAlmostEqual(point.heading, math.pi / 2)

    def test_projection_clamped_to_first_segment(self):
        # Agent behind the first waypoint: walk starts at the waypoint itself
        point = self.lookahead(line_path(3), Pose(-1.0, 0.3, 0.0), 0.5)
        self.assertAlmostEqual(point.x, 0.5)
        self.assertAlmostEqual(point.y, 0.0)

    def test_lateral_offset_projected(self):
        point = self.lookahead(line_path(3), Pose(0.4, 0.5, 0.0), 0.3)
        self.assertAlmostEqual(point.x, 0.7)
        self.assertAlmostEqual(point.y, 0.0)

    def test_monotonic_in_distance(self):
        pose = Pose(0.2, 0.1, 0.0)
        self.tracker.set_path(line_path(3))
        pruned = self.tracker.prune(pose)
        xs = [self.tracker.lookahead_point(d, pose, pruned).x for d in [0.2, 0.5, 0.9, 1.3, 1.8, 2.4]]
        self.assertEqual(xs, sorted(xs))
        self.assertAlmostEqual(xs[0], 0.4)
        self.assertAlmostEqual(xs[-1], 2.0)

    def test_remaining_length(self):
        path = [Pose(0.0, 0.0), Pose(1.0, 0.0), Pose(1.0, 1.0)]
        pose = Pose(0.25, 0.2, 0.0)
        self.tracker.set_path(path)
        pruned = self.tracker.prune(pose)
        self.assertAlmostEqual(self.tracker.remaining_length(pose, pruned), 1.75)

    def test_short_path_returns_final_waypoint(self):
        path = line_path(3)
        point = self.lookahead(path, Pose(0.0, 0.0, 0.0), 10.0)
        self.assertEqual(point, path[-1])

    def test_single_waypoint(self):
        point = self.lookahead([Pose(2.0, 3.0, 0.5)], Pose(0.0, 0.0, 0.0), 0.5)
        self.assertEqual(point, Pose(2.0, 3.0, 0.5))

    def test_duplicate_waypoints_ignored(self):
        path = [Pose(0.0, 0.0), Pose(1.0, 0.0), Pose(1.0, 0.0), Pose(2.0, 0.0)]
        point = self.lookahead(path, Pose(0.0, 0.0, 0.0), 1.5)
        self.assertAlmostEqual(point.x, 1.5)
        self.assertAlmostEqual(point.heading, 0.0)


if __name__ == "__main__":
    unittest.main()
