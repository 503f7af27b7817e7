import math
import unittest

from lqr_tracker.geometry import Pose, wrap_angle


class TestWrapAngle(unittest.TestCase):
    def test_in_range_unchanged(self):
        self.assertAlmostEqual(wrap_angle(0.5), 0.5)
        self.assertAlmostEqual(wrap_angle(-2.0), -2.0)

    def test_wraps_multiple_turns(self):
        self.assertAlmostEqual(wrap_angle(0.5 + 4.0 * math.pi), 0.5)
        self.assertAlmostEqual(wrap_angle(-0.5 - 6.0 * math.pi), -0.5)

    def test_minus_pi_maps_to_pi(self):
        self.assertAlmostEqual(wrap_angle(-math.pi), math.pi)
        self.assertAlmostEqual(wrap_angle(3.0 * math.pi), math.pi)


class TestPose(unittest.TestCase):
    def test_distance(self):
        self.assertAlmostEqual(Pose(0.0, 0.0).distance_to(Pose(3.0, 4.0)), 5.0)

    def test_immutable(self):
        pose = Pose(1.0, 2.0, 0.3)
        with self.assertRaises(AttributeError):
            pose.x = 5.0


if __name__ == "__main__":
    unittest.main()
