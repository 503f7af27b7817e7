import math
import unittest

from lqr_tracker.config import OMEGA_MAX, V_MAX
from lqr_tracker.geometry import Pose
from lqr_tracker.model import clamp_command, step_pose


class TestStepPose(unittest.TestCase):
    def test_straight(self):
        pose = step_pose(Pose(1.0, 2.0, math.pi / 2), 0.5, 0.0, 2.0)
        self.assertAlmostEqual(pose.x, 1.0)
        self.assertAlmostEqual(pose.y, 3.0)
        self.assertAlmostEqual(pose.heading, math.pi / 2)

    def test_quarter_turn(self):
        pose = step_pose(Pose(0.0, 0.0, 0.0), 1.0, math.pi / 2, 1.0)
        radius = 2.0 / math.pi
        self.assertAlmostEqual(pose.x, radius)
        self.assertAlmostEqual(pose.y, radius)
        self.assertAlmostEqual(pose.heading, math.pi / 2)

    def test_turn_in_place(self):
        pose = step_pose(Pose(1.0, 1.0, 3.0), 0.0, 1.0, 0.5)
        self.assertAlmostEqual(pose.x, 1.0)
        self.assertAlmostEqual(pose.y, 1.0)
        # Heading wrapped past pi
        self.assertAlmostEqual(pose.heading, 3.5 - 2.0 * math.pi)


class TestClampCommand(unittest.TestCase):
    def test_within_limits_unchanged(self):
        self.assertEqual(clamp_command(0.1, -0.2), (0.1, -0.2))

    def test_saturates(self):
        self.assertEqual(clamp_command(10.0, -10.0), (V_MAX, -OMEGA_MAX))
        self.assertEqual(clamp_command(-10.0, 10.0), (-V_MAX, OMEGA_MAX))


if __name__ == "__main__":
    unittest.main()
