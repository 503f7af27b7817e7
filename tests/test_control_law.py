import unittest

import numpy as np

from lqr_tracker.control_law import ControlVector, evaluate


class TestEvaluate(unittest.TestCase):
    def test_zero_error_gives_zero_command(self):
        K = np.array([[1.3, -0.2, 0.7], [0.4, 2.1, -1.5]])
        command = evaluate(K, np.zeros(3))
        self.assertEqual(command, ControlVector.zero())

    def test_negative_feedback(self):
        K = np.array([[-1.0, 0.0, 0.0], [0.0, 2.0, 1.0]])
        command = evaluate(K, np.array([0.5, 0.1, -0.2]))
        self.assertAlmostEqual(command.v, 0.5)
        self.assertAlmostEqual(command.omega, 0.0)

    def test_no_saturation(self):
        command = evaluate(np.array([[-100.0, 0.0, 0.0], [0.0, 0.0, 0.0]]), np.array([1.0, 0.0, 0.0]))
        self.assertAlmostEqual(command.v, 100.0)


class TestControlVector(unittest.TestCase):
    def test_array_conversion(self):
        command = ControlVector.from_array(np.array([0.3, -0.4]))
        self.assertIsInstance(command.v, float)
        np.testing.assert_array_equal(command.as_array(), [0.3, -0.4])


if __name__ == "__main__":
    unittest.main()
