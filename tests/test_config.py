import unittest

import numpy as np

from lqr_tracker import config as cfg
from lqr_tracker.config_model import ControllerConfig


class TestControllerConfig(unittest.TestCase):
    def test_defaults_come_from_config_module(self):
        config = ControllerConfig()
        self.assertEqual(config.cycle_time, cfg.CYCLE_TIME)
        self.assertEqual(config.max_iter, cfg.MAX_ITER)
        np.testing.assert_array_equal(config.Q, np.diag(cfg.Q_DIAG))
        np.testing.assert_array_equal(config.R, np.diag(cfg.R_DIAG))

    def test_diagonals_stored_as_tuples(self):
        config = ControllerConfig(q_diag=[2, 2, 1], r_diag=[0.5, 0.5])
        self.assertEqual(config.q_diag, (2.0, 2.0, 1.0))
        self.assertEqual(config.R.shape, (2, 2))
        hash(config)

    def test_invalid_values_rejected(self):
        invalid = [
            {"cycle_time": 0.0},
            {"min_lookahead_dist": -0.1},
            {"min_lookahead_dist": 1.0, "max_lookahead_dist": 0.5},
            {"lookahead_time_gain": -1.0},
            {"q_diag": (1.0, 1.0)},
            {"q_diag": (1.0, -1.0, 1.0)},
            {"r_diag": (1.0, 0.0)},
            {"r_diag": (1.0, float("nan"))},
            {"max_iter": -1},
            {"eps_iter": 0.0},
            {"goal_dist_tol": 0.0},
            {"goal_heading_tol": -0.1},
            {"max_trailing_radius": 0.0},
            {"gain_condition_limit": 1.0},
        ]
        for options in invalid:
            with self.subTest(options=options):
                with self.assertRaises(ValueError):
                    ControllerConfig(**options)

    def test_zero_iterations_allowed(self):
        self.assertEqual(ControllerConfig(max_iter=0).max_iter, 0)

    def test_from_dict(self):
        config = ControllerConfig.from_dict({"min_lookahead_dist": 0.2, "max_lookahead_dist": 1.0})
        self.assertEqual(config.min_lookahead_dist, 0.2)
        self.assertEqual(config.max_lookahead_dist, 1.0)

    def test_from_dict_rejects_unknown_options(self):
        with self.assertRaises(ValueError) as ctx:
            ControllerConfig.from_dict({"lookahead": 1.0})
        self.assertIn("lookahead", str(ctx.exception))

    def test_to_dict_round_trip(self):
        config = ControllerConfig(goal_dist_tol=0.3)
        self.assertEqual(ControllerConfig.from_dict(config.to_dict()), config)


if __name__ == "__main__":
    unittest.main()
