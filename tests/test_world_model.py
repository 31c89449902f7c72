"""Tests for the forward model."""

import random
import unittest
from collections import Counter

from dynagrid.worlds.grid_env import Action, Cell
from dynagrid.worlds.world_model import ForwardModel, ModelEntry, ModelKey


class TestForwardModel(unittest.TestCase):
    """Test recording and sampling of observed transitions."""

    def setUp(self):
        self.model = ForwardModel()

    def test_empty(self):
        self.assertEqual(len(self.model), 0)
        self.assertIsNone(self.model.get((0, 0), Action.UP))

    def test_with_entry_records_outcome(self):
        model = self.model.with_entry((0, 0), Action.RIGHT, -1, (1, 0))
        self.assertEqual(model.get((0, 0), Action.RIGHT), ModelEntry(-1.0, Cell(1, 0)))
        self.assertIn(ModelKey(Cell(0, 0), Action.RIGHT), model)

    def test_with_entry_leaves_original_untouched(self):
        model = self.model.with_entry((0, 0), Action.RIGHT, -1, (1, 0))
        self.assertEqual(len(self.model), 0)
        self.assertEqual(len(model), 1)

    def test_last_write_wins(self):
        model = self.model.with_entry((0, 0), Action.UP, -1, (0, 0))
        model = model.with_entry((0, 0), Action.UP, 100, (0, 1))
        self.assertEqual(len(model), 1)
        self.assertEqual(model.get((0, 0), Action.UP), ModelEntry(100.0, Cell(0, 1)))

    def test_records_wall_bumps(self):
        model = self.model.with_entry((0, 0), Action.LEFT, -1, (0, 0))
        self.assertEqual(model.get((0, 0), Action.LEFT).next_cell, Cell(0, 0))

    def test_keys_in_first_observed_order(self):
        model = self.model.with_entry((1, 0), Action.DOWN, -1, (1, 1))
        model = model.with_entry((0, 0), Action.UP, -1, (0, 0))
        model = model.with_entry((1, 0), Action.DOWN, -1, (1, 1))
        self.assertEqual(model.keys(), [
            ModelKey(Cell(1, 0), Action.DOWN),
            ModelKey(Cell(0, 0), Action.UP),
        ])

    def test_sample_is_uniform_over_keys(self):
        """Repeated writes to one key do not raise its sampling weight."""
        model = self.model
        for _ in range(50):
            model = model.with_entry((0, 0), Action.UP, -1, (0, 0))
        model = model.with_entry((1, 1), Action.DOWN, -1, (1, 2))

        rng = random.Random(3)
        counts = Counter(model.sample(rng) for _ in range(10000))
        self.assertEqual(len(counts), 2)
        for count in counts.values():
            self.assertAlmostEqual(count / 10000, 0.5, delta=0.03)

    def test_sample_empty_raises(self):
        with self.assertRaises(IndexError):
            self.model.sample(random.Random(0))

    def test_equality(self):
        a = self.model.with_entry((0, 0), Action.UP, -1, (0, 0))
        b = ForwardModel().with_entry((0, 0), Action.UP, -1, (0, 0))
        self.assertEqual(a, b)

    def test_summary_returns_string(self):
        model = self.model.with_entry((0, 0), Action.UP, -1, (0, 0))
        summary = model.summary()
        self.assertIsInstance(summary, str)
        self.assertIn("Forward Model", summary)
        self.assertIn("UP", summary)


if __name__ == "__main__":
    unittest.main()
