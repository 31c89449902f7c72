"""Tests for the Q-value store and update rule."""

import unittest

import numpy as np

from dynagrid.qtable import QTable, initialize, td_update
from dynagrid.worlds.grid_env import Action, Cell


class TestQTable(unittest.TestCase):
    """Test initialization and persistent updates."""

    def test_initialize_covers_grid(self):
        table = initialize(3, 4)
        self.assertEqual(len(table), 12)
        for y in range(3):
            for x in range(4):
                self.assertIn(Cell(x, y), table)
                np.testing.assert_array_equal(table[(x, y)], np.zeros(4))

    def test_initialize_rejects_bad_dimensions(self):
        with self.assertRaises(ValueError):
            initialize(0, 4)

    def test_missing_cell_reads_as_zero(self):
        table = QTable()
        np.testing.assert_array_equal(table[(7, 7)], np.zeros(4))
        self.assertEqual(table.max_value((7, 7)), 0.0)

    def test_rows_are_read_only(self):
        table = initialize(2, 2)
        with self.assertRaises(ValueError):
            table[(0, 0)][0] = 1.0

    def test_with_value_returns_new_table(self):
        table = initialize(2, 2)
        updated = table.with_value((1, 0), Action.DOWN, 3.5)
        self.assertEqual(updated.value((1, 0), Action.DOWN), 3.5)
        self.assertEqual(table.value((1, 0), Action.DOWN), 0.0)
        self.assertNotEqual(table, updated)

    def test_with_value_touches_one_entry(self):
        table = QTable({(0, 0): [1.0, 2.0, 3.0, 4.0], (1, 0): [5.0, 6.0, 7.0, 8.0]})
        updated = table.with_value((0, 0), Action.RIGHT, -9.0)
        np.testing.assert_array_equal(updated[(0, 0)], [1.0, -9.0, 3.0, 4.0])
        np.testing.assert_array_equal(updated[(1, 0)], [5.0, 6.0, 7.0, 8.0])

    def test_with_value_on_missing_cell(self):
        updated = QTable().with_value((2, 2), Action.LEFT, 1.0)
        np.testing.assert_array_equal(updated[(2, 2)], [0.0, 0.0, 0.0, 1.0])

    def test_constructor_copies_input(self):
        values = np.array([1.0, 2.0, 3.0, 4.0])
        table = QTable({(0, 0): values})
        values[0] = 100.0
        self.assertEqual(table.value((0, 0), Action.UP), 1.0)

    def test_constructor_rejects_wrong_shape(self):
        with self.assertRaises(ValueError):
            QTable({(0, 0): [1.0, 2.0]})


class TestTDUpdate(unittest.TestCase):
    """Test the one-step Q-learning backup."""

    def test_update_arithmetic(self):
        table = QTable({(0, 0): [0.0, 2.0, 0.0, 0.0], (1, 0): [5.0, 1.0, -3.0, 0.0]})
        update = td_update(table, (0, 0), Action.RIGHT, reward=-1, next_cell=(1, 0),
                           alpha=0.1, gamma=0.9)
        self.assertAlmostEqual(update.old_q, 2.0)
        self.assertAlmostEqual(update.max_next_q, 5.0)
        self.assertAlmostEqual(update.target, 3.5)
        self.assertAlmostEqual(update.error, 1.5)
        self.assertAlmostEqual(update.new_q, 2.15)

    def test_update_does_not_write(self):
        table = initialize(2, 2)
        td_update(table, (0, 0), Action.UP, 10, (0, 0), 0.5, 0.9)
        self.assertEqual(table.value((0, 0), Action.UP), 0.0)

    def test_self_loop_reads_pre_update_values(self):
        table = QTable({(0, 0): [4.0, 0.0, 0.0, 0.0]})
        update = td_update(table, (0, 0), Action.UP, -1, (0, 0), 0.5, 0.9)
        self.assertAlmostEqual(update.max_next_q, 4.0)
        self.assertAlmostEqual(update.new_q, 4.0 + 0.5 * (-1 + 0.9 * 4.0 - 4.0))


if __name__ == "__main__":
    unittest.main()
