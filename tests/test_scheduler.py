"""Tests for the auto-run driver."""

import threading
import unittest

from dynagrid.scheduler import AutoRunner
from dynagrid.session import Session
from dynagrid.worlds.grid_env import Grid


class TestAutoRunner(unittest.TestCase):

    def test_calls_callback_until_stopped(self):
        done = threading.Event()
        calls = []

        def tick():
            calls.append(1)
            if len(calls) >= 5:
                done.set()

        runner = AutoRunner(tick, interval=0.001)
        runner.start()
        self.assertTrue(done.wait(timeout=5.0))
        runner.stop(timeout=5.0)

        self.assertFalse(runner.is_running)
        count = len(calls)
        self.assertGreaterEqual(count, 5)
        self.assertEqual(runner.ticks, count)
        # No further calls once stopped
        threading.Event().wait(0.05)
        self.assertEqual(len(calls), count)

    def test_drives_a_session(self):
        grid = Grid(rows=1, cols=2, start=(0, 0), goal=(1, 0))
        session = Session(grid, seed=1)
        done = threading.Event()

        def tick():
            session.step()
            if session.episodes_completed >= 3:
                done.set()

        runner = AutoRunner(tick, interval=0.0)
        runner.start()
        finished = done.wait(timeout=5.0)
        runner.stop(timeout=5.0)

        self.assertTrue(finished)
        self.assertGreaterEqual(len(session.history), 3)

    def test_start_twice_keeps_one_thread(self):
        runner = AutoRunner(lambda: None, interval=0.01)
        runner.start()
        thread = runner._thread
        runner.start()
        self.assertIs(runner._thread, thread)
        runner.stop(timeout=5.0)

    def test_restart_after_timed_out_stop_never_overlaps(self):
        lock = threading.Lock()
        entered = threading.Semaphore(0)
        active = [0]
        peak = [0]

        def slow_tick():
            with lock:
                active[0] += 1
                peak[0] = max(peak[0], active[0])
            entered.release()
            threading.Event().wait(0.3)
            with lock:
                active[0] -= 1

        runner = AutoRunner(slow_tick, interval=0.0)
        runner.start()
        self.assertTrue(entered.acquire(timeout=5.0))
        runner.stop(timeout=0.01)
        # The tick is still sleeping, so the old thread is kept
        self.assertTrue(runner.is_running)
        self.assertIsNotNone(runner._thread)

        runner.start()
        self.assertTrue(entered.acquire(timeout=5.0))
        runner.stop(timeout=5.0)

        self.assertFalse(runner.is_running)
        self.assertEqual(peak[0], 1)

    def test_restart_from_callback_is_refused(self):
        errors = []
        done = threading.Event()

        def tick():
            runner.stop()
            try:
                runner.start()
            except RuntimeError as exc:
                errors.append(exc)
            done.set()

        runner = AutoRunner(tick, interval=0.0)
        runner.start()
        self.assertTrue(done.wait(timeout=5.0))
        runner.stop(timeout=5.0)
        self.assertEqual(len(errors), 1)
        self.assertFalse(runner.is_running)

    def test_stop_without_start(self):
        runner = AutoRunner(lambda: None)
        runner.stop()
        self.assertFalse(runner.is_running)

    def test_interval_validation(self):
        with self.assertRaises(ValueError):
            AutoRunner(lambda: None, interval=-1)
        runner = AutoRunner(lambda: None)
        runner.interval = 0.5
        self.assertEqual(runner.interval, 0.5)
        with self.assertRaises(ValueError):
            runner.interval = -0.1


if __name__ == "__main__":
    unittest.main()
