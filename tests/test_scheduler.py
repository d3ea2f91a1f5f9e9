import threading
import time
import unittest

from threatwire.pipeline import RecurringTask


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestRecurringTask(unittest.TestCase):
    def test_start_runs_immediately(self):
        calls = []
        task = RecurringTask(lambda: calls.append(1) or "done", interval_minutes=60, name="test job")
        task.start()
        try:
            self.assertEqual(calls, [1])
            self.assertEqual(task.last_result, "done")
            self.assertTrue(task.running)
        finally:
            task.stop(timeout=2)
        self.assertFalse(task.running)

    def test_start_without_immediate_run(self):
        calls = []
        task = RecurringTask(lambda: calls.append(1), interval_minutes=60)
        task.start(run_immediately=False)
        task.stop(timeout=2)
        self.assertEqual(calls, [])

    def test_runs_on_interval(self):
        calls = []
        task = RecurringTask(lambda: calls.append(1), interval_minutes=0.001, poll_seconds=0.01)
        task.start()
        try:
            self.assertTrue(wait_for(lambda: len(calls) >= 3))
        finally:
            task.stop(timeout=2)

    def test_failed_run_keeps_schedule(self):
        def boom():
            raise RuntimeError("feed outage")

        task = RecurringTask(boom, interval_minutes=0.001, poll_seconds=0.01)
        task.start()
        try:
            self.assertTrue(wait_for(lambda: task.runs >= 2))
            self.assertIsNone(task.last_result)
        finally:
            task.stop(timeout=2)

    def test_runs_never_overlap(self):
        active = []
        overlaps = []
        lock = threading.Lock()

        def slow():
            with lock:
                active.append(1)
                if len(active) > 1:
                    overlaps.append(len(active))
            time.sleep(0.05)
            with lock:
                active.pop()

        task = RecurringTask(slow, interval_minutes=0.0005, poll_seconds=0.005)
        task.start(run_immediately=False)
        try:
            extra = [threading.Thread(target=task.run_now) for _ in range(3)]
            for t in extra:
                t.start()
            for t in extra:
                t.join()
            self.assertTrue(wait_for(lambda: task.runs >= 5))
        finally:
            task.stop(timeout=2)
        self.assertEqual(overlaps, [])

    def test_double_start_rejected(self):
        task = RecurringTask(lambda: None, interval_minutes=60)
        task.start(run_immediately=False)
        try:
            with self.assertRaises(RuntimeError):
                task.start()
        finally:
            task.stop(timeout=2)

    def test_stop_prevents_further_runs(self):
        calls = []
        task = RecurringTask(lambda: calls.append(1), interval_minutes=0.001, poll_seconds=0.01)
        task.start()
        task.stop(timeout=2)
        count = len(calls)
        time.sleep(0.2)
        self.assertEqual(len(calls), count)

    def test_interval_must_be_positive(self):
        with self.assertRaises(ValueError):
            RecurringTask(lambda: None, interval_minutes=0)


if __name__ == "__main__":
    unittest.main()
