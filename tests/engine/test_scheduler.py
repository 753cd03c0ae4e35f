import unittest

from ludo_master.scheduler import ManualScheduler


class TestManualScheduler(unittest.TestCase):
    def setUp(self):
        self.scheduler = ManualScheduler()
        self.calls = []

    def test_runs_in_due_order(self):
        self.scheduler.call_later(2.0, lambda: self.calls.append("late"))
        self.scheduler.call_later(1.0, lambda: self.calls.append("early"))
        self.assertEqual(self.scheduler.advance(5.0), 2)
        self.assertEqual(self.calls, ["early", "late"])
        self.assertEqual(self.scheduler.now, 5.0)

    def test_cancelled_tasks_never_run(self):
        task = self.scheduler.call_later(1.0, lambda: self.calls.append("x"))
        task.cancel()
        self.assertEqual(self.scheduler.pending, 0)
        self.assertIsNone(self.scheduler.next_delay())
        self.assertFalse(self.scheduler.run_next())
        self.assertEqual(self.calls, [])

    def test_callbacks_can_schedule_more_work(self):
        def first():
            self.calls.append("first")
            self.scheduler.call_later(1.0, lambda: self.calls.append("second"))

        self.scheduler.call_later(1.0, first)
        self.assertEqual(self.scheduler.run_until_idle(), 2)
        self.assertEqual(self.calls, ["first", "second"])
        self.assertEqual(self.scheduler.now, 2.0)


if __name__ == "__main__":
    unittest.main()
