#! /usr/bin/python3
# -*- coding: utf8 -*-
# --------------------------------------------------------------------------------------------------
# pylint: disable=E0602
import unittest
import datetime
# --------------------------------------------------------------------------------------------------
import base
from config import *  # pylint: disable=W0614
import jobtimer
# --------------------------------------------------------------------------------------------------
logger = base.logger

START = datetime.datetime(2026, 1, 5, 7, 0, 0)
# --------------------------------------------------------------------------------------------------
class ActionDummy(object):
    def __init__(self, fail = False):
        self.calls = 0
        self.fail = fail
    def __call__(self):
        self.calls += 1
        if self.fail:
            raise RuntimeError("action failed")
# --------------------------------------------------------------------------------------------------
class Test_JobTimer(base.TestCase):
    def setUp(self):
        super().setUp()
        self.timer = jobtimer.JobTimer(now = lambda: START)

    def tearDown(self):
        self.timer.Terminate()
        self.timer.Join(1.0)
        super().tearDown()

    def test_InvalidExpression(self):
        with self.assertRaises(ValueError):
            self.timer.AddJob('broken', 'every morning', ActionDummy())
        self.assertEqual(self.timer.jobs, [], "Invalid job is not registered.")

    def test_RunPendingJobs(self):
        action = ActionDummy()
        job = self.timer.AddJob('auto-open', '30 7 * * *', action)
        self.assertEqual(job.next_time, datetime.datetime(2026, 1, 5, 7, 30))

        fired = self.timer.RunPendingJobs(datetime.datetime(2026, 1, 5, 7, 29, 59))
        self.assertEqual(fired, [], "Job is not due yet.")
        self.assertEqual(action.calls, 0)

        fired = self.timer.RunPendingJobs(datetime.datetime(2026, 1, 5, 7, 30))
        self.assertEqual(fired, ['auto-open'], "Job is due.")
        self.assertEqual(action.calls, 1)
        self.assertEqual(job.next_time, datetime.datetime(2026, 1, 6, 7, 30), "Next run tomorrow.")

        fired = self.timer.RunPendingJobs(datetime.datetime(2026, 1, 5, 7, 31))
        self.assertEqual(fired, [], "Job runs only once.")

    def test_MissedRunsAreSkipped(self):
        action = ActionDummy()
        job = self.timer.AddJob('often', '*/5 * * * *', action)
        fired = self.timer.RunPendingJobs(datetime.datetime(2026, 1, 5, 7, 31))
        self.assertEqual(fired, ['often'])
        self.assertEqual(action.calls, 1, "Missed runs are not repeated.")
        self.assertEqual(job.next_time, datetime.datetime(2026, 1, 5, 7, 35))

    def test_FailingAction(self):
        failing = ActionDummy(fail = True)
        other = ActionDummy()
        self.timer.AddJob('failing', '0 8 * * *', failing)
        self.timer.AddJob('other', '0 8 * * *', other)
        fired = self.timer.RunPendingJobs(datetime.datetime(2026, 1, 5, 8, 0))
        self.assertEqual(fired, ['failing', 'other'], "Error does not stop other jobs.")
        self.assertEqual(other.calls, 1)

    def test_WaitTime(self):
        self.assertEqual(self.timer.GetWaitTime(START), JOBTIMER_MAX_WAIT, "No jobs, max wait.")
        self.timer.AddJob('auto-close', '0 7 * * *', ActionDummy())
        self.timer.AddJob('soon', '1 7 * * *', ActionDummy())
        self.assertEqual(self.timer.GetWaitTime(datetime.datetime(2026, 1, 5, 7, 0, 30)), 30.0)
        self.assertEqual(
            self.timer.GetWaitTime(datetime.datetime(2026, 1, 5, 7, 2)), 0.0, "Overdue job."
        )

    def test_Timer(self):
        timer = self.timer
        self.assertFalse(timer.IsRunning(), "Timer doesn't start itself.")
        self.assertFalse(timer.ShouldTerminate(), "Termination flag is initially cleared.")
        timer.Start()
        self.assertTrue(timer.IsRunning(), "Timer runs after starting.")
        timer.Terminate()
        self.assertTrue(timer.ShouldTerminate(), "Termination flag is set.")
        self.assertTrue(timer.Join(1.0), "Timer stops in time.")

    def test_TimerRunsDueJob(self):
        times = [START, datetime.datetime(2026, 1, 5, 7, 1)]
        timer = jobtimer.JobTimer(now = lambda: times[0])
        action = ActionDummy()
        timer.AddJob('minute', '1 7 * * *', action)
        times[0] = times[1]
        timer.Start()
        try:
            self.assertTrue(base.WaitFor(lambda: action.calls == 1), "Due job has been run.")
        finally:
            timer.Terminate()
            timer.Join(1.0)
# --------------------------------------------------------------------------------------------------
if __name__ == '__main__':
    unittest.main()
