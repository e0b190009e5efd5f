# -*- coding: utf-8 -*-

import asyncio
import logging
import threading

import pytest

from pledge.promise import scheduler as scheduler_module
from pledge.promise import (Deferred, JobQueue, LoopScheduler, Promise,
                            Scheduler, TimeoutError, get_default_scheduler,
                            set_default_scheduler)


class TestJobQueue(object):

    def test_jobs_are_not_executed_on_enqueue(self):
        calls = []
        q = JobQueue()

        q.enqueue(calls.append, 1)
        assert calls == []
        assert len(q) == 1

    def test_fifo_order(self):
        calls = []
        q = JobQueue()

        for i in range(10):
            q.enqueue(calls.append, i)
        assert q.run() == 10
        assert calls == list(range(10))
        assert len(q) == 0

    def test_run_once(self):
        calls = []
        q = JobQueue()

        assert not q.run_once()
        q.enqueue(calls.append, 'a')
        q.enqueue(calls.append, 'b')
        assert q.run_once()
        assert calls == ['a']

    def test_jobs_added_while_running(self):
        """Jobs submitted by a running job are executed after the others."""
        calls = []
        q = JobQueue()

        def job():
            calls.append('job')
            q.enqueue(calls.append, 'nested')

        q.enqueue(job)
        q.enqueue(calls.append, 'other')
        assert q.run() == 3
        assert calls == ['job', 'other', 'nested']

    def test_failing_job_is_logged(self, caplog):
        """A job raising an exception doesn't stop the queue."""
        calls = []
        q = JobQueue()

        def failing_job():
            raise ValueError('boom')

        q.enqueue(failing_job)
        q.enqueue(calls.append, 'after')
        with caplog.at_level(logging.ERROR):
            q.run()
        assert calls == ['after']
        assert 'failing_job' in caplog.text
        assert 'boom' in caplog.text

    def test_run_until_settled_other_thread(self):
        q = JobQueue()
        df = Deferred(scheduler=q)
        p = df.promise.then(lambda value: value + 1)

        timer = threading.Timer(0.01, df.resolve, args=[41])
        timer.start()
        try:
            assert q.run_until_settled(p, 5) is p
        finally:
            timer.join()
        assert p.result == 42

    def test_run_until_settled_without_callback(self):
        """The promise settled without any pending callback is detected."""
        q = JobQueue()
        df = Deferred(scheduler=q)

        timer = threading.Timer(0.01, df.reject, args=['reason'])
        timer.start()
        try:
            q.run_until_settled(df.promise, 5)
        finally:
            timer.join()
        assert df.promise.state == Promise.REJECTED

    def test_run_until_settled_timeout(self):
        q = JobQueue()
        df = Deferred(scheduler=q)

        with pytest.raises(TimeoutError):
            q.run_until_settled(df.promise, 0.01)

    def test_run_until_settled_uses_monotonic_clock(self, monkeypatch):
        """The timeout is measured with a clock unaffected by system time
        changes."""

        class FakeClock(object):
            def __init__(self):
                self.now = 100.0

            def monotonic(self):
                self.now += 10
                return self.now

        monkeypatch.setattr(scheduler_module, 'time', FakeClock())
        q = JobQueue()
        df = Deferred(scheduler=q)

        with pytest.raises(TimeoutError):
            q.run_until_settled(df.promise, 5)

    def test_run_until_settled_other_scheduler(self, queue):
        """A promise run by another scheduler is refused."""
        q = JobQueue()
        df = Deferred()

        with pytest.raises(ValueError):
            q.run_until_settled(df.promise)
        assert len(q) == 0


class TestLoopScheduler(object):

    def test_jobs_run_by_asyncio_loop(self):
        loop = asyncio.new_event_loop()
        calls = []

        async def run_a_few_iterations():
            for _ in range(5):
                await asyncio.sleep(0)

        try:
            scheduler = LoopScheduler(loop)
            p = Promise.resolve(2, scheduler=scheduler)
            p2 = p.then(lambda v: v * 3)
            p2.then(calls.append)
            assert calls == []

            loop.run_until_complete(run_a_few_iterations())
        finally:
            loop.close()

        assert p2.result == 6
        assert calls == [6]


class TestDefaultScheduler(object):

    def test_set_default_scheduler(self):
        q = JobQueue()
        previous = set_default_scheduler(q)
        try:
            assert get_default_scheduler() is q
            calls = []
            Promise.resolve(1).then(calls.append)
            q.run()
            assert calls == [1]
        finally:
            assert set_default_scheduler(previous) is q

    def test_scheduler_is_abstract(self):
        with pytest.raises(TypeError):
            Scheduler()

    def test_custom_scheduler(self):
        """Any Scheduler implementation can be injected."""
        class ListScheduler(Scheduler):
            def __init__(self):
                self.jobs = []

            def enqueue(self, job, *args):
                self.jobs.append((job, args))

        scheduler = ListScheduler()
        p = Promise.resolve('v', scheduler=scheduler).then(str.upper)
        assert len(scheduler.jobs) == 1

        job, args = scheduler.jobs.pop()
        job(*args)
        assert p.result == 'V'
