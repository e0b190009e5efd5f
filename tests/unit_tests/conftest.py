# -*- coding: utf-8 -*-

import pytest

from pledge.promise import JobQueue, set_default_scheduler


@pytest.fixture
def queue(request):
    """Install an empty JobQueue as default scheduler.

    The fixture automatically restores the previous scheduler at the end of
    the test.

    Returns:
        JobQueue: the queue used by all promises created without scheduler.
    """
    job_queue = JobQueue()
    previous = set_default_scheduler(job_queue)

    def restore():
        set_default_scheduler(previous)

    request.addfinalizer(restore)
    return job_queue
