import logging

from brainbrawl.services.games.scheduler import StageScheduler


class DeferredTasks:
    """Background task stand-in: workers run when the test calls run()."""

    def __init__(self):
        self.tasks = []

    def __call__(self, fn, *args):
        self.tasks.append((fn, args))

    def run(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


def _scheduler(logger=None):
    tasks = DeferredTasks()
    slept = []
    return StageScheduler(tasks, slept.append, logger), tasks, slept


def test_timer_fires_after_its_delay():
    scheduler, tasks, slept = _scheduler()
    fired = []
    scheduler.schedule('round_end', 2.5, fired.append, 'done')
    assert fired == []
    tasks.run()
    assert fired == ['done']
    assert slept == [2.5]


def test_zero_delay_does_not_sleep():
    scheduler, tasks, slept = _scheduler()
    fired = []
    scheduler.schedule('advance', 0, fired.append, 1)
    tasks.run()
    assert fired == [1]
    assert slept == []


def test_rescheduling_a_key_replaces_the_pending_timer():
    scheduler, tasks, _ = _scheduler()
    fired = []
    first = scheduler.schedule('k', 1, fired.append, 1)
    second = scheduler.schedule('k', 1, fired.append, 2)
    assert first != second
    tasks.run()
    assert fired == [2]


def test_cancel_only_touches_its_key():
    scheduler, tasks, _ = _scheduler()
    fired = []
    scheduler.schedule('splash', 1, fired.append, 'splash')
    scheduler.schedule(('cpu_answer', 'cpu_1'), 1, fired.append, 'cpu')
    scheduler.cancel('splash')
    scheduler.cancel('never-scheduled')
    tasks.run()
    assert fired == ['cpu']


def test_cancel_all():
    scheduler, tasks, _ = _scheduler()
    fired = []
    scheduler.schedule('round_end', 1, fired.append, 1)
    scheduler.schedule(('cpu_blitz', 'team_1'), 1, fired.append, 2)
    scheduler.cancel_all()
    tasks.run()
    assert fired == []


def test_timer_fires_once():
    scheduler, tasks, _ = _scheduler()
    fired = []
    scheduler.schedule('k', 1, fired.append, 1)
    worker, args = tasks.tasks[0]
    tasks.run()
    worker(*args)
    assert fired == [1]


def test_failing_callback_is_logged_and_others_still_fire(caplog):
    scheduler, tasks, _ = _scheduler(logging.getLogger('brainbrawl.tests.scheduler'))
    fired = []

    def boom():
        raise RuntimeError('kaput')

    scheduler.schedule('boom', 1, boom)
    scheduler.schedule('after', 1, fired.append, 'after')
    with caplog.at_level(logging.ERROR):
        tasks.run()
    assert '[timer-error] key=boom' in caplog.text
    assert fired == ['after']
