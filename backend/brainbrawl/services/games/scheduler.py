import itertools
import logging
import threading
from typing import Callable, Dict, Hashable


class StageScheduler:
    """Cancellable one-shot timers keyed by purpose.

    - Scheduling a key that is already pending replaces it; the older
      worker wakes up, sees its token is stale and does nothing
    - cancel()/cancel_all() invalidate pending tokens the same way
    - Callbacks still re-check match state themselves; this only guarantees
      a superseded timer never fires
    """

    def __init__(self, start_background_task: Callable, sleep: Callable[[float], None], logger=None):
        self._start = start_background_task
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)
        self._tokens: Dict[Hashable, int] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def schedule(self, key: Hashable, delay: float, callback: Callable, *args) -> int:
        token = next(self._counter)
        with self._lock:
            self._tokens[key] = token
        self._logger.debug(f"[timer-set] key={key} delay={delay:.2f}s token={token}")
        self._start(self._worker, key, token, delay, callback, args)
        return token

    def cancel(self, key: Hashable) -> None:
        with self._lock:
            self._tokens.pop(key, None)

    def cancel_all(self) -> None:
        with self._lock:
            self._tokens.clear()

    def _worker(self, key, token, delay, callback, args):
        if delay > 0:
            self._sleep(delay)
        with self._lock:
            if self._tokens.get(key) != token:
                self._logger.debug(f"[timer-abort] key={key} token={token} superseded")
                return
            del self._tokens[key]
        self._logger.debug(f"[timer-fire] key={key} token={token}")
        try:
            callback(*args)
        except Exception:
            self._logger.exception(f"[timer-error] key={key}")
