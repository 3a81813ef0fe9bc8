# infrastructure/dispatch/thread_dispatch_scheduler.py
from __future__ import annotations

import threading
from concurrent.futures import Future
from threading import Lock
from typing import Callable, Dict, Optional

from application.ports.dispatch_scheduler import DispatchSchedulerPort


class ThreadDispatchScheduler(DispatchSchedulerPort):
    """
    One daemon thread per dispatch, no pool. A Future is kept per dispatch id
    so callers can wait on it.
    """

    def __init__(self, name_prefix: str = "dispatch") -> None:
        self._name_prefix = name_prefix
        self._lock = Lock()
        self._futures: Dict[str, Future] = {}

    def submit(self, dispatch_id: str, task: Callable[[], None]) -> Future:
        future: Future = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(task())
            except BaseException as e:
                future.set_exception(e)

        with self._lock:
            self._futures[dispatch_id] = future
        thread = threading.Thread(
            target=run,
            name=f"{self._name_prefix}-{dispatch_id[:8]}",
            daemon=True,
        )
        thread.start()
        return future

    def wait(self, dispatch_id: str, timeout_sec: float) -> bool:
        future = self.get_future(dispatch_id)
        if future is None:
            return False
        try:
            future.result(timeout=timeout_sec)
        except Exception:
            return future.done()
        return True

    def get_future(self, dispatch_id: str) -> Optional[Future]:
        with self._lock:
            return self._futures.get(dispatch_id)

    def forget(self, dispatch_id: str) -> None:
        with self._lock:
            self._futures.pop(dispatch_id, None)
