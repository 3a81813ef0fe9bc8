# application/ports/dispatch_scheduler.py
from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Callable, Optional


class DispatchSchedulerPort(ABC):
    @abstractmethod
    def submit(self, dispatch_id: str, task: Callable[[], None]) -> Future:
        ...

    @abstractmethod
    def wait(self, dispatch_id: str, timeout_sec: float) -> bool:
        ...

    @abstractmethod
    def get_future(self, dispatch_id: str) -> Optional[Future]:
        ...

    @abstractmethod
    def forget(self, dispatch_id: str) -> None:
        """Drop the bookkeeping for a finished dispatch."""
        ...
