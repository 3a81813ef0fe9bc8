# application/dispatcher.py
from __future__ import annotations

import itertools
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from application.ports.dispatch_scheduler import DispatchSchedulerPort
from application.ports.http_client import HttpClientPort, InvalidRequestError, TransportError
from application.ports.logger import LoggerPort, NullLogger
from application.services.redactor import mask_headers
from application.services.request_builder import RequestBuilder
from application.services.snapshot_builder import SnapshotBuilder
from domain.ids import DispatchId
from domain.location import Location
from domain.snapshot import DispatchResult, FailureKind


class DispatchInbox:
    """
    Single-producer/single-consumer mailbox between dispatch workers and the
    interactive context. Results come out in completion order.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[DispatchResult]" = queue.SimpleQueue()

    def post(self, result: DispatchResult) -> None:
        self._queue.put(result)

    def poll(self) -> Optional[DispatchResult]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[DispatchResult]:
        out: List[DispatchResult] = []
        while True:
            result = self.poll()
            if result is None:
                return out
            out.append(result)


@dataclass
class DispatchHandle:
    dispatch_id: str
    location_id: str
    sequence: int
    future: Optional[Future] = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def done(self) -> bool:
        return self.future is not None and self.future.done()


class RequestDispatcher:
    """
    Fire a Location at its server on a worker and post exactly one
    DispatchResult per dispatch into the inbox.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        scheduler: DispatchSchedulerPort,
        inbox: DispatchInbox,
        logger: Optional[LoggerPort] = None,
        wake: Optional[Callable[[], None]] = None,
        request_builder: Optional[RequestBuilder] = None,
        snapshot_builder: Optional[SnapshotBuilder] = None,
    ) -> None:
        self._http = http_client
        self._scheduler = scheduler
        self._inbox = inbox
        self._logger = logger or NullLogger()
        self._wake = wake
        self._builder = request_builder or RequestBuilder()
        self._snapshots = snapshot_builder or SnapshotBuilder()
        self._sequence = itertools.count()

    def dispatch(
        self,
        location: Location,
        on_created: Optional[Callable[[DispatchHandle], None]] = None,
    ) -> DispatchHandle:
        """
        Start one dispatch. on_created sees the handle before the worker is
        submitted, so it can be registered ahead of the result.
        """
        captured = location.copy()
        handle = DispatchHandle(
            dispatch_id=DispatchId.generate().value,
            location_id=captured.id,
            sequence=next(self._sequence),
        )
        logger = self._logger.bind(dispatch_id=handle.dispatch_id, location_id=captured.id)
        logger.info("dispatch.queued", method=captured.method.value, url=captured.url)
        if on_created is not None:
            on_created(handle)

        handle.future = self._scheduler.submit(
            handle.dispatch_id,
            lambda: self._run(handle, captured, logger),
        )
        return handle

    def _run(self, handle: DispatchHandle, location: Location, logger: LoggerPort) -> None:
        try:
            result = self._execute(handle, location, logger)
        except Exception as e:
            logger.error("dispatch.failed", error=str(e), error_type=type(e).__name__)
            result = self._failed(handle, FailureKind.TRANSPORT, str(e))
        self._inbox.post(result)
        if self._wake is not None:
            try:
                self._wake()
            except Exception as e:
                logger.error("dispatch.wake_failed", error=str(e))

    def _execute(self, handle: DispatchHandle, location: Location, logger: LoggerPort) -> DispatchResult:
        if handle.cancelled:
            logger.info("dispatch.cancelled", stage="before_send")
            return self._failed(handle, FailureKind.CANCELLED, "cancelled before send")

        request = self._builder.build(location)
        logger.debug(
            "dispatch.request_built",
            method=request.method,
            url=request.url,
            params=request.params,
            headers=mask_headers(request.headers),
        )

        try:
            response = self._http.send(request)
        except InvalidRequestError as e:
            logger.error("dispatch.invalid_request", error=str(e))
            return self._failed(handle, FailureKind.INVALID_REQUEST, str(e))
        except TransportError as e:
            logger.error("dispatch.transport_failed", error=str(e))
            return self._failed(handle, FailureKind.TRANSPORT, str(e))

        if handle.cancelled:
            logger.info("dispatch.cancelled", stage="after_send", status=response.status)
            return self._failed(handle, FailureKind.CANCELLED, "cancelled while in flight")

        snapshot = self._snapshots.build(response)
        logger.info(
            "dispatch.completed",
            status=snapshot.status,
            length=snapshot.length,
            content_type=snapshot.content_type,
        )
        return DispatchResult.succeeded(handle.dispatch_id, handle.location_id, handle.sequence, snapshot)

    def _failed(self, handle: DispatchHandle, kind: FailureKind, message: str) -> DispatchResult:
        return DispatchResult.failed(handle.dispatch_id, handle.location_id, handle.sequence, kind, message)

    def release(self, dispatch_id: str) -> None:
        self._scheduler.forget(dispatch_id)

    def close(self) -> None:
        self._http.close()
