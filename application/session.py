# application/session.py
"""
WorkbenchSession: the interactive context.

Owns the workspace, fires dispatches, and applies worker results once per
update cycle. Nothing outside this object mutates the workspace.

Callers on several threads (the API thread pool, for one) share one session.
Every entry point holds the session lock; workspace edits made outside these
methods go through `with session.lock:`.
"""
from __future__ import annotations

import threading
from typing import Dict, List, Optional

from application.dispatcher import DispatchHandle, DispatchInbox, RequestDispatcher
from application.exceptions import DispatchNotFoundError
from application.ports.logger import LoggerPort, NullLogger
from application.ports.workspace_store import WorkspaceStorePort
from application.services.postman_importer import PostmanImporter
from domain.snapshot import DispatchResult, ResultSlot
from domain.workspace import ImportedCollection, Workspace


class WorkbenchSession:
    def __init__(
        self,
        workspace: Workspace,
        dispatcher: RequestDispatcher,
        inbox: DispatchInbox,
        store: Optional[WorkspaceStorePort] = None,
        importer: Optional[PostmanImporter] = None,
        logger: Optional[LoggerPort] = None,
    ) -> None:
        self.workspace = workspace
        self._dispatcher = dispatcher
        self._inbox = inbox
        self._store = store
        self._logger = logger or NullLogger()
        self._importer = importer or PostmanImporter(self._logger)
        self._pending: Dict[str, DispatchHandle] = {}
        self._slots: Dict[str, ResultSlot] = {}
        self._lock = threading.RLock()
        self.latest: Optional[DispatchResult] = None

    @classmethod
    def open(
        cls,
        store: WorkspaceStorePort,
        dispatcher: RequestDispatcher,
        inbox: DispatchInbox,
        logger: Optional[LoggerPort] = None,
    ) -> "WorkbenchSession":
        workspace = store.load()
        session = cls(workspace, dispatcher, inbox, store=store, logger=logger)
        session._logger.info(
            "session.opened",
            locations=len(workspace.collection),
            directories=len(workspace.directories),
        )
        return session

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # --- dispatch ----------------------------------------------------

    def dispatch(self, location_id: str) -> DispatchHandle:
        with self._lock:
            location = self.workspace.collection.get(location_id).copy()
        # submitted outside the lock; the handle is registered before the
        # worker can post its result
        return self._dispatcher.dispatch(location, on_created=self._register)

    def _register(self, handle: DispatchHandle) -> None:
        with self._lock:
            self._pending[handle.dispatch_id] = handle

    def cancel(self, dispatch_id: str) -> DispatchHandle:
        with self._lock:
            handle = self._pending.get(dispatch_id)
        if handle is None:
            raise DispatchNotFoundError(dispatch_id)
        handle.cancel()
        self._logger.info("dispatch.cancel_requested", dispatch_id=dispatch_id)
        return handle

    def pending(self) -> List[DispatchHandle]:
        with self._lock:
            return list(self._pending.values())

    def update(self) -> List[DispatchResult]:
        """
        Drain the inbox without blocking and apply every result in the order
        it completed.
        """
        with self._lock:
            drained = self._inbox.drain()
            for result in drained:
                self._pending.pop(result.dispatch_id, None)
                self._dispatcher.release(result.dispatch_id)
                slot = self._slots.get(result.location_id, ResultSlot())
                self._slots[result.location_id] = slot.apply(result)
                self.latest = result
                if not result.ok:
                    self._logger.info(
                        "dispatch.failure_observed",
                        dispatch_id=result.dispatch_id,
                        location_id=result.location_id,
                        kind=result.failure.kind.value,
                    )
            return drained

    def result_for(self, location_id: str) -> Optional[ResultSlot]:
        with self._lock:
            return self._slots.get(location_id)

    # --- import / persistence ---------------------------------------

    def import_postman(self, payload: bytes) -> List[ImportedCollection]:
        # parsing touches no shared state
        imported = self._importer.import_bytes(payload)
        with self._lock:
            self.workspace.merge_import(imported)
        self._logger.info(
            "import.merged",
            directories=[c.directory.id for c in imported],
            locations=sum(len(c.locations) for c in imported),
        )
        return imported

    def save(self) -> None:
        if self._store is None:
            return
        with self._lock:
            self._store.save(self.workspace)
            count = len(self.workspace.collection)
        self._logger.info("session.saved", locations=count)

    def close(self) -> None:
        with self._lock:
            pending = len(self._pending)
        self._dispatcher.close()
        self._logger.info("session.closed", pending=pending)

    def reload(self) -> None:
        if self._store is None:
            return
        with self._lock:
            self.workspace = self._store.load()
            self._slots.clear()
            self.latest = None
