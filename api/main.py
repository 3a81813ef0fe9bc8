"""FastAPI application - interactive workbench session over HTTP"""
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from application.dispatcher import DispatchInbox, RequestDispatcher
from application.exceptions import DispatchNotFoundError, PostmanImportError
from application.ports.logger import LoggerPort
from application.session import WorkbenchSession
from domain.directory import Directory
from domain.exceptions import DirectoryNotFoundError, LocationNotFoundError, ValidationError
from domain.location import ContentType, Location, Method
from domain.snapshot import DispatchFailure, DispatchResult, ResponseSnapshot, ResultSlot
from domain.workspace import DEFAULT_LOCATION_NAME, DEFAULT_LOCATION_URL
from infrastructure.config.settings import Settings, load_settings
from infrastructure.dispatch.thread_dispatch_scheduler import ThreadDispatchScheduler
from infrastructure.http.requests_client import RequestsHttpClient
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger
from infrastructure.workspace import WorkspaceLoadError, WorkspaceStoreRegistry


# リクエスト/レスポンスモデル
class LocationPayload(BaseModel):
    """Editable fields of a Location"""
    name: str = Field(default="", description="Display label")
    url: str = Field(default="", description="Base URL, query params are added on dispatch")
    method: Method = Field(default=Method.GET)
    params: List[Tuple[str, str]] = Field(default_factory=list)
    body: str = Field(default="")
    form_params: List[Tuple[str, str]] = Field(default_factory=list)
    header: List[Tuple[str, str]] = Field(default_factory=list)
    content_type: ContentType = Field(default=ContentType.JSON)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class LocationResponse(LocationPayload):
    id: str


class NewLocationRequest(BaseModel):
    name: str = Field(default=DEFAULT_LOCATION_NAME)
    url: str = Field(default=DEFAULT_LOCATION_URL)
    method: Method = Field(default=Method.GET)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class DirectoryCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Defaults to 'new N'")
    parent: str = Field(default="", description="Parent directory id, empty for root")


class DirectoryRenameRequest(BaseModel):
    name: str


class DirectoryResponse(BaseModel):
    id: str
    name: str
    parent: str
    leaf: bool
    locations: List[str]


class WorkspaceResponse(BaseModel):
    directories: List[DirectoryResponse]
    roots: List[str] = Field(description="Ids of top level directories")
    locations: List[LocationResponse]
    orphans: List[str] = Field(description="Location ids no directory references")
    open_tabs: List[str]
    active_location_id: Optional[str] = None


class SnapshotResponse(BaseModel):
    url: str
    status: int
    status_text: str
    content_type: str
    headers: List[Tuple[str, str]]
    body: str
    length: int
    size_kb: float = Field(description="length / 1000, for display")
    pretty_body: str = Field(description="Indented JSON when the body parses as JSON, else the raw body")


class FailureResponse(BaseModel):
    kind: str
    message: str


class DispatchResultResponse(BaseModel):
    dispatch_id: str
    location_id: str
    sequence: int
    ok: bool
    snapshot: Optional[SnapshotResponse] = None
    failure: Optional[FailureResponse] = None


class ResultSlotResponse(BaseModel):
    location_id: str
    dispatch_id: Optional[str] = None
    snapshot: Optional[SnapshotResponse] = None
    failure: Optional[FailureResponse] = None


class TabLayoutResponse(BaseModel):
    open_tabs: List[str]
    active_location_id: Optional[str] = None


class PendingDispatchResponse(BaseModel):
    dispatch_id: str
    location_id: str
    sequence: int
    cancelled: bool


class DispatchAcceptedResponse(BaseModel):
    dispatch_id: str = Field(description="Dispatch identifier")
    location_id: str
    sequence: int
    links: Dict[str, str] = Field(description="Related resources")


class ImportedDirectoryResponse(BaseModel):
    id: str
    name: str
    locations: int
    children: int


# 設定
SETTINGS: Settings = load_settings()
SESSION: Optional[WorkbenchSession] = None


def build_session(settings: Settings, logger: Optional[LoggerPort] = None) -> WorkbenchSession:
    logger = logger or LoguruLogger()
    store = WorkspaceStoreRegistry().get_store(settings.workspace_path)
    inbox = DispatchInbox()
    dispatcher = RequestDispatcher(
        http_client=RequestsHttpClient(
            base_headers=settings.base_headers,
            timeout_sec=settings.http_timeout_sec,
            verify_tls=settings.verify_tls,
        ),
        scheduler=ThreadDispatchScheduler(),
        inbox=inbox,
        logger=logger,
    )
    return WorkbenchSession.open(store, dispatcher, inbox, logger=logger)


def get_session() -> WorkbenchSession:
    global SESSION
    if SESSION is None:
        SESSION = build_session(SETTINGS)
    return SESSION


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_console_logging(level=SETTINGS.log_level, serialize=SETTINGS.log_json)
    get_session()
    yield
    if SESSION is not None:
        try:
            SESSION.save()
        finally:
            SESSION.close()


app = FastAPI(
    title="RestOrient Workbench",
    description="Define, organize and dispatch REST requests",
    version="0.1.0",
    lifespan=lifespan,
)


def _location_response(location: Location) -> LocationResponse:
    return LocationResponse(
        id=location.id,
        name=location.name,
        url=location.url,
        method=location.method,
        params=list(location.params),
        body=location.body,
        form_params=list(location.form_params),
        header=list(location.header),
        content_type=location.content_type,
    )


def _directory_response(directory: Directory) -> DirectoryResponse:
    return DirectoryResponse(
        id=directory.id,
        name=directory.name,
        parent=directory.parent,
        leaf=directory.leaf,
        locations=list(directory.locations),
    )


def _snapshot_response(snapshot: Optional[ResponseSnapshot]) -> Optional[SnapshotResponse]:
    if snapshot is None:
        return None
    return SnapshotResponse(
        url=snapshot.url,
        status=snapshot.status,
        status_text=snapshot.status_text,
        content_type=snapshot.content_type,
        headers=list(snapshot.headers),
        body=snapshot.body,
        length=snapshot.length,
        size_kb=snapshot.size_kb,
        pretty_body=snapshot.pretty_body(),
    )


def _failure_response(failure: Optional[DispatchFailure]) -> Optional[FailureResponse]:
    if failure is None:
        return None
    return FailureResponse(kind=failure.kind.value, message=failure.message)


def _result_response(result: DispatchResult) -> DispatchResultResponse:
    return DispatchResultResponse(
        dispatch_id=result.dispatch_id,
        location_id=result.location_id,
        sequence=result.sequence,
        ok=result.ok,
        snapshot=_snapshot_response(result.snapshot),
        failure=_failure_response(result.failure),
    )


def _slot_response(location_id: str, slot: ResultSlot) -> ResultSlotResponse:
    return ResultSlotResponse(
        location_id=location_id,
        dispatch_id=slot.dispatch_id,
        snapshot=_snapshot_response(slot.snapshot),
        failure=_failure_response(slot.failure),
    )


@app.get("/")
def read_root():
    """ヘルスチェック"""
    return {"status": "ok", "service": "restorient"}


@app.get("/workspace", response_model=WorkspaceResponse)
def get_workspace(search: str = "", session: WorkbenchSession = Depends(get_session)) -> WorkspaceResponse:
    with session.lock:
        ws = session.workspace
        return WorkspaceResponse(
            directories=[_directory_response(d) for d in ws.directories.values()],
            roots=[d.id for d in ws.root_directories()],
            locations=[_location_response(loc) for loc in ws.search(search)],
            orphans=ws.orphaned_location_ids(),
            open_tabs=list(ws.open_tabs),
            active_location_id=ws.active_location_id,
        )


@app.post("/workspace/save", status_code=status.HTTP_204_NO_CONTENT)
def save_workspace(session: WorkbenchSession = Depends(get_session)) -> None:
    try:
        session.save()
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Cannot save workspace: {e}")


@app.post("/workspace/reload", response_model=WorkspaceResponse)
def reload_workspace(session: WorkbenchSession = Depends(get_session)) -> WorkspaceResponse:
    """Discard unsaved edits and result slots, read the stored workspace again."""
    session.reload()
    return get_workspace(session=session)


# ワークスペース編集は session.lock の中で行う
@app.post("/directories", response_model=DirectoryResponse, status_code=status.HTTP_201_CREATED)
def create_directory(
    request: DirectoryCreateRequest,
    session: WorkbenchSession = Depends(get_session),
) -> DirectoryResponse:
    try:
        with session.lock:
            directory = session.workspace.add_directory(request.name, parent=request.parent)
            return _directory_response(directory)
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.patch("/directories/{directory_id}", response_model=DirectoryResponse)
def rename_directory(
    directory_id: str,
    request: DirectoryRenameRequest,
    session: WorkbenchSession = Depends(get_session),
) -> DirectoryResponse:
    try:
        with session.lock:
            directory = session.workspace.rename_directory(directory_id, request.name)
            return _directory_response(directory)
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/directories/{directory_id}", response_model=DirectoryResponse)
def delete_directory(directory_id: str, session: WorkbenchSession = Depends(get_session)) -> DirectoryResponse:
    """Locations of the directory stay in the collection as orphans."""
    try:
        with session.lock:
            directory = session.workspace.remove_directory(directory_id)
            return _directory_response(directory)
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/directories/{directory_id}/children", response_model=List[DirectoryResponse])
def list_child_directories(
    directory_id: str,
    session: WorkbenchSession = Depends(get_session),
) -> List[DirectoryResponse]:
    try:
        with session.lock:
            session.workspace.get_directory(directory_id)
            return [_directory_response(d) for d in session.workspace.children_of(directory_id)]
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post(
    "/directories/{directory_id}/locations",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_location(
    directory_id: str,
    request: NewLocationRequest,
    session: WorkbenchSession = Depends(get_session),
) -> LocationResponse:
    try:
        with session.lock:
            location = session.workspace.add_location(
                directory_id, name=request.name, url=request.url, method=request.method
            )
            return _location_response(location)
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.put("/directories/{directory_id}/locations/{location_id}", response_model=DirectoryResponse)
def attach_location(
    directory_id: str,
    location_id: str,
    session: WorkbenchSession = Depends(get_session),
) -> DirectoryResponse:
    """Move a Location into this directory, releasing it from any other."""
    try:
        with session.lock:
            session.workspace.attach_location(directory_id, location_id)
            return _directory_response(session.workspace.get_directory(directory_id))
    except (DirectoryNotFoundError, LocationNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/directories/{directory_id}/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def detach_location(
    directory_id: str,
    location_id: str,
    session: WorkbenchSession = Depends(get_session),
) -> None:
    try:
        with session.lock:
            removed = session.workspace.detach_location(directory_id, location_id)
    except DirectoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail=f"Location {location_id} is not in {directory_id}")


@app.get("/locations/{location_id}", response_model=LocationResponse)
def get_location(location_id: str, session: WorkbenchSession = Depends(get_session)) -> LocationResponse:
    try:
        with session.lock:
            location = session.workspace.open_location(location_id)
            return _location_response(location)
    except LocationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/locations/{location_id}/owner", response_model=DirectoryResponse)
def get_location_owner(location_id: str, session: WorkbenchSession = Depends(get_session)) -> DirectoryResponse:
    with session.lock:
        if location_id not in session.workspace.collection:
            raise HTTPException(status_code=404, detail=f"Location not found: {location_id}")
        owner = session.workspace.owner_of(location_id)
        if owner is None:
            raise HTTPException(status_code=404, detail=f"Location {location_id} is orphaned")
        return _directory_response(owner)


@app.delete("/tabs/{location_id}", response_model=TabLayoutResponse)
def close_tab(location_id: str, session: WorkbenchSession = Depends(get_session)) -> TabLayoutResponse:
    with session.lock:
        session.workspace.close_tab(location_id)
        return TabLayoutResponse(
            open_tabs=list(session.workspace.open_tabs),
            active_location_id=session.workspace.active_location_id,
        )


@app.put("/locations/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: str,
    payload: LocationPayload,
    session: WorkbenchSession = Depends(get_session),
) -> LocationResponse:
    with session.lock:
        try:
            location = session.workspace.collection.get(location_id)
        except LocationNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

        # editor semantics: mutate the stored Location in place
        location.name = payload.name
        location.url = payload.url
        location.method = payload.method
        location.params = [tuple(p) for p in payload.params]
        location.body = payload.body
        location.form_params = [tuple(p) for p in payload.form_params]
        location.header = [tuple(p) for p in payload.header]
        location.content_type = payload.content_type
        return _location_response(location)


@app.delete("/locations/{location_id}", response_model=LocationResponse)
def delete_location(location_id: str, session: WorkbenchSession = Depends(get_session)) -> LocationResponse:
    try:
        with session.lock:
            location = session.workspace.delete_location(location_id)
    except LocationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _location_response(location)


def import_postman_payload(payload: bytes, session: WorkbenchSession) -> List[ImportedDirectoryResponse]:
    try:
        imported = session.import_postman(payload)
    except PostmanImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [
        ImportedDirectoryResponse(
            id=c.directory.id,
            name=c.directory.name,
            locations=len(c.locations),
            children=len(c.children),
        )
        for c in imported
    ]


@app.post("/imports/postman", response_model=List[ImportedDirectoryResponse])
async def import_postman(
    request: Request,
    session: WorkbenchSession = Depends(get_session),
) -> List[ImportedDirectoryResponse]:
    """Body: zip archive of Postman exports, or one collection JSON document."""
    payload = await request.body()
    return await run_in_threadpool(import_postman_payload, payload, session)


@app.post("/locations/{location_id}/dispatch", status_code=status.HTTP_202_ACCEPTED)
def dispatch_location(location_id: str, session: WorkbenchSession = Depends(get_session)) -> JSONResponse:
    try:
        handle = session.dispatch(location_id)
    except LocationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    accepted = DispatchAcceptedResponse(
        dispatch_id=handle.dispatch_id,
        location_id=handle.location_id,
        sequence=handle.sequence,
        links={
            "cancel": f"/dispatches/{handle.dispatch_id}/cancel",
            "result": f"/locations/{location_id}/result",
        },
    )
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=accepted.model_dump())


@app.get("/dispatches", response_model=List[PendingDispatchResponse])
def list_pending_dispatches(session: WorkbenchSession = Depends(get_session)) -> List[PendingDispatchResponse]:
    """Dispatches whose result has not been observed by an update cycle yet."""
    return [
        PendingDispatchResponse(
            dispatch_id=h.dispatch_id,
            location_id=h.location_id,
            sequence=h.sequence,
            cancelled=h.cancelled,
        )
        for h in session.pending()
    ]


@app.post("/dispatches/{dispatch_id}/cancel", status_code=status.HTTP_202_ACCEPTED)
def cancel_dispatch(dispatch_id: str, session: WorkbenchSession = Depends(get_session)) -> Dict[str, str]:
    try:
        session.cancel(dispatch_id)
    except DispatchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"dispatch_id": dispatch_id, "status": "cancelling"}


@app.post("/session/update", response_model=List[DispatchResultResponse])
def update_session(session: WorkbenchSession = Depends(get_session)) -> List[DispatchResultResponse]:
    """One update cycle: drain completed dispatches in completion order."""
    return [_result_response(r) for r in session.update()]


@app.get("/locations/{location_id}/result", response_model=ResultSlotResponse)
def get_location_result(location_id: str, session: WorkbenchSession = Depends(get_session)) -> ResultSlotResponse:
    if location_id not in session.workspace.collection:
        raise HTTPException(status_code=404, detail=f"Location not found: {location_id}")
    slot = session.result_for(location_id)
    if slot is None:
        raise HTTPException(status_code=404, detail=f"No result yet for {location_id}")
    return _slot_response(location_id, slot)


@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(WorkspaceLoadError)
async def workspace_error_handler(_request: Request, exc: WorkspaceLoadError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})
