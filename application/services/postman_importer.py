# application/services/postman_importer.py
"""
Postman collection import.

Accepts a zip archive holding one or more exported collections (the shape of a
Postman data dump) or a single collection JSON document, and maps each
collection onto a Directory plus its Locations.
"""
from __future__ import annotations

import io
import json
import zipfile
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from application.exceptions import PostmanImportError
from application.ports.logger import LoggerPort, NullLogger
from domain.directory import Directory
from domain.ids import new_id
from domain.location import ContentType, Location, Method
from domain.workspace import ImportedCollection


class _PostmanModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PostmanPair(_PostmanModel):
    key: str = ""
    value: str = ""

    @field_validator("key", "value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)


class PostmanUrl(_PostmanModel):
    raw: str = ""

    @field_validator("raw", mode="before")
    @classmethod
    def _raw_text(cls, v: Any) -> Any:
        return "" if v is None else v


class PostmanBody(_PostmanModel):
    raw: str = ""
    urlencoded: List[PostmanPair] = Field(default_factory=list)

    @field_validator("raw", mode="before")
    @classmethod
    def _raw_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("urlencoded", mode="before")
    @classmethod
    def _pair_list(cls, v: Any) -> Any:
        return [] if v is None else v


class PostmanRequest(_PostmanModel):
    method: str = "GET"
    header: List[PostmanPair] = Field(default_factory=list)
    body: Optional[PostmanBody] = None
    url: Union[PostmanUrl, str, None] = None

    @field_validator("method", mode="before")
    @classmethod
    def _method_text(cls, v: Any) -> Any:
        return "GET" if v is None else v

    @field_validator("header", mode="before")
    @classmethod
    def _header_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def raw_url(self) -> str:
        if self.url is None:
            return ""
        if isinstance(self.url, str):
            return self.url
        return self.url.raw


class PostmanItem(_PostmanModel):
    id: str = ""
    name: str = ""
    request: Optional[PostmanRequest] = None
    item: Optional[List["PostmanItem"]] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("request", mode="before")
    @classmethod
    def _request_from_url(cls, v: Any) -> Any:
        # a request may be exported as a bare URL string
        if isinstance(v, str):
            return {"method": "GET", "url": v}
        return v

    @property
    def is_folder(self) -> bool:
        return self.item is not None


PostmanItem.model_rebuild()


class PostmanInfo(_PostmanModel):
    postman_id: str = Field(default="", alias="_postman_id")
    id: str = ""
    name: str = ""

    @field_validator("postman_id", "id", "name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return "" if v is None else v


class PostmanCollection(_PostmanModel):
    info: PostmanInfo = Field(default_factory=PostmanInfo)
    item: List[PostmanItem] = Field(default_factory=list)

    @field_validator("info", mode="before")
    @classmethod
    def _info(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("item", mode="before")
    @classmethod
    def _items(cls, v: Any) -> Any:
        return [] if v is None else v


class PostmanImporter:
    def __init__(self, logger: Optional[LoggerPort] = None) -> None:
        self._logger = logger or NullLogger()

    def import_bytes(self, payload: bytes) -> List[ImportedCollection]:
        if not payload:
            raise PostmanImportError("Import payload is empty")

        if zipfile.is_zipfile(io.BytesIO(payload)):
            return self.import_archive(payload)

        document = self._parse_json(payload, source="<document>")
        if not self._looks_like_collection(document):
            raise PostmanImportError("Document is not a Postman collection")
        return [self._map_collection(self._validate(document, source="<document>"))]

    def import_archive(self, payload: bytes) -> List[ImportedCollection]:
        try:
            archive = zipfile.ZipFile(io.BytesIO(payload))
        except (zipfile.BadZipFile, OSError) as e:
            raise PostmanImportError(f"Invalid archive: {e}") from e

        imported: List[ImportedCollection] = []
        with archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.lower().endswith(".json"):
                    continue
                try:
                    raw = archive.read(info)
                except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                    raise PostmanImportError(f"Cannot read {info.filename}: {e}") from e

                document = self._parse_json(raw, source=info.filename)
                if not self._looks_like_collection(document):
                    self._logger.debug("import.entry_skipped", entry=info.filename)
                    continue
                collection = self._validate(document, source=info.filename)
                imported.append(self._map_collection(collection))

        if not imported:
            raise PostmanImportError("Archive contains no Postman collections")

        self._logger.info(
            "import.archive_parsed",
            collections=len(imported),
            locations=sum(len(c.locations) for c in imported),
        )
        return imported

    def _parse_json(self, raw: bytes, source: str) -> Any:
        try:
            return json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PostmanImportError(f"{source} is not valid JSON: {e}") from e

    def _looks_like_collection(self, document: Any) -> bool:
        return isinstance(document, dict) and "item" in document

    def _validate(self, document: Any, source: str) -> PostmanCollection:
        try:
            return PostmanCollection.model_validate(document)
        except ValidationError as e:
            raise PostmanImportError(f"{source} does not match the collection shape: {e}") from e

    def _map_collection(self, collection: PostmanCollection) -> ImportedCollection:
        directory = Directory(
            id=collection.info.postman_id or collection.info.id or new_id(),
            name=collection.info.name,
        )
        locations: List[Location] = []
        children: List[Directory] = []
        self._map_items(collection.item, directory, locations, children)
        directory.leaf = not any(c.parent == directory.id for c in children)
        return ImportedCollection(directory=directory, locations=locations, children=children)

    def _map_items(
        self,
        items: List[PostmanItem],
        directory: Directory,
        locations: List[Location],
        children: List[Directory],
    ) -> None:
        for item in items:
            if item.is_folder:
                folder = Directory(id=item.id or new_id(), name=item.name, parent=directory.id)
                children.append(folder)
                self._map_items(item.item or [], folder, locations, children)
                folder.leaf = not any(c.parent == folder.id for c in children)
                continue
            location = self._map_item(item)
            directory.locations.append(location.id)
            locations.append(location)

    def _map_item(self, item: PostmanItem) -> Location:
        request = item.request or PostmanRequest()
        body = request.body or PostmanBody()
        return Location(
            id=item.id or new_id(),
            name=item.name,
            url=request.raw_url,
            method=Method.from_text(request.method),
            params=[],
            body=body.raw,
            form_params=[(f.key, f.value) for f in body.urlencoded],
            header=[(h.key, h.value) for h in request.header],
            # form bodies are not auto-detected; only their pairs are kept
            content_type=ContentType.JSON,
        )
