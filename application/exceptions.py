# application/exceptions.py
from __future__ import annotations


class ApplicationError(Exception):
    pass


class PostmanImportError(ApplicationError):
    """Payload is not a zip/JSON document of the Postman collection shape."""


class DispatchNotFoundError(ApplicationError):
    def __init__(self, dispatch_id: str) -> None:
        super().__init__(f"Dispatch not found: {dispatch_id}")
        self.dispatch_id = dispatch_id
