"""Error taxonomy shared by the services and the HTTP layer.

Every failure the API reports is one of these classes; the exception handlers
in ``student_records.main`` turn them into the ``{ok: false, error: {...}}``
envelope.
"""
from __future__ import annotations


class ServiceError(Exception):
    code = "server_error"
    status_code = 500

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields

    def to_dict(self) -> dict:
        error: dict = {"code": self.code, "message": self.message}
        if self.fields is not None:
            error["fields"] = self.fields
        return {"ok": False, "error": error}


class ValidationFailed(ServiceError):
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(message, fields if fields is not None else {})


class NotFound(ServiceError):
    code = "not_found"
    status_code = 404


class Duplicate(ServiceError):
    code = "duplicate"
    status_code = 409

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} already exists", {field: "Already exists"})
        self.field = field


class DatabaseUnavailable(ServiceError):
    code = "db_error"
    status_code = 500


class ServerError(ServiceError):
    code = "server_error"
    status_code = 500
