from __future__ import annotations

from typing import Any


class RetranslateError(RuntimeError):
    """A WordPress REST style error: machine-readable code, message, HTTP status."""

    def __init__(self, code: str, message: str, status: int = 500) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status

    def to_response(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}

    @classmethod
    def from_response(cls, payload: Any, status: int) -> "RetranslateError":
        if not isinstance(payload, dict):
            return cls("http_error", "", status)
        data = payload.get("data")
        if isinstance(data, dict) and isinstance(data.get("status"), int):
            status = data["status"]
        return cls(str(payload.get("code") or "http_error"), str(payload.get("message") or ""), status)


class MachineTranslationError(RuntimeError):
    pass


class OperationInProgress(RuntimeError):
    pass
