from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Error surfaced to the browser as ``{"error": ..., "details": ...}``."""

    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body
