"""Error type raised by the service layer.

Handlers let these propagate; ``install_error_handlers`` turns them into
the JSON error envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    def __init__(
        self,
        code: str,
        status_code: int = 400,
        message: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.code = code
        self.status_code = status_code
        self.message = message or code.lower()
        self.details = details
        super().__init__(self.message)


class NotFoundError(ApiError):
    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(code, 404, message)


class ValidationFailed(ApiError):
    def __init__(self, code: str, message: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(code, 400, message, details)
