# src/prioritizze/api/errors.py

from __future__ import annotations


class ApiError(RuntimeError):
    """Backend call failed: transport error, non-2xx, or success=false envelope."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiError):
    """HTTP 401 from the backend (token missing, expired, or rejected)."""


def friendly_api_error_message(err: Exception) -> str:
    if isinstance(err, AuthError):
        return "Backend rejected credentials. Set PRIORITIZZE_API_TOKEN or PRIORITIZZE_API_EMAIL/PASSWORD in .env."
    if isinstance(err, ApiError) and err.status_code is None and err.__cause__ is not None:
        return f"Backend unreachable: {err}"
    msg = str(err).strip()
    return msg or "Backend error."
