# src/prioritizze/api/client.py

"""
Async client for the Prioritizze REST backend.

Every endpoint answers with an envelope: {"success": bool, "data": ..., "message": "..."}.
The client unwraps it and turns every failure mode into ApiError:
- transport errors (connect/read timeouts, refused connections),
- non-2xx responses (401 -> AuthError, and the stored token is dropped),
- success=false envelopes.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from ..config import Settings
from ..tasks.task_models import AuthSession, Task, User
from .errors import ApiError, AuthError

logger = logging.getLogger(__name__)


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail") or body.get("error")
        if msg:
            return str(msg)
    return f"HTTP {response.status_code} from {response.request.method} {response.request.url.path}"


class PrioritizzeApiClient:
    """
    Thin wrapper around one httpx.AsyncClient.

    Resource groups hang off the client (client.auth, client.tasks) the same way
    the web frontend groups its API calls.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        email: str | None = None,
        password: str | None = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._email = email
        self._password = password
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=_make_timeout(connect_timeout, read_timeout),
            transport=transport,
        )
        self.auth = AuthApi(self)
        self.tasks = TasksApi(self)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> PrioritizzeApiClient:
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            email=settings.api_email,
            password=settings.api_password,
            connect_timeout=settings.http_connect_timeout_seconds,
            read_timeout=settings.http_read_timeout_seconds,
            transport=transport,
        )

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = (token or "").strip() or None

    def _can_relogin(self, path: str) -> bool:
        return bool(self._email and self._password) and not path.lstrip("/").startswith("auth/")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Send one request and return the unwrapped `data` of the envelope.

        With credentials configured, a 401 triggers one fresh login and one retry.
        """
        try:
            return await self._send(method, path, json=json, params=params)
        except AuthError:
            if not self._can_relogin(path):
                raise
            logger.info("Token rejected on %s %s; logging in again as %s", method, path, self._email)

        await self.auth.login(self._email or "", self._password or "")
        return await self._send(method, path, json=json, params=params)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        clean_params = None
        if params:
            clean_params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method,
                path.lstrip("/"),
                json=json,
                params=clean_params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e.__class__.__name__}: {e}") from e

        if response.status_code == 401:
            # Same as the web client: a rejected token is forgotten.
            self._token = None
            raise AuthError(_error_message(response), status_code=401)

        if response.is_error:
            raise ApiError(_error_message(response), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned non-JSON body", status_code=response.status_code) from e

        if isinstance(body, dict) and "success" in body:
            if not body.get("success"):
                raise ApiError(
                    str(body.get("message") or f"{method} {path} reported failure"),
                    status_code=response.status_code,
                )
            return body.get("data")

        return body

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> PrioritizzeApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class AuthApi:
    def __init__(self, client: PrioritizzeApiClient) -> None:
        self._client = client

    async def login(self, email: str, password: str) -> AuthSession:
        data = await self._client.request("POST", "/auth/login", json={"email": email, "password": password})
        if not isinstance(data, dict) or not data.get("token"):
            raise ApiError("Login response has no token")

        session = AuthSession(token=str(data["token"]), user=User.from_api(data.get("user") or {}))
        self._client.set_token(session.token)
        logger.info("Logged in as %s (role=%s)", session.user.email or email, session.user.role)
        return session

    async def logout(self) -> None:
        try:
            await self._client.request("POST", "/auth/logout")
        finally:
            self._client.set_token(None)


class TasksApi:
    """Task endpoints. Also satisfies core.ports.TaskBackend."""

    def __init__(self, client: PrioritizzeApiClient) -> None:
        self._client = client

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        data = await self._client.request(
            "GET",
            "/tasks",
            params={"status": status, "category": category, "priority": priority},
        )
        return _parse_task_list(data)

    async def get_task(self, task_id: str) -> Task:
        data = await self._client.request("GET", f"/tasks/{task_id}")
        return Task.from_api(data)

    async def create_task(self, fields: Mapping[str, Any]) -> Task:
        data = await self._client.request("POST", "/tasks", json=dict(fields))
        return Task.from_api(data)

    async def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task | None:
        data = await self._client.request("PUT", f"/tasks/{task_id}", json=dict(patch))
        return Task.from_api(data) if isinstance(data, dict) else None

    async def delete_task(self, task_id: str) -> None:
        await self._client.request("DELETE", f"/tasks/{task_id}")

    async def list_due_tasks(self) -> list[Task]:
        data = await self._client.request("GET", "/tasks/due")
        return _parse_task_list(data)

    async def list_recurring_tasks(self) -> list[Task]:
        data = await self._client.request("GET", "/tasks/recurring")
        return _parse_task_list(data)


def _parse_task_list(data: Any) -> list[Task]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ApiError(f"Expected a list of tasks, got {type(data).__name__}")

    tasks: list[Task] = []
    for item in data:
        try:
            tasks.append(Task.from_api(item))
        except (ValueError, OverflowError, OSError):
            logger.warning("Skipping malformed task payload: %r", item)
    return tasks
