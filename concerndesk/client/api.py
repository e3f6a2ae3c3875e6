"""HTTP client for the ConcernDesk API.

Typed wrapper over ``httpx.AsyncClient``. Non-2xx responses and transport
failures are mapped into the ``concerndesk.errors`` taxonomy so callers
(the retrying writer, the poller) can classify them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from concerndesk.errors import (
    ConcernDeskError, Transient, Unauthenticated, ValidationError, error_from_status,
)
from concerndesk.schemas import (
    ConcernRead, LoginResponse, NotificationRead, UnreadCount,
)

logger = logging.getLogger(__name__)


class ConcernClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ConcernClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self, method: str, path: str, *,
        json: dict | None = None, params: dict | None = None, auth: bool = True,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if auth:
            if not self.token:
                raise Unauthenticated("Please log in again")
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.TransportError as e:
            raise Transient(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise error_from_status(response.status_code, body if isinstance(body, dict) else {})

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Auth ──────────────────────────────────────────────

    async def login(self, email: str, password: str) -> LoginResponse:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password}, auth=False)
        result = LoginResponse.model_validate(data)
        self.token = result.token
        return result

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")
        self.token = None

    # ── Concerns ──────────────────────────────────────────

    async def list_concerns(
        self, status: str = "all", query: str = "", sort: str = "date", order: str = "desc",
    ) -> list[ConcernRead]:
        params = {"status": status, "q": query, "sort": sort, "order": order}
        data = await self._request("GET", "/api/concerns", params=params)
        return [ConcernRead.model_validate(c) for c in data]

    async def list_all_concerns(
        self, status: str = "all", query: str = "", sort: str = "date", order: str = "desc",
    ) -> list[ConcernRead]:
        params = {"status": status, "q": query, "sort": sort, "order": order}
        data = await self._request("GET", "/api/admin/concerns", params=params)
        return [ConcernRead.model_validate(c) for c in data]

    async def get_concern(self, concern_id: str) -> ConcernRead:
        data = await self._request("GET", f"/api/concerns/{concern_id}")
        return ConcernRead.model_validate(data)

    async def create_concern(self, title: str, message: str, category: str) -> ConcernRead:
        data = await self._request(
            "POST", "/api/concerns",
            json={"title": title, "message": message, "category": category},
        )
        return ConcernRead.model_validate(data)

    async def update_concern(
        self, concern_id: str, status: str | None = None, admin_response: str | None = None,
    ) -> ConcernRead:
        body: dict[str, Any] = {}
        if status is not None:
            body["status"] = status
        if admin_response is not None:
            body["admin_response"] = admin_response
        data = await self._request("PUT", f"/api/concerns/{concern_id}", json=body)
        return ConcernRead.model_validate(data)

    async def set_status(
        self, concern_id: str, status: str, admin_response: str | None = None,
    ) -> ConcernRead:
        # an empty response keeps the server on the status-change path
        return await self.update_concern(concern_id, status=status, admin_response=admin_response or None)

    async def respond(self, concern_id: str, formatted_text: str) -> ConcernRead:
        if not formatted_text or not formatted_text.strip():
            raise ValidationError("admin_response", "must not be empty")
        return await self.update_concern(concern_id, status="resolved", admin_response=formatted_text)

    async def mark_read(self, concern_id: str) -> bool:
        """Best-effort read-marking; failures are logged, never raised."""
        try:
            data = await self._request("PATCH", f"/api/concerns/{concern_id}/read")
        except ConcernDeskError as e:
            logger.warning("Failed to mark concern %s read: %s", concern_id, e)
            return False
        return bool(data and data.get("is_read"))

    # ── Notifications ─────────────────────────────────────

    async def send_notification(
        self, user_id: str, title: str, message: str,
        type: str = "info", reference_id: str | None = None,
    ) -> NotificationRead:
        data = await self._request(
            "POST", "/api/notifications",
            json={
                "user_id": user_id, "title": title, "message": message,
                "type": type, "reference_id": reference_id,
            },
        )
        return NotificationRead.model_validate(data)

    async def list_notifications(self, reference_id: str | None = None) -> list[NotificationRead]:
        params = {"reference_id": reference_id} if reference_id else None
        data = await self._request("GET", "/api/notifications", params=params)
        return [NotificationRead.model_validate(n) for n in data]

    async def count_unread(self) -> int:
        data = await self._request("GET", "/api/notifications/unread/count")
        return UnreadCount.model_validate(data).count

    async def mark_notification_read(self, notification_id: str) -> bool:
        """Best-effort, like ``mark_read``."""
        try:
            await self._request("PATCH", f"/api/notifications/{notification_id}/read")
        except ConcernDeskError as e:
            logger.warning("Failed to mark notification %s read: %s", notification_id, e)
            return False
        return True
