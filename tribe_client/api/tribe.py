"""Thin typed helpers for the Tribe backend endpoints.

Wraps only the endpoints the social app needs (profile, feed, discovery,
connections). If new endpoints are needed, prefer adding focused methods
here instead of sprinkling raw paths across callers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..errors.internal import RejectedRequestError
from ..logs.logger import logger
from .client import AuthenticatedClient
from .models import ApiResponse


class TribeAPI:
    """Endpoint helpers on top of an AuthenticatedClient.

    Every backend answer carries an application-level ``success`` flag; a
    false flag is raised as RejectedRequestError and reported through the
    client like any other terminal failure.
    """

    def __init__(self, client: AuthenticatedClient) -> None:
        if client is None:
            raise ValueError("AuthenticatedClient required")
        self._client = client

    # ---- profile ----
    async def get_user_data(self) -> dict[str, Any]:
        """Fetch the signed-in user's profile."""
        payload = await self._call("Fetch user data", "GET", "/api/user/data")
        return self._dict_field(payload, "user")

    async def update_user(
        self, user_data: Mapping[str, Any] | aiohttp.FormData
    ) -> dict[str, Any]:
        """Update the profile; pass FormData when uploading profile or cover images."""
        if isinstance(user_data, Mapping):
            user_data = dict(user_data)
        payload = await self._call(
            "Update user", "PUT", "/api/user/update", body=user_data
        )
        return self._dict_field(payload, "user")

    # ---- feed & discovery ----
    async def get_feed(self) -> list[dict[str, Any]]:
        payload = await self._call("Load feed", "GET", "/api/post/feed")
        return self._list_field(payload, "posts")

    async def discover_users(self, query: str) -> list[dict[str, Any]]:
        """Search users by name, username, bio or location.

        A blank query returns an empty list without contacting the backend.
        """
        query = (query or "").strip()
        if not query:
            logger.log_event("api", "discover_skipped", level=logging.DEBUG)
            return []
        payload = await self._call(
            "Search users", "POST", "/api/user/discover", body={"input": query}
        )
        return self._list_field(payload, "users")

    # ---- connections ----
    async def follow_user(self, user_id: str) -> str | None:
        return await self._user_action("Follow user", "/api/user/follow", user_id)

    async def unfollow_user(self, user_id: str) -> str | None:
        return await self._user_action("Unfollow user", "/api/user/unfollow", user_id)

    async def send_connection_request(self, user_id: str) -> str | None:
        return await self._user_action(
            "Send connection request", "/api/user/connect", user_id
        )

    async def accept_connection(self, user_id: str) -> str | None:
        return await self._user_action(
            "Accept connection", "/api/user/accept", user_id
        )

    # ---- internal helpers ----
    async def _user_action(self, operation: str, path: str, user_id: str) -> str | None:
        if not user_id:
            raise ValueError("user_id required")
        payload = await self._call(operation, "POST", path, body={"id": user_id})
        msg = payload.get("message")
        return msg if isinstance(msg, str) else None

    async def _call(
        self, operation: str, method: str, path: str, *, body: Any = None
    ) -> Mapping[str, Any]:
        response: ApiResponse = await self._client.request(method, path, body=body)
        try:
            return response.require_success(operation)
        except RejectedRequestError as e:
            e.method = method
            e.path = path
            logger.log_event(
                "api",
                "rejected",
                level=logging.WARNING,
                method=method,
                path=path,
                operation=operation,
                message=e.message,
            )
            self._client.report(e)
            raise

    @staticmethod
    def _dict_field(payload: Mapping[str, Any], key: str) -> dict[str, Any]:
        value = payload.get(key)
        return dict(value) if isinstance(value, Mapping) else {}

    @staticmethod
    def _list_field(payload: Mapping[str, Any], key: str) -> list[dict[str, Any]]:
        rows = payload.get(key)
        if isinstance(rows, list):
            return [r for r in rows if isinstance(r, dict)]
        return []


__all__ = ["TribeAPI"]
