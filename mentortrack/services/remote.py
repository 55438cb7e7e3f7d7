"""
Remote data sources.

DataSource
    The five calls the engine makes against its remote collaborator.
    Implementations raise RemoteServiceError (or RateLimitedError /
    MalformedResponseError) and nothing else for remote failures.

HttpDataSource
    The hosted mentor-dashboard API. Blocking `requests` calls run in a
    worker thread so the event loop keeps serving while a call is out.
    HTTP 429 maps to RateLimitedError. There is no automatic retry: the
    caches turn failures into flags and the user retries by refreshing.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import requests
from pydantic import TypeAdapter, ValidationError

from mentortrack.core.errors import MalformedResponseError, RateLimitedError, RemoteServiceError
from mentortrack.schemas.agent import Roster
from mentortrack.schemas.catalog import Catalog
from mentortrack.schemas.progress import Snapshot
from mentortrack.schemas.remote import (
    RemoteMetadataResponse,
    RemoteProgressResponse,
    RemoteRosterResponse,
    RemoteTargetRecord,
)
from mentortrack.schemas.target import TargetSet, TargetUpdate

logger = logging.getLogger(__name__)

_TARGET_LIST = TypeAdapter(list[RemoteTargetRecord])


class DataSource(Protocol):
    async def fetch_roster(self) -> Roster: ...

    async def fetch_catalog(self) -> Catalog: ...

    async def fetch_snapshot(self, agent_id: int, week: int) -> Snapshot: ...

    async def fetch_target_set(self, agent_id: int, week: int) -> TargetSet: ...

    async def submit_target_update(self, update: TargetUpdate) -> None: ...


class HttpDataSource:
    def __init__(
        self,
        base_url: str,
        api_token: str = "",
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_token:
            self._session.headers["Authorization"] = f"Bearer {api_token}"

    # ------------------------------------------------------------------
    # DataSource
    # ------------------------------------------------------------------

    async def fetch_roster(self) -> Roster:
        data = await self._call("GET", "/mentor_dashboard_sales", operation="fetch_roster")
        return self._parse("fetch_roster", lambda: RemoteRosterResponse.model_validate(data).to_roster())

    async def fetch_catalog(self) -> Catalog:
        data = await self._call("GET", "/mentor_dashboard_metadata", operation="fetch_catalog")
        return self._parse("fetch_catalog", lambda: RemoteMetadataResponse.model_validate(data).to_catalog())

    async def fetch_snapshot(self, agent_id: int, week: int) -> Snapshot:
        data = await self._call(
            "GET",
            "/mentor_dashboard_sales_progress",
            params={"sales_id": agent_id, "week_number": week},
            operation="fetch_snapshot",
        )
        return self._parse(
            "fetch_snapshot",
            lambda: RemoteProgressResponse.model_validate(data).to_snapshot(agent_id, week),
        )

    async def fetch_target_set(self, agent_id: int, week: int) -> TargetSet:
        data = await self._call(
            "GET",
            "/mentor_dashboard_sales_progress/target",
            params={"sales_id": agent_id, "week_number": week},
            operation="fetch_target_set",
        )
        return self._parse(
            "fetch_target_set",
            lambda: TargetSet(
                agent_id=agent_id,
                week=week,
                entries=[r.to_entry() for r in _TARGET_LIST.validate_python(data)],
            ),
        )

    async def submit_target_update(self, update: TargetUpdate) -> None:
        await self._call(
            "POST",
            "/mentor_dashboard_sales_progress/target",
            json=update.to_payload(),
            operation="submit_target_update",
        )

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call(self, method: str, path: str, *, operation: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request, method, path, operation, **kwargs)

    def _request(self, method: str, path: str, operation: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s %s", method, url, kwargs.get("params") or "")
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise RemoteServiceError(f"{operation} failed: {exc}", operation=operation) from exc

        if response.status_code == 429:
            raise RateLimitedError(operation=operation)
        if response.status_code >= 400:
            raise RemoteServiceError(
                f"{operation} failed with status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(operation, "body is not JSON") from exc

    @staticmethod
    def _parse(operation: str, build):
        try:
            return build()
        except ValidationError as exc:
            raise MalformedResponseError(operation, f"{exc.error_count()} validation error(s)") from exc
