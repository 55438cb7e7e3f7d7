"""
Metric catalog cache. Loaded once per session; a forced reload replaces
it wholesale, a failed one leaves the previous catalog (or nothing) in
place.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mentortrack.core.errors import RateLimitedError, RemoteServiceError
from mentortrack.schemas.catalog import Catalog
from mentortrack.services.notifications import Notifier
from mentortrack.services.remote import DataSource
from mentortrack.services.scheduler import CancelToken

logger = logging.getLogger(__name__)


class CatalogCache:
    def __init__(self, source: DataSource, notifier: Optional[Notifier] = None) -> None:
        self._source = source
        self._notifier = notifier or Notifier()
        self._catalog: Optional[Catalog] = None
        self._pending: Optional[asyncio.Task] = None
        self._pending_token = CancelToken()
        self.error: Optional[str] = None

    def get(self) -> Optional[Catalog]:
        return self._catalog

    @property
    def is_loading(self) -> bool:
        return self._pending is not None

    async def load(
        self,
        force_refresh: bool = False,
        token: Optional[CancelToken] = None,
    ) -> Optional[Catalog]:
        if self._catalog is not None and not force_refresh:
            return self._catalog
        if self._pending is None or self._pending_token.cancelled:
            self._pending_token = token or CancelToken()
            self._pending = asyncio.get_running_loop().create_task(self._load(self._pending_token))
        return await asyncio.shield(self._pending)

    def clear(self) -> None:
        self._catalog = None
        self.error = None

    async def _load(self, token: CancelToken) -> Optional[Catalog]:
        try:
            catalog = await self._source.fetch_catalog()
        except RateLimitedError:
            logger.warning("Rate limited while loading the metric catalog")
            if not token.cancelled:
                self.error = "rate_limited"
            return self._catalog
        except RemoteServiceError as exc:
            logger.error("Failed to load metric catalog: %s", exc.message)
            if not token.cancelled:
                self.error = exc.message
                self._notifier.error("Error loading KPI data")
            return self._catalog
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

        if token.cancelled:
            logger.debug("Discarding superseded catalog load")
            return self._catalog

        logger.info(
            "Catalog loaded: %d actions, %d skillsets, %d requirements",
            len(catalog.actions), len(catalog.skillsets), len(catalog.requirements),
        )
        self._catalog = catalog
        self.error = None
        return catalog
