"""Configuration store: cached, defaults-backfilled configuration document.

Read path: cache hit returns immediately; on a miss the persisted document
is loaded (seeding the compiled-in default on first boot), merged over the
defaults and cached. If the database is unreachable the compiled-in
defaults are served (and not cached, so the next read retries storage).

Write path: the new document is persisted verbatim and the cache is
cleared synchronously; the next read recomputes the merge.

Cache scope is the process. Multiple instances converge only as each one
misses its own cache. Request handlers receive the store through
get_config_store().
"""

import asyncio
import copy
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import async_session_factory
from app.core.errors import ConfigurationUnavailableError
from app.repositories.settings_repository import SettingsRepository
from app.services.config_document import (
    Document,
    default_document,
    effective_document,
)

logger = logging.getLogger(__name__)


class ConfigStore:
    """Read-through cache for the configuration document.

    Safe for concurrent use from a single event loop: a lock collapses
    concurrent cache misses into one database read.

    Args:
        session_factory: Factory for short-lived sessions owned by the store.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._cache: Document | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def is_cached(self) -> bool:
        """True when the next get() will be served from memory."""
        return self._cache is not None

    async def get(self) -> Document:
        """Return the effective configuration document.

        Never raises for storage failures; degrades to compiled-in defaults.

        Returns:
            Deep copy of the effective document (safe to mutate).
        """
        cached = self._cache
        if cached is not None:
            return copy.deepcopy(cached)

        async with self._lock:
            if self._cache is None:
                generation = self._generation
                try:
                    persisted = await self._load_or_seed()
                except (SQLAlchemyError, OSError):
                    logger.exception(
                        "Error fetching settings from database, using defaults"
                    )
                    return default_document()
                merged = effective_document(persisted)
                if generation != self._generation:
                    # A write landed while loading; serve but do not cache.
                    return merged
                self._cache = merged
            return copy.deepcopy(self._cache)

    async def put(self, document: dict[str, Any]) -> Document:
        """Persist a new document verbatim and invalidate the cache.

        The caller is responsible for checking admin privilege.

        Args:
            document: Full or partial replacement document.

        Returns:
            The freshly computed effective document.

        Raises:
            ConfigurationUnavailableError: If the document could not be saved.
        """
        try:
            async with self._session_factory() as session:
                await SettingsRepository.save(session, document)
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Error saving settings")
            raise ConfigurationUnavailableError() from exc
        finally:
            # Invalidate even on failure: the stored state is unknown.
            self.invalidate()

        logger.info("Configuration document updated; cache invalidated")
        return await self.get()

    def invalidate(self) -> None:
        """Drop the cached document."""
        self._generation += 1
        self._cache = None

    async def _load_or_seed(self) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            persisted = await SettingsRepository.load(session)
            if persisted is None:
                await SettingsRepository.seed(session, default_document())
                await session.commit()
                logger.info("Seeded default configuration document")
            return persisted


# Singleton instance for the application
_config_store: ConfigStore | None = None


def get_config_store() -> ConfigStore:
    """Get the process-wide configuration store.

    Returns:
        The ConfigStore singleton bound to the application session factory.
    """
    global _config_store
    if _config_store is None:
        _config_store = ConfigStore(async_session_factory)
    return _config_store


def reset_config_store() -> None:
    """Reset the configuration store singleton (for testing)."""
    global _config_store
    _config_store = None
