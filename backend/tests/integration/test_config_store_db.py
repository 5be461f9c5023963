"""Integration tests for ConfigStore persistence."""

from sqlalchemy import select

from app.models import AppSettings
from app.services.config_document import DEFAULT_DOCUMENT
from app.services.config_store import ConfigStore


class TestConfigStorePersistence:
    """Seeding and verbatim writes against PostgreSQL."""

    async def test_first_read_seeds_defaults(self, session_factory):
        store = ConfigStore(session_factory)

        doc = await store.get()

        assert doc == DEFAULT_DOCUMENT
        async with session_factory() as session:
            stored = await session.scalar(select(AppSettings.settings_data))
        assert stored == DEFAULT_DOCUMENT

    async def test_write_is_stored_verbatim(self, session_factory):
        store = ConfigStore(session_factory)
        await store.get()

        merged = await store.put({"costs": {"imageEdit": 4}})

        assert merged["costs"]["imageEdit"] == 4
        assert merged["costs"]["imageCreate"] == 5
        async with session_factory() as session:
            stored = await session.scalar(select(AppSettings.settings_data))
        assert stored == {"costs": {"imageEdit": 4}}

    async def test_second_store_sees_write(self, session_factory):
        """Another process converges on its next cache miss."""
        writer = ConfigStore(session_factory)
        reader = ConfigStore(session_factory)

        await writer.put({"costs": {"tweetGenerator": 2}})

        assert (await reader.get())["costs"]["tweetGenerator"] == 2
