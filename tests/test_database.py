"""Tests for settings and the global engine/session helpers."""

from uuid import uuid4

import pytest

from hrms_engine.config import Settings, get_settings
from hrms_engine.database import create_schema, dispose_db, get_session, init_db
from hrms_engine.models import Company


@pytest.fixture
async def sqlite_env(tmp_path, monkeypatch):
    """Point the global engine at a temporary SQLite database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'global.db'}")
    get_settings.cache_clear()
    await dispose_db()
    engine, _ = init_db()
    await create_schema(engine)
    yield
    await dispose_db()
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in ("QUOTA_MAX_RETRIES", "VERIFICATION_MAX_UPLOAD_BYTES", "DEBUG", "PORT"):
            monkeypatch.delenv(key, raising=False)

        settings = Settings.from_env()

        assert settings.quota_max_retries == 5
        assert settings.verification_max_upload_bytes == 5 * 1024 * 1024
        assert settings.port == 8000
        assert settings.debug is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("QUOTA_MAX_RETRIES", "9")
        monkeypatch.setenv("DEBUG", "TRUE")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        settings = Settings.from_env()

        assert settings.quota_max_retries == 9
        assert settings.debug is True
        assert settings.log_level == "warning"


class TestGetSession:
    async def test_init_db_is_idempotent(self, sqlite_env):
        first = init_db()
        second = init_db()

        assert first[0] is second[0]

    async def test_commits_on_success(self, sqlite_env):
        company_id = uuid4()
        async with get_session() as session:
            session.add(Company(company_id=company_id, name="Committed Ltd"))

        async with get_session() as session:
            assert await session.get(Company, company_id) is not None

    async def test_rolls_back_on_error(self, sqlite_env):
        company_id = uuid4()
        with pytest.raises(RuntimeError):
            async with get_session() as session:
                session.add(Company(company_id=company_id, name="Rolled Back Ltd"))
                await session.flush()
                raise RuntimeError("boom")

        async with get_session() as session:
            assert await session.get(Company, company_id) is None
