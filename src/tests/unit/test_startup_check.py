"""Tests for startup checks that need no external services."""

import pytest

from bookxpert.startup_check import run_startup_checks


@pytest.mark.asyncio
async def test_offline_configuration_passes(memory_settings, capsys):
    assert await run_startup_checks() is True

    output = capsys.readouterr().out
    assert "In-memory storage selected" in output
    assert "Mock catalogue always ready" in output


@pytest.mark.asyncio
async def test_unreachable_database_fails(monkeypatch, capsys):
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")
    monkeypatch.setenv("CATALOGUE_SOURCE", "mock")
    monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@127.0.0.1:1/bookxpert")

    assert await run_startup_checks() is False
    assert "Cannot connect to PostgreSQL" in capsys.readouterr().out
