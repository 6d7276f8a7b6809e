"""Shared test fixtures for aicomplete tests."""

from __future__ import annotations

import json
import pathlib

import pytest

import aicomplete.config
import aicomplete.store


@pytest.fixture(autouse=True)
def isolated_global_config(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> pathlib.Path:
    """Keep the user's ~/.config/aicomplete out of every test."""
    global_toml = tmp_path / "global_config" / "config.toml"
    monkeypatch.setattr(aicomplete.config, "_global_path", lambda: global_toml)
    return global_toml


@pytest.fixture
def store_db(tmp_path: pathlib.Path):
    """Provide a temporary database with the settings_blobs table."""
    db_path = tmp_path / ".aicomplete" / "aicomplete.db"
    with aicomplete.store.open_store(db_path) as conn:
        yield conn


@pytest.fixture
def raw_blob():
    """Factory for settings blobs built from keyword overrides."""

    def _create(**fields) -> str:
        base = {"system_prompt": "Be brief.", "user_prompt": "Go on:\n\n{{prefix}}"}
        base.update(fields)
        return json.dumps(base)

    return _create
