from __future__ import annotations

import json
import pathlib
import sqlite3

import pytest

import aicomplete.chatgpt.editor
import aicomplete.chatgpt.settings
import aicomplete.config
from aicomplete.store import (
    _init_schema,
    db_file,
    delete_blob,
    get_blob,
    list_keys,
    open_project_store,
    open_store,
    put_blob,
    store_callbacks,
)


@pytest.fixture()
def conn():
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    _init_schema(db)
    yield db
    db.close()


class TestBlobs:
    def test_get_missing(self, conn: sqlite3.Connection) -> None:
        assert get_blob(conn, "chatgpt") is None

    def test_put_and_get(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "chatgpt", '{"a": 1}')
        assert get_blob(conn, "chatgpt") == '{"a": 1}'

    def test_put_upserts(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "chatgpt", "first")
        put_blob(conn, "chatgpt", "second")
        assert get_blob(conn, "chatgpt") == "second"
        assert len(list_keys(conn)) == 1

    def test_stores_corrupt_blob_verbatim(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "chatgpt", "not json")
        assert get_blob(conn, "chatgpt") == "not json"

    def test_delete(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "chatgpt", "x")
        assert delete_blob(conn, "chatgpt") is True
        assert get_blob(conn, "chatgpt") is None
        assert delete_blob(conn, "chatgpt") is False

    def test_list_keys(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "zeta", "zz")
        put_blob(conn, "alpha", "a")
        rows = list_keys(conn)
        assert [r["key"] for r in rows] == ["alpha", "zeta"]
        assert rows[1]["size"] == 2
        assert rows[0]["updated_at"]


class TestStoreCallbacks:
    def test_editor_round_trip(self, conn: sqlite3.Connection) -> None:
        load, save = store_callbacks(conn, "chatgpt")
        editor = aicomplete.chatgpt.editor.SettingsEditor(load, save)

        editor.on_edit("top_p", "0.9")

        raw = get_blob(conn, "chatgpt")
        assert raw is not None
        assert aicomplete.chatgpt.settings.decode(raw).top_p == 0.9

    def test_keys_are_independent(self, conn: sqlite3.Connection) -> None:
        _, save_a = store_callbacks(conn, "a")
        load_b, _ = store_callbacks(conn, "b")
        save_a("blob")
        assert load_b() is None

    def test_edit_with_lone_surrogate_prompt(self, conn: sqlite3.Connection) -> None:
        put_blob(conn, "chatgpt", '{"system_prompt":"\\ud800","user_prompt":"B"}')
        load, save = store_callbacks(conn, "chatgpt")
        editor = aicomplete.chatgpt.editor.SettingsEditor(load, save)

        editor.on_edit("temperature", "0.5")

        raw = get_blob(conn, "chatgpt")
        assert raw is not None
        stored = aicomplete.chatgpt.settings.decode(raw)
        assert stored.temperature == 0.5
        assert stored.system_prompt == "\ud800"

    def test_nan_edit_persists(self, conn: sqlite3.Connection) -> None:
        load, save = store_callbacks(conn, "chatgpt")
        editor = aicomplete.chatgpt.editor.SettingsEditor(load, save)

        editor.on_edit("temperature", "warm")

        raw = get_blob(conn, "chatgpt")
        assert "NaN" in raw
        assert editor.display_value("temperature") == "NaN"


class TestDbFile:
    def test_default(self, tmp_path: pathlib.Path) -> None:
        assert db_file(tmp_path) == tmp_path / ".aicomplete" / "aicomplete.db"

    def test_relative_to_root(self, tmp_path: pathlib.Path) -> None:
        assert db_file(tmp_path, "data/s.db") == tmp_path / "data" / "s.db"

    def test_absolute(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "elsewhere" / "s.db"
        assert db_file(pathlib.Path("/unused"), str(target)) == target


class TestOpenStore:
    def test_creates_parents_and_table(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "deep" / "er" / "s.db"
        with open_store(path) as db:
            put_blob(db, "chatgpt", "{}")
        assert path.exists()

        with open_store(path) as db:
            assert get_blob(db, "chatgpt") == "{}"

    def test_connection_closed_on_exit(self, tmp_path: pathlib.Path) -> None:
        with open_store(tmp_path / "s.db") as db:
            pass
        with pytest.raises(sqlite3.ProgrammingError):
            db.execute("SELECT 1")


class TestOpenProjectStore:
    def test_default_location(self, tmp_path: pathlib.Path) -> None:
        with open_project_store(tmp_path) as (db, cfg):
            put_blob(db, cfg.settings_key, "{}")
        assert cfg.settings_key == "chatgpt"
        assert (tmp_path / ".aicomplete" / "aicomplete.db").exists()

    def test_configured_path_and_key(self, tmp_path: pathlib.Path) -> None:
        aicomplete.config.set_value("db_path", "var/s.db", root=tmp_path)
        aicomplete.config.set_value("settings_key", "draft", root=tmp_path)

        with open_project_store(tmp_path) as (db, cfg):
            put_blob(db, cfg.settings_key, json.dumps({"x": 1}))
        assert cfg.settings_key == "draft"
        assert (tmp_path / "var" / "s.db").exists()

    def test_uses_git_root(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "pkg" / "sub"
        nested.mkdir(parents=True)

        with open_project_store(nested) as (db, cfg):
            put_blob(db, cfg.settings_key, "{}")
        assert (tmp_path.resolve() / ".aicomplete" / "aicomplete.db").exists()
        assert not (nested / ".aicomplete").exists()


def test_store_db_fixture_has_table(store_db: sqlite3.Connection) -> None:
    put_blob(store_db, "chatgpt", "{}")
    assert get_blob(store_db, "chatgpt") == "{}"
