"""Where completer settings are stored.

``StoreConfig`` names the database file and the settings key the CLI
edits. Values come from code defaults, then the user-wide file, then the
project file; later layers win key by key:

    ~/.config/aicomplete/config.toml
    <project>/.aicomplete/config.toml

Both files hold a single ``[store]`` table.
"""

from __future__ import annotations

import dataclasses
import pathlib
import tomllib
from typing import Any

SECTION = "store"


@dataclasses.dataclass
class StoreConfig:
    # Empty means .aicomplete/aicomplete.db under the project root
    db_path: str = ""
    settings_key: str = "chatgpt"


CONFIG_KEYS = tuple(f.name for f in dataclasses.fields(StoreConfig))


def find_project_root(cwd: pathlib.Path | None = None) -> pathlib.Path:
    """Return the enclosing git checkout of *cwd*, or *cwd* itself."""
    start = (cwd if cwd is not None else pathlib.Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").is_dir():
            return candidate
    return cwd if cwd is not None else start


def _global_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "aicomplete" / "config.toml"


def _local_path(root: pathlib.Path) -> pathlib.Path:
    return root / ".aicomplete" / "config.toml"


def _path_for(scope: str, root: pathlib.Path | None) -> pathlib.Path:
    if scope == "global":
        return _global_path()
    return _local_path(find_project_root(root))


def _read_table(path: pathlib.Path) -> dict[str, Any]:
    """Return the ``[store]`` table of *path*; unreadable files count as empty."""
    if not path.exists():
        return {}
    try:
        table = tomllib.loads(path.read_text()).get(SECTION, {})
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return table if isinstance(table, dict) else {}


def _write_table(path: pathlib.Path, table: dict[str, Any]) -> None:
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(tomli_w.dumps({SECTION: table} if table else {}).encode())


def _check_key(key: str) -> None:
    if key not in CONFIG_KEYS:
        expected = ", ".join(CONFIG_KEYS)
        raise KeyError(f"Unknown config key: {key} (expected one of {expected})")


def load(root: pathlib.Path | None = None) -> StoreConfig:
    """Build the effective ``StoreConfig`` for the project at *root*."""
    merged = {
        **_read_table(_global_path()),
        **_read_table(_local_path(find_project_root(root))),
    }
    # Non-string values are hand-edited mistakes; keep the default instead
    return StoreConfig(
        **{k: v for k, v in merged.items() if k in CONFIG_KEYS and isinstance(v, str)}
    )


def set_value(
    key: str, value: str, *, scope: str = "local", root: pathlib.Path | None = None
) -> None:
    """Record *key* = *value* in the global or project file."""
    _check_key(key)
    path = _path_for(scope, root)
    table = _read_table(path)
    table[key] = value
    _write_table(path, table)


def reset_value(
    key: str, *, scope: str = "local", root: pathlib.Path | None = None
) -> bool:
    """Drop an override so the next layer down applies again.

    Returns whether the file held an override for *key*.
    """
    _check_key(key)
    path = _path_for(scope, root)
    table = _read_table(path)
    if key not in table:
        return False
    del table[key]
    _write_table(path, table)
    return True
