"""CLI for the settings store location.

Usage:
    aicomplete config show                         Effective values and origin
    aicomplete config get <key>                    Print one value
    aicomplete config set [--global] <key> <value> Override a value
    aicomplete config reset [--global] <key>       Drop an override
    aicomplete config keys                         List stored settings keys

Keys are ``db_path`` and ``settings_key``.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

import aicomplete.config
import aicomplete.store


def cmd_show(root: Path) -> int:
    """Print each config value and the database it resolves to."""
    project = aicomplete.config.find_project_root(root)
    cfg = aicomplete.config.load(project)
    for name, value in dataclasses.asdict(cfg).items():
        print(f"{name} = {value!r}")
    print(f"# database: {aicomplete.store.db_file(project, cfg.db_path)}")
    return 0


def cmd_get(key: str, root: Path) -> int:
    if key not in aicomplete.config.CONFIG_KEYS:
        print(f"Unknown config key: {key}", file=sys.stderr)
        return 1
    print(getattr(aicomplete.config.load(root), key))
    return 0


def cmd_set(key: str, value: str, *, global_flag: bool, root: Path) -> int:
    scope = "global" if global_flag else "local"
    try:
        aicomplete.config.set_value(key, value, scope=scope, root=root)
    except KeyError as exc:
        print(exc.args[0], file=sys.stderr)
        return 1
    print(f"Set {key} = {value} ({scope})")
    return 0


def cmd_reset(key: str, *, global_flag: bool, root: Path) -> int:
    scope = "global" if global_flag else "local"
    try:
        removed = aicomplete.config.reset_value(key, scope=scope, root=root)
    except KeyError as exc:
        print(exc.args[0], file=sys.stderr)
        return 1
    print(f"Reset {key} ({scope})" if removed else f"No {scope} override for {key}")
    return 0


def cmd_keys(root: Path) -> int:
    """List the settings blobs held by the configured store."""
    with aicomplete.store.open_project_store(root) as (conn, cfg):
        rows = aicomplete.store.list_keys(conn)
    if not rows:
        print("No settings stored yet.")
        return 0
    for row in rows:
        marker = "*" if row["key"] == cfg.settings_key else " "
        print(f"{marker} {row['key']}  {row['size']} bytes  {row['updated_at']}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``aicomplete config``."""
    parser = argparse.ArgumentParser(
        prog="aicomplete config",
        description="Where completer settings are stored.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--path", type=Path, default=Path.cwd())
    scoped = argparse.ArgumentParser(add_help=False, parents=[common])
    scoped.add_argument("--global", dest="global_flag", action="store_true")

    sub = parser.add_subparsers(dest="subcmd")
    sub.add_parser("show", parents=[common], help="Show effective values")
    sub.add_parser("keys", parents=[common], help="List stored settings keys")

    p_get = sub.add_parser("get", parents=[common], help="Print one value")
    p_get.add_argument("key")

    p_set = sub.add_parser("set", parents=[scoped], help="Override a value")
    p_set.add_argument("key")
    p_set.add_argument("value")

    p_reset = sub.add_parser("reset", parents=[scoped], help="Drop an override")
    p_reset.add_argument("key")

    args = parser.parse_args(argv)

    if args.subcmd == "show":
        return cmd_show(args.path)
    elif args.subcmd == "keys":
        return cmd_keys(args.path)
    elif args.subcmd == "get":
        return cmd_get(args.key, args.path)
    elif args.subcmd == "set":
        return cmd_set(
            args.key, args.value, global_flag=args.global_flag, root=args.path
        )
    elif args.subcmd == "reset":
        return cmd_reset(args.key, global_flag=args.global_flag, root=args.path)
    else:
        parser.print_help()
        return 1
