"""CLI for editing stored completer settings.

Usage:
    aicomplete settings fields                  List editable fields
    aicomplete settings show [--json]           Show effective settings
    aicomplete settings get <field>             Print one field
    aicomplete settings set <field> <value>     Edit one field
    aicomplete settings clear <field>           Unset an optional field
    aicomplete settings reset                   Restore the defaults

All subcommands but ``fields`` accept ``--key`` (settings identifier,
default from the ``settings_key`` config value) and ``--path`` (project
root). Negative values such as ``-1e3`` are accepted as-is by ``set``.
"""

from __future__ import annotations

import argparse
import contextlib
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import aicomplete.chatgpt.editor
import aicomplete.chatgpt.settings
import aicomplete.store

if TYPE_CHECKING:
    from collections.abc import Generator


@contextlib.contextmanager
def _open_editor(
    key: str | None, root: Path
) -> Generator[aicomplete.chatgpt.editor.SettingsEditor]:
    with aicomplete.store.open_project_store(root) as (conn, cfg):
        load, save = aicomplete.store.store_callbacks(conn, key or cfg.settings_key)
        yield aicomplete.chatgpt.editor.SettingsEditor(load, save)


def cmd_fields() -> int:
    """Print the form fields in display order."""
    for spec in aicomplete.chatgpt.editor.FIELDS:
        print(f"{spec.name}: {spec.kind}  ({spec.label})")
        if spec.description:
            print(f"    {spec.description}")
    return 0


def cmd_show(key: str | None, root: Path, *, as_json: bool = False) -> int:
    """Print every field's effective value, or the encoded blob."""
    with _open_editor(key, root) as editor:
        settings = editor.settings
        if as_json:
            print(aicomplete.chatgpt.settings.encode(settings))
            return 0
        for spec in aicomplete.chatgpt.editor.FIELDS:
            value = aicomplete.chatgpt.editor.format_value(getattr(settings, spec.name))
            if spec.kind == "text":
                print(f"[{spec.name}]")
                print(value)
                print()
            else:
                print(f"{spec.name} = {value or '(unset)'}")
    return 0


def cmd_get(field: str, key: str | None, root: Path) -> int:
    with _open_editor(key, root) as editor:
        try:
            value = editor.display_value(field)
        except KeyError as exc:
            print(exc.args[0], file=sys.stderr)
            return 1
    print(value)
    return 0


def cmd_set(field: str, value: str, key: str | None, root: Path) -> int:
    """Apply a single edit, exactly as the settings form would."""
    with _open_editor(key, root) as editor:
        try:
            updated = editor.on_edit(field, value)
        except (KeyError, TypeError) as exc:
            print(exc.args[0], file=sys.stderr)
            return 1
    shown = aicomplete.chatgpt.editor.format_value(getattr(updated, field))
    print(f"Set {field} = {shown}")
    return 0


def cmd_clear(field: str, key: str | None, root: Path) -> int:
    with _open_editor(key, root) as editor:
        try:
            editor.on_clear(field)
        except KeyError as exc:
            print(exc.args[0], file=sys.stderr)
            return 1
    print(f"Cleared {field}")
    return 0


def cmd_reset(key: str | None, root: Path) -> int:
    with _open_editor(key, root) as editor:
        editor.reset()
    print("Restored default settings")
    return 0


_VALUE_OPTIONS = ("--key", "--path")
_FLAG_OPTIONS = ("-h", "--help")


def _guard_set_value(argv: list[str]) -> list[str]:
    """Move ``set`` options in front of a ``--`` separator.

    argparse only reads plain negatives such as ``-2`` or ``-.5`` as
    values; ``-1e3`` or ``-Infinity`` would be taken for options.
    """
    if not argv or argv[0] != "set" or "--" in argv:
        return argv
    options: list[str] = []
    positionals: list[str] = []
    args = iter(argv[1:])
    for arg in args:
        if arg in _VALUE_OPTIONS:
            options.append(arg)
            following = next(args, None)
            if following is not None:
                options.append(following)
        elif arg in _FLAG_OPTIONS or arg.startswith(
            tuple(f"{opt}=" for opt in _VALUE_OPTIONS)
        ):
            options.append(arg)
        else:
            positionals.append(arg)
    return ["set", *options, "--", *positionals]


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``aicomplete settings``."""
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="aicomplete settings",
        description="Edit stored completer settings.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--key", default=None, help="Settings identifier")
    common.add_argument("--path", type=Path, default=Path.cwd())

    sub = parser.add_subparsers(dest="subcmd")

    sub.add_parser("fields", help="List editable fields")

    p_show = sub.add_parser("show", parents=[common], help="Show settings")
    p_show.add_argument("--json", dest="as_json", action="store_true")

    p_get = sub.add_parser("get", parents=[common], help="Print one field")
    p_get.add_argument("field")

    p_set = sub.add_parser("set", parents=[common], help="Edit one field")
    p_set.add_argument("field")
    p_set.add_argument("value")

    p_clear = sub.add_parser("clear", parents=[common], help="Unset a field")
    p_clear.add_argument("field")

    sub.add_parser("reset", parents=[common], help="Restore the defaults")

    args = parser.parse_args(_guard_set_value(argv))

    if args.subcmd == "fields":
        return cmd_fields()
    elif args.subcmd == "show":
        return cmd_show(args.key, args.path, as_json=args.as_json)
    elif args.subcmd == "get":
        return cmd_get(args.field, args.key, args.path)
    elif args.subcmd == "set":
        return cmd_set(args.field, args.value, args.key, args.path)
    elif args.subcmd == "clear":
        return cmd_clear(args.field, args.key, args.path)
    elif args.subcmd == "reset":
        return cmd_reset(args.key, args.path)
    else:
        parser.print_help()
        return 1
