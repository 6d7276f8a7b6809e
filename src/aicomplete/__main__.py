"""aicomplete CLI: completer settings and configuration.

Usage:
    aicomplete settings <cmd>   View and edit stored completer settings
    aicomplete config <cmd>     Store location (show/get/set/reset/keys)

Pass -v/--verbose before the command for debug logging.
"""

from __future__ import annotations

import logging
import sys


def _cmd_settings(args: list[str]) -> int:
    """Completer settings."""
    import aicomplete.settings_cli

    return aicomplete.settings_cli.main(args)


def _cmd_config(args: list[str]) -> int:
    """Application configuration."""
    import aicomplete.config_cli

    return aicomplete.config_cli.main(args)


def main() -> None:
    args = sys.argv[1:]
    verbose = bool(args) and args[0] in ("-v", "--verbose")
    if verbose:
        args = args[1:]
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )

    if not args:
        print(__doc__)
        sys.exit(1)

    cmd = args[0]
    rest = args[1:]

    if cmd == "settings":
        sys.exit(_cmd_settings(rest))
    elif cmd == "config":
        sys.exit(_cmd_config(rest))
    else:
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
