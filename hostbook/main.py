#!/usr/bin/env python
# hostbook - personal SSH connection manager
# License: MIT

import sys
from typing import Dict, List, Optional

BANNER = r'''
  _               _   _                 _
 | |__   ___  ___| |_| |__   ___   ___ | | __
 | '_ \ / _ \/ __| __| '_ \ / _ \ / _ \| |/ /
 | | | | (_) \__ \ |_| |_) | (_) | (_) |   <
 |_| |_|\___/|___/\__|_.__/ \___/ \___/|_|\_\
'''


# ---------------------------------------------------------------------------
# COMMANDS_REGISTRY - single source of truth for all CLI commands.
# usage / help_text are generated from this registry.
# ---------------------------------------------------------------------------

COMMANDS_REGISTRY: List[Dict] = [
    {"command": "list", "description": "List saved connections"},
    {"command": "add", "description": "Add a connection interactively"},
    {"command": "connect", "description": "Connect to a saved connection", "args": "[name|#]"},
    {"command": "migrate", "description": "Copy staged files to a host, then connect", "args": "[name|#]"},
    {"command": "config", "description": "Show or initialize configuration", "args": "show|path|init"},
    {"command": "help", "description": "Show help"},
    {"command": "version", "description": "Show version"},
]


def _generate_usage() -> str:
    """Generate the short usage string from COMMANDS_REGISTRY."""
    lines = ["[command] [args...]", "", "Run without a command for the interactive menu.", "", "Commands:"]
    for entry in COMMANDS_REGISTRY:
        cmd = entry["command"]
        if cmd in ("help", "version"):
            continue
        left = f"{cmd} {entry.get('args', '')}".strip()
        lines.append(f"  {left:<24s}- {entry['description']}")
    lines.append("")
    return "\n".join(lines)


def _generate_help_text() -> str:
    """Generate the full help text from COMMANDS_REGISTRY."""
    lines = [
        "",
        "hostbook: a small catalog of SSH hosts with key lookup and file staging.",
        "",
        "COMMANDS",
    ]
    for entry in COMMANDS_REGISTRY:
        left = f"  {entry['command']} {entry.get('args', '')}".rstrip()
        lines.append(f"{left:<32s}{entry['description']}")
    lines.extend([
        "",
        "FILES (under $HOSTBOOK_HOME or ~/.config/hostbook)",
        "  config.yaml         Settings",
        "  connections.txt     name|description|address|user|key_file",
        "  keys/               Private keys (falls back to ~/.ssh/)",
        "  migration/          Files copied by 'migrate'",
        "",
    ])
    return "\n".join(lines)


usage = _generate_usage()

help_text = _generate_help_text()


def main(args: List[str]) -> Optional[str]:
    """Main entry point for hostbook."""
    from .config import load_app_config

    # No subcommand - interactive menu
    if len(args) < 2:
        from .commands.menu import run_menu
        config = load_app_config()
        print(BANNER)
        raise SystemExit(run_menu(config))

    command = args[1]
    cmd_args = args[2:]

    if command in ("help", "-h", "--help"):
        print(BANNER)
        print(help_text)
        raise SystemExit(0)
    elif command in ("version", "--version"):
        from . import __version__
        print(f"hostbook {__version__}")
        raise SystemExit(0)

    config = load_app_config()

    # Route to subcommand
    if command in ("list", "add", "connect", "migrate"):
        from .commands.host import main as host_main
        return host_main(config, [command] + cmd_args)
    elif command == "config":
        from .commands.config_cmd import main as config_main
        return config_main(config, cmd_args)
    else:
        print(f"Unknown command: {command}")
        print(usage)
        raise SystemExit(1)


def cli() -> None:
    """CLI entry point (called by pip installed command)."""
    result = main(sys.argv)
    if result:
        print(result)


if __name__ == "__main__":
    cli()
