# hostbook config command

import sys
from typing import List, Optional

import yaml

from ..config import get_default_config, load_config, save_config

usage = '''[subcommand]

Subcommands:
  show   - Show the effective configuration
  path   - Show resolved file and directory locations
  init   - Write a config.yaml with the default settings
'''


def cmd_show(config, args: List[str]) -> None:
    data = load_config(config.config_file)
    print(f"# {config.config_file}")
    print(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())


def cmd_path(config, args: List[str]) -> None:
    print(f"App directory:      {config.app_dir}")
    print(f"Config file:        {config.config_file}")
    print(f"Connections file:   {config.store_file}")
    print(f"Keys directory:     {config.keys_dir}")
    print(f"Fallback keys:      {config.fallback_keys_dir}")
    print(f"Staging directory:  {config.migration_dir}")
    print(f"Remote staging dir: {config.remote_migration_dir}")
    if config.log_enabled:
        print(f"Activity log:       {config.log_file}")


def cmd_init(config, args: List[str]) -> None:
    if config.config_file.exists():
        print(f"Config already exists: {config.config_file}")
        return
    save_config(get_default_config(), config.config_file)
    config.keys_dir.mkdir(parents=True, exist_ok=True)
    config.migration_dir.mkdir(parents=True, exist_ok=True)
    print(f"Wrote {config.config_file}")


def main(config, args: List[str]) -> Optional[str]:
    """Main entry point for config command."""
    if not args or args[0] in ("-h", "--help", "help"):
        print(usage)
        return None

    commands = {
        "show": cmd_show,
        "path": cmd_path,
        "init": cmd_init,
    }

    if args[0] not in commands:
        print(f"Unknown subcommand: {args[0]}")
        print(usage)
        sys.exit(1)

    commands[args[0]](config, args[1:])
    return None
