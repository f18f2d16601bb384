# hostbook host commands
# Add, list and connect to saved profiles

import sys
from typing import List, Optional

from ..cli_utils import prompt_input
from ..core.activity_log import ActivityLog
from ..core.errors import HostbookError, KeyNotFound
from ..core.keys import KeyResolver
from ..core.models import ConnectionProfile
from ..core.record_store import RecordStore
from ..core.workflow import ACTION_CONNECT, ACTION_MIGRATE, ConnectionWorkflow, WorkflowState

usage = '''[subcommand] [args...]

Subcommands:
  list               - List saved connections
  add                - Add a connection
  connect [name|#]   - Connect to a saved connection
  migrate [name|#]   - Copy staged files to a host, then connect

Connections are stored in: <app dir>/connections.txt
Keys are looked up in <app dir>/keys/ first, then ~/.ssh/
'''


def cmd_list(config, args: List[str]) -> None:
    """List saved connections."""
    try:
        listing = RecordStore(config.store_file).load()
    except HostbookError as e:
        print(f"Error: {e}")
        return

    for issue in listing.issues:
        print(f"Warning: skipping malformed record ({issue})")

    if not listing.profiles:
        print("No connections saved yet.")
        print("Use 'hostbook add' to add one.")
        return

    print("Saved connections:")
    print("-" * 60)
    for index, profile in enumerate(listing.profiles, start=1):
        print(f"  {index:>2}. {profile.name:<20} {profile.target:<28} {profile.key_file}")
        if profile.description:
            print(f"      {profile.description}")
    print("-" * 60)
    print(f"Total: {len(listing.profiles)} connections")


def cmd_add(config, args: List[str]) -> Optional[ConnectionProfile]:
    """Add a new connection interactively."""
    print("Add new connection")
    print("-" * 40)

    name = prompt_input("Name: ")
    if name is None:
        return None
    if not name:
        print("Cancelled - name is required.")
        return None

    description = prompt_input("Description (optional): ", default="")
    if description is None:
        return None

    address = prompt_input("IP address / hostname: ")
    if address is None:
        return None
    if not address:
        print("Cancelled - address is required.")
        return None

    user = prompt_input(f"Username [{config.default_user}]: ", default=config.default_user)
    if user is None:
        return None

    key_file = prompt_input("Key file name (e.g. web.pem): ")
    if key_file is None:
        return None
    if not key_file:
        print("Cancelled - key file is required.")
        return None

    profile = ConnectionProfile(
        name=name,
        description=description,
        address=address,
        user=user or config.default_user,
        key_file=key_file,
    )

    try:
        RecordStore(config.store_file).append(profile)
    except HostbookError as e:
        print(f"Cancelled - {e}.")
        return None
    except OSError as e:
        print(f"Error: could not save connection: {e}")
        return None

    ActivityLog.from_config(config).profile_added(profile.name, profile.target)
    print(f"\nAdded connection: {profile.name} ({profile.target})")

    try:
        KeyResolver(config.keys_dir, config.fallback_keys_dir).resolve(profile.key_file)
    except KeyNotFound as e:
        print(f"Warning: {e}")

    return profile


def cmd_connect(config, args: List[str]) -> WorkflowState:
    """Connect to a saved connection (sub-menu is skipped when a name is given)."""
    selector = args[0] if args else None
    action = ACTION_CONNECT if selector else None
    return ConnectionWorkflow(config).run(action=action, selector=selector)


def cmd_migrate(config, args: List[str]) -> WorkflowState:
    """Copy the staging directory to a saved connection, then connect."""
    selector = args[0] if args else None
    return ConnectionWorkflow(config).run(action=ACTION_MIGRATE, selector=selector)


def main(config, args: List[str]) -> Optional[str]:
    """Main entry point for host commands."""
    if not args or args[0] in ("-h", "--help", "help"):
        print(usage)
        return None

    subcommand = args[0]
    subargs = args[1:]

    commands = {
        "list": cmd_list,
        "add": cmd_add,
        "connect": cmd_connect,
        "migrate": cmd_migrate,
    }

    if subcommand not in commands:
        print(f"Unknown subcommand: {subcommand}")
        print(usage)
        sys.exit(1)

    commands[subcommand](config, subargs)
    return None
