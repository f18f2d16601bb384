# hostbook connection workflow
# Listing -> Selecting -> KeyResolving -> (StagingFiles) -> Connecting -> Terminal

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from ..cli_utils import is_yes, prompt_input
from ..services.ssh import SSHClient
from .activity_log import ActivityLog
from .errors import (
    EmptyStore,
    FileCopyFailed,
    HostbookError,
    InvalidSelection,
    RemoteDirectoryCreateFailed,
)
from .keys import KeyResolver
from .models import ConnectionProfile
from .record_store import RecordStore
from .staging import list_staged_entries, render_staging_tree


class WorkflowState(Enum):
    LISTING = "listing"
    SELECTING = "selecting"
    KEY_RESOLVING = "key_resolving"
    STAGING_FILES = "staging_files"
    CONNECTING = "connecting"
    TERMINAL = "terminal"


ACTION_CONNECT = "connect"
ACTION_MIGRATE = "migrate"

QUIT_INPUTS = ("", "q", "quit")

_ACTION_CHOICES = {
    "1": ACTION_CONNECT,
    "2": ACTION_MIGRATE,
}


class ConnectionWorkflow:
    """
    Pick a stored profile and open an SSH session to it.

    Every HostbookError is printed and ends the current step; nothing here
    exits the process. `prompt` and `output` default to the terminal and can
    be replaced to drive the workflow without one.
    """

    def __init__(
        self,
        config,
        store: Optional[RecordStore] = None,
        resolver: Optional[KeyResolver] = None,
        log: Optional[ActivityLog] = None,
        client_factory: Optional[Callable[..., SSHClient]] = None,
        prompt: Optional[Callable[..., Optional[str]]] = None,
        output: Optional[Callable[[str], None]] = None,
    ):
        self.config = config
        self.store = store or RecordStore(config.store_file)
        self.resolver = resolver or KeyResolver(config.keys_dir, config.fallback_keys_dir)
        self.log = log or ActivityLog.from_config(config)
        self.client_factory = client_factory or SSHClient.from_profile
        self.prompt = prompt or prompt_input
        self.output = output or print
        self.state = WorkflowState.LISTING

    def _enter(self, state: WorkflowState, profile: Optional[ConnectionProfile] = None) -> None:
        self.state = state
        self.log.state(state.value, profile.name if profile else "")

    def _report(self, error: HostbookError, profile: Optional[ConnectionProfile] = None) -> None:
        self.output(f"Error: {error}")
        self.log.error(type(error).__name__, str(error), profile.name if profile else "")

    def _client(self, profile: ConnectionProfile, key_path: Path) -> SSHClient:
        return self.client_factory(profile, key_path, self.config)

    def list_profiles(self) -> List[ConnectionProfile]:
        """
        Print the numbered profile listing.

        Raises:
            EmptyStore: if there is nothing to choose from
        """
        listing = self.store.load()
        for issue in listing.issues:
            self.output(f"Warning: skipping malformed record ({issue})")

        if not listing.profiles:
            raise EmptyStore(self.store.path)

        self.output("Saved connections:")
        self.output("-" * 60)
        for index, profile in enumerate(listing.profiles, start=1):
            line = f"  {index:>2}. {profile.name:<20} {profile.target}"
            if profile.description:
                line += f"  ({profile.description})"
            self.output(line)
        self.output("-" * 60)
        return listing.profiles

    def select(self, profiles: List[ConnectionProfile], raw: str) -> Optional[ConnectionProfile]:
        """
        Map user input to a profile.

        Returns:
            The chosen profile, or None for the quit sentinel

        Raises:
            InvalidSelection: for non-numeric or out-of-range input
        """
        raw = raw.strip()
        if raw.lower() in QUIT_INPUTS:
            return None
        try:
            index = int(raw)
        except ValueError:
            raise InvalidSelection(raw, len(profiles)) from None
        if not 1 <= index <= len(profiles):
            raise InvalidSelection(raw, len(profiles))
        return profiles[index - 1]

    def _pick(self, profiles: List[ConnectionProfile], selector: str) -> Optional[ConnectionProfile]:
        """Selection from the command line: exact name first, then index."""
        for profile in profiles:
            if profile.name == selector:
                return profile
        return self.select(profiles, selector)

    def resolve_key(self, profile: ConnectionProfile) -> Path:
        """Locate the profile's key and make sure ssh will accept it."""
        path = self.resolver.resolve(profile.key_file)
        if self.resolver.ensure_private_permissions(path):
            self.output(f"Restricted permissions on {path}")
            self.log.key_repaired(path)
        return path

    def stage_files(self, profile: ConnectionProfile, key_path: Path) -> bool:
        """
        Confirm and copy the staging directory to the remote host.

        Returns:
            True if the files were copied, False if the user declined

        Raises:
            RemoteDirectoryCreateFailed: if the remote mkdir exits non-zero
            FileCopyFailed: if scp exits non-zero
        """
        staging_dir = self.config.migration_dir
        remote_dir = self.config.remote_migration_dir

        self.output(f"Files staged in {staging_dir}:")
        for line in render_staging_tree(staging_dir):
            self.output(f"  {line}")

        answer = self.prompt(
            f"Copy these files to {profile.target}:{remote_dir}? (y/N): ",
            default="N",
        )
        if not is_yes(answer):
            self.output("Migration cancelled.")
            return False

        client = self._client(profile, key_path)
        result = client.make_remote_dir(remote_dir)
        if not result.success:
            raise RemoteDirectoryCreateFailed(remote_dir, result.exit_code, result.stderr.strip())

        entries = list_staged_entries(staging_dir)
        if entries:
            result = client.upload(entries, remote_dir, recursive=True)
            if not result.success:
                self.log.staging(profile.name, len(entries), remote_dir, ok=False)
                raise FileCopyFailed(remote_dir, result.exit_code, result.stderr.strip())

        self.log.staging(profile.name, len(entries), remote_dir, ok=True)
        self.output(f"Copied {len(entries)} item(s) to {profile.target}:{remote_dir}")
        return True

    def connect(self, profile: ConnectionProfile, key_path: Path) -> int:
        """Run the interactive session; blocks until it ends."""
        client = self._client(profile, key_path)
        command = client.get_ssh_command()
        self.output(f"Connecting to {profile.name} ({profile.target})...")
        self.output(f"  {command}")
        exit_code = client.connect_interactive()
        self.log.session_end(profile.name, exit_code)
        if exit_code == -1:
            message = f"could not start ssh session: {command}"
            self.output(f"Error: {message}")
            self.log.error("SessionStartFailed", message, profile.name)
        elif exit_code != 0:
            self.output(f"Session ended with exit code {exit_code}")
        return exit_code

    def _prompt_action(self, profile: ConnectionProfile) -> Optional[str]:
        self.output(f"\nSelected: {profile.name} ({profile.target})")
        self.output("  1. Connect")
        self.output("  2. Migrate files, then connect")
        self.output("  q. Back")
        raw = self.prompt("Choice [1]: ", default="1")
        if raw is None or raw.strip().lower() in ("q", "quit"):
            return None
        return _ACTION_CHOICES.get(raw.strip(), raw.strip())

    def run(self, action: Optional[str] = None, selector: Optional[str] = None) -> WorkflowState:
        """
        Drive the whole workflow.

        Args:
            action: ACTION_CONNECT or ACTION_MIGRATE to skip the sub-menu
            selector: Profile name or 1-based index to skip the selection prompt

        Returns:
            The last state reached
        """
        profile: Optional[ConnectionProfile] = None
        try:
            self._enter(WorkflowState.LISTING)
            try:
                profiles = self.list_profiles()
            except EmptyStore as e:
                self.output(str(e))
                self.output("Use 'Add' to save a connection first.")
                return self.state

            self._enter(WorkflowState.SELECTING)
            if selector is not None:
                profile = self._pick(profiles, selector)
            else:
                raw = self.prompt(f"Select a connection (1-{len(profiles)}, q to cancel): ")
                profile = None if raw is None else self.select(profiles, raw)

            if profile is None:
                self.output("Cancelled.")
                self._enter(WorkflowState.TERMINAL)
                return self.state

            while True:
                chosen = action or self._prompt_action(profile)
                if chosen is None:
                    self._enter(WorkflowState.TERMINAL, profile)
                    return self.state
                if chosen not in (ACTION_CONNECT, ACTION_MIGRATE):
                    self.output(f"Invalid choice: {chosen}")
                    if action:
                        return self.state
                    continue

                self._enter(WorkflowState.KEY_RESOLVING, profile)
                key_path = self.resolve_key(profile)

                if chosen == ACTION_MIGRATE:
                    self._enter(WorkflowState.STAGING_FILES, profile)
                    try:
                        staged = self.stage_files(profile, key_path)
                    except (RemoteDirectoryCreateFailed, FileCopyFailed) as e:
                        self._report(e, profile)
                        staged = False
                    if not staged:
                        if action:
                            return self.state
                        continue

                self._enter(WorkflowState.CONNECTING, profile)
                self.connect(profile, key_path)
                self._enter(WorkflowState.TERMINAL, profile)
                return self.state

        except HostbookError as e:
            self._report(e, profile)
            return self.state
