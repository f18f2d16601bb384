# hostbook error types
# Every error is reported to the user and returns control to the enclosing menu

from pathlib import Path
from typing import Sequence


class HostbookError(Exception):
    """Base class for recoverable hostbook errors."""


class InvalidProfile(HostbookError):
    """A profile cannot be stored (missing field or reserved character)."""


class EmptyStore(HostbookError):
    def __init__(self, store_file: Path):
        self.store_file = store_file
        super().__init__(f"No connections saved yet ({store_file}).")


class InvalidSelection(HostbookError):
    def __init__(self, raw: str, count: int):
        self.raw = raw
        self.count = count
        super().__init__(f"Invalid selection: {raw!r} (enter a number between 1 and {count})")


class KeyNotFound(HostbookError):
    def __init__(self, key_file: str, checked: Sequence[Path]):
        self.key_file = key_file
        self.checked = list(checked)
        paths = ", ".join(str(p) for p in self.checked)
        super().__init__(f"Key file '{key_file}' not found. Checked: {paths}")


class PermissionRepairFailed(HostbookError):
    def __init__(self, path: Path, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Could not restrict permissions on {path}: {detail}")


class RemoteDirectoryCreateFailed(HostbookError):
    def __init__(self, remote_dir: str, exit_code: int, detail: str = ""):
        self.remote_dir = remote_dir
        self.exit_code = exit_code
        message = f"Failed to create remote directory '{remote_dir}' (exit code {exit_code})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class FileCopyFailed(HostbookError):
    def __init__(self, remote_dir: str, exit_code: int, detail: str = ""):
        self.remote_dir = remote_dir
        self.exit_code = exit_code
        message = f"Failed to copy files to '{remote_dir}' (exit code {exit_code})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class StoreUnreadable(HostbookError):
    def __init__(self, store_file: Path, detail: str):
        self.store_file = store_file
        self.detail = detail
        super().__init__(f"Cannot read connections file {store_file}: {detail}")
