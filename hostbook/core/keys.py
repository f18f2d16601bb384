# hostbook key resolver
# Locate private keys and keep them private enough for OpenSSH

import os
import stat
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import KeyNotFound, PermissionRepairFailed

# Principals that may keep access to a private key on Windows
_WINDOWS_ALLOWED_PRINCIPALS = {"system", "administrators", "creator owner"}

# icacls rights that expose key material
_WINDOWS_ACCESS_RIGHTS = {"F", "M", "RX", "R", "W"}


def _windows_username() -> str:
    return os.environ.get("USERNAME") or os.getlogin()


def parse_icacls_output(path: Path, output: str) -> List[Tuple[str, List[str]]]:
    """
    Parse `icacls <path>` output into (principal, rights) pairs.

    The first entry shares its line with the file path; following entries
    are indented. The trailing summary line is ignored.
    """
    entries: List[Tuple[str, List[str]]] = []
    prefix = str(path)
    for index, raw in enumerate(output.splitlines()):
        line = raw.strip()
        if index == 0 and line.startswith(prefix):
            line = line[len(prefix):].strip()
        if not line or ":(" not in line:
            continue
        principal, _, rest = line.rpartition(":(")
        rights: List[str] = []
        for group in ("(" + rest).split(")"):
            group = group.strip().lstrip("(")
            if group:
                rights.extend(token.strip() for token in group.split(","))
        entries.append((principal.strip(), rights))
    return entries


class KeyResolver:
    """
    Find a key file in the local keys directory, then the user's SSH directory.
    """

    def __init__(self, keys_dir: Path, fallback_dir: Path, platform: Optional[str] = None):
        self.keys_dir = Path(keys_dir)
        self.fallback_dir = Path(fallback_dir).expanduser()
        self.platform = platform or os.name

    def candidates(self, key_file: str) -> List[Path]:
        return [self.keys_dir / key_file, self.fallback_dir / key_file]

    def resolve(self, key_file: str) -> Path:
        """
        Return the first existing candidate path.

        Raises:
            KeyNotFound: with both checked paths when neither exists
        """
        checked = self.candidates(key_file)
        for path in checked:
            if path.is_file():
                return path
        raise KeyNotFound(key_file, checked)

    def ensure_private_permissions(self, path: Path) -> bool:
        """
        Restrict access to the key file to the current user.

        Returns:
            True if permissions were changed, False if they were already private

        Raises:
            PermissionRepairFailed: if the permission change is rejected
        """
        if self.platform == "nt":
            return self._repair_windows_acl(Path(path))
        return self._repair_posix_mode(Path(path))

    def _repair_posix_mode(self, path: Path) -> bool:
        try:
            mode = stat.S_IMODE(path.stat().st_mode)
            if not mode & (stat.S_IRWXG | stat.S_IRWXO):
                return False
            os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
        except OSError as e:
            raise PermissionRepairFailed(path, str(e)) from e
        return True

    def _icacls(self, *args: str) -> subprocess.CompletedProcess:
        return subprocess.run(["icacls", *args], capture_output=True, text=True)

    def _repair_windows_acl(self, path: Path) -> bool:
        try:
            username = _windows_username()
            listing = self._icacls(str(path))
            if listing.returncode != 0:
                raise PermissionRepairFailed(path, (listing.stderr or listing.stdout).strip())

            offenders = []
            for principal, rights in parse_icacls_output(path, listing.stdout):
                short_name = principal.rsplit("\\", 1)[-1].lower()
                if short_name == username.lower() or short_name in _WINDOWS_ALLOWED_PRINCIPALS:
                    continue
                if _WINDOWS_ACCESS_RIGHTS.intersection(rights):
                    offenders.append(principal)

            if not offenders:
                return False

            result = self._icacls(str(path), "/inheritance:r", "/grant:r", f"{username}:F")
            if result.returncode != 0:
                raise PermissionRepairFailed(path, (result.stderr or result.stdout).strip())

            for principal in offenders:
                result = self._icacls(str(path), "/remove:g", principal)
                if result.returncode != 0:
                    raise PermissionRepairFailed(path, (result.stderr or result.stdout).strip())
        except OSError as e:
            raise PermissionRepairFailed(path, str(e)) from e
        return True
