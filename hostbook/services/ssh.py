# hostbook SSH service
# Thin wrapper over the system ssh/scp clients

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.models import ConnectionProfile


@dataclass
class SSHResult:
    """Result of an SSH command execution."""
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class SSHClient:
    """
    SSH client wrapper for interactive sessions, remote commands and uploads.

    Uses the system ssh command for maximum compatibility.
    """

    def __init__(
        self,
        hostname: str,
        username: Optional[str] = None,
        key_path: Optional[str] = None,
        connect_timeout: int = 10,
        strict_host_key_checking: str = "accept-new",
        ssh_bin: str = "ssh",
        scp_bin: str = "scp",
    ):
        """
        Initialize the SSH client.

        Args:
            hostname: Remote host address
            username: SSH username
            key_path: Path to SSH private key
            connect_timeout: Connection timeout in seconds
            strict_host_key_checking: Value for the StrictHostKeyChecking option
            ssh_bin: ssh executable
            scp_bin: scp executable
        """
        self.hostname = hostname
        self.username = username
        self.key_path = key_path
        self.connect_timeout = connect_timeout
        self.strict_host_key_checking = strict_host_key_checking
        self.ssh_bin = ssh_bin
        self.scp_bin = scp_bin

    @classmethod
    def from_profile(cls, profile: ConnectionProfile, key_path: Path, config) -> "SSHClient":
        """Create an SSH client from a stored profile and its resolved key."""
        return cls(
            hostname=profile.address,
            username=profile.user,
            key_path=str(key_path),
            connect_timeout=config.connect_timeout,
            strict_host_key_checking=config.strict_host_key_checking,
            ssh_bin=config.ssh_bin,
            scp_bin=config.scp_bin,
        )

    @property
    def destination(self) -> str:
        if self.username:
            return f"{self.username}@{self.hostname}"
        return self.hostname

    def _common_options(self) -> List[str]:
        args: List[str] = []
        if self.key_path:
            args.extend(["-i", self.key_path])
        args.extend(["-o", f"StrictHostKeyChecking={self.strict_host_key_checking}"])
        args.extend(["-o", f"ConnectTimeout={self.connect_timeout}"])
        return args

    def _build_ssh_args(self, command: Optional[str] = None) -> List[str]:
        """Build SSH command arguments."""
        args = [self.ssh_bin]
        args.extend(self._common_options())

        # Remote commands must never stop at a password prompt
        if command:
            args.extend(["-o", "BatchMode=yes"])

        args.append(self.destination)

        if command:
            args.append(command)

        return args

    def _build_scp_upload_args(
        self,
        local_paths: Sequence[Path],
        remote_path: str,
        recursive: bool,
    ) -> List[str]:
        args = [self.scp_bin]

        if recursive:
            args.append("-r")

        args.extend(self._common_options())
        args.extend(["-o", "BatchMode=yes"])
        args.extend(str(p) for p in local_paths)
        args.append(f"{self.destination}:{remote_path}")
        return args

    @staticmethod
    def _execute(args: List[str], timeout: Optional[int] = None) -> SSHResult:
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
            return SSHResult(
                exit_code=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        except subprocess.TimeoutExpired:
            return SSHResult(exit_code=-1, stdout="", stderr="Command timed out")
        except OSError as e:
            return SSHResult(exit_code=-1, stdout="", stderr=str(e))

    def run(self, command: str, timeout: Optional[int] = None) -> SSHResult:
        """
        Execute a command on the remote host.

        Args:
            command: The command to execute
            timeout: Command timeout in seconds

        Returns:
            SSHResult with exit code and output
        """
        return self._execute(self._build_ssh_args(command), timeout=timeout)

    def make_remote_dir(self, remote_path: str) -> SSHResult:
        """Create a directory (and parents) on the remote host."""
        return self.run(f"mkdir -p {shlex.quote(remote_path)}")

    def upload(
        self,
        local_paths: Sequence[Path],
        remote_path: str,
        recursive: bool = True,
    ) -> SSHResult:
        """
        Upload files or directories using a single scp invocation.

        Args:
            local_paths: Local files/directories to copy
            remote_path: Remote destination directory
            recursive: Copy directories recursively

        Returns:
            SSHResult with exit code and output
        """
        if not local_paths:
            return SSHResult(exit_code=0, stdout="", stderr="")
        return self._execute(self._build_scp_upload_args(local_paths, remote_path, recursive))

    def get_ssh_command(self) -> str:
        """
        Get the SSH command for manual connection.

        Returns:
            SSH command string
        """
        return " ".join(shlex.quote(arg) for arg in self._build_ssh_args())

    def connect_interactive(self) -> int:
        """
        Open an interactive SSH session; blocks until the session ends.

        Returns:
            Process exit code (-1 if ssh could not be started)
        """
        try:
            result = subprocess.run(self._build_ssh_args())
        except OSError:
            return -1
        return result.returncode
