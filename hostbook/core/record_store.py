# hostbook record store
# Append-only flat file, one profile per line

from pathlib import Path
from typing import List

from .errors import StoreUnreadable
from .models import ConnectionProfile, ParseIssue, StoreListing


class RecordStore:
    """
    Pipe-delimited profile file.

    Profiles are listed in file order and only ever appended; there is no
    update or delete. Malformed lines are reported as ParseIssue entries
    instead of aborting the listing.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_lines(self) -> List[bytes]:
        try:
            with open(self.path, "rb") as f:
                return f.read().splitlines()
        except OSError as e:
            raise StoreUnreadable(self.path, e.strerror or str(e)) from e

    def load(self) -> StoreListing:
        """
        Read every record, collecting diagnostics for malformed lines.

        Raises:
            StoreUnreadable: if the file exists but cannot be read
        """
        listing = StoreListing()
        if not self.path.exists():
            return listing

        for line_number, raw in enumerate(self._read_lines(), start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                shown = raw.decode("utf-8", errors="replace")
                listing.issues.append(ParseIssue(line_number, shown, f"not valid UTF-8 ({e.reason})"))
                continue
            if not line.strip():
                continue
            try:
                listing.profiles.append(ConnectionProfile.from_line(line))
            except ValueError as e:
                listing.issues.append(ParseIssue(line_number, line, str(e)))

        return listing

    def list(self) -> List[ConnectionProfile]:
        return self.load().profiles

    def append(self, profile: ConnectionProfile) -> None:
        """
        Append a profile as a new trailing line.

        Raises:
            InvalidProfile: if the profile has empty required fields or
                reserved characters
            OSError: if the file cannot be written
        """
        profile.validate()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        prefix = ""
        if self.path.exists() and self.path.stat().st_size > 0:
            with open(self.path, "rb") as f:
                f.seek(-1, 2)
                if f.read(1) != b"\n":
                    prefix = "\n"

        with open(self.path, "a", encoding="utf-8") as f:
            f.write(prefix + profile.to_line() + "\n")
