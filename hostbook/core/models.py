# hostbook data models

from dataclasses import dataclass, field
from typing import List

from ..constants import FIELD_COUNT, FIELD_NAMES, FIELD_SEPARATOR
from .errors import InvalidProfile

# Characters that would break the one-record-per-line layout
_RESERVED = (FIELD_SEPARATOR, "\n", "\r")


@dataclass(frozen=True)
class ConnectionProfile:
    """One stored connection record."""
    name: str
    description: str
    address: str
    user: str
    key_file: str

    @property
    def target(self) -> str:
        return f"{self.user}@{self.address}"

    def fields(self) -> List[str]:
        return [getattr(self, attr) for attr in FIELD_NAMES]

    def validate(self) -> None:
        """Raise InvalidProfile if this record cannot be stored safely."""
        for attr in ("name", "address", "user", "key_file"):
            if not getattr(self, attr).strip():
                raise InvalidProfile(f"{attr.replace('_', ' ')} is required")

        for attr, value in zip(FIELD_NAMES, self.fields()):
            for ch in _RESERVED:
                if ch in value:
                    shown = ch if ch == FIELD_SEPARATOR else repr(ch)
                    raise InvalidProfile(f"{attr.replace('_', ' ')} must not contain {shown}")

    def to_line(self) -> str:
        """Serialize to one record line (no trailing newline)."""
        return FIELD_SEPARATOR.join(self.fields())

    @classmethod
    def from_line(cls, line: str) -> "ConnectionProfile":
        """
        Parse one record line.

        Raises:
            ValueError: if the line does not have exactly five fields
        """
        parts = line.rstrip("\r\n").split(FIELD_SEPARATOR)
        if len(parts) != FIELD_COUNT:
            raise ValueError(f"expected {FIELD_COUNT} fields, found {len(parts)}")
        return cls(*parts)


@dataclass(frozen=True)
class ParseIssue:
    """A record line that could not be parsed."""
    line_number: int
    line: str
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason}"


@dataclass
class StoreListing:
    """Result of reading the record file."""
    profiles: List[ConnectionProfile] = field(default_factory=list)
    issues: List[ParseIssue] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.profiles)
