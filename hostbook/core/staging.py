# hostbook staging directory helpers

from pathlib import Path
from typing import List


def list_staged_entries(staging_dir: Path) -> List[Path]:
    """Top-level entries of the staging directory, sorted by name (empty if missing)."""
    if not staging_dir.is_dir():
        return []
    return sorted(staging_dir.iterdir(), key=lambda p: p.name.lower())


def render_staging_tree(staging_dir: Path) -> List[str]:
    """
    Render the staging directory as indented lines for confirmation.

    Directories end with "/". An empty or missing directory renders as
    a single "(no files)" line.
    """
    lines: List[str] = []

    def walk(directory: Path, depth: int) -> None:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
            indent = "  " * depth
            if entry.is_dir():
                lines.append(f"{indent}{entry.name}/")
                walk(entry, depth + 1)
            else:
                lines.append(f"{indent}{entry.name}")

    if staging_dir.is_dir():
        walk(staging_dir, 0)

    if not lines:
        lines.append("(no files)")
    return lines
