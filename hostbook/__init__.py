# hostbook: personal SSH connection manager
# License: MIT

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


def _read_local_version() -> str:
    """Version from pyproject.toml for source checkouts that are not installed."""
    try:
        text = (Path(__file__).resolve().parents[1] / "pyproject.toml").read_text(encoding="utf-8")
    except OSError:
        return "0.0.0-dev"
    match = re.search(r'^version\s*=\s*"([^"]+)"', text, flags=re.MULTILINE)
    return match.group(1) if match else "0.0.0-dev"


try:
    __version__ = version("hostbook")
except PackageNotFoundError:
    __version__ = _read_local_version()
