# hostbook constants
# Default locations and record format

import os
from pathlib import Path

APP_NAME = "hostbook"

# Environment variable that relocates the whole application directory
HOME_ENV_VAR = "HOSTBOOK_HOME"

DEFAULT_APP_DIR = Path.home() / ".config" / APP_NAME
CONFIG_FILENAME = "config.yaml"

# Record file format: name|description|address|user|key_file
FIELD_SEPARATOR = "|"
FIELD_NAMES = ("name", "description", "address", "user", "key_file")
FIELD_COUNT = len(FIELD_NAMES)

DEFAULT_USER = "ubuntu"


def default_app_dir() -> Path:
    """Return the application directory, honoring $HOSTBOOK_HOME."""
    override = os.getenv(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return DEFAULT_APP_DIR
