# hostbook configuration loading

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .constants import CONFIG_FILENAME, DEFAULT_USER, default_app_dir


def ensure_app_dir(app_dir: Path) -> None:
    """Ensure the application directory exists."""
    app_dir.mkdir(parents=True, exist_ok=True)


def get_default_config() -> Dict[str, Any]:
    """Get the default configuration."""
    return {
        # Flat record file, one profile per line
        "store_file": "connections.txt",
        # Private keys bundled with hostbook data; checked first
        "keys_dir": "keys",
        # Checked when a key is missing from keys_dir
        "fallback_keys_dir": "~/.ssh",
        # Local staging directory copied by the migrate action
        "migration_dir": "migration",
        # Destination on the remote host, relative to the remote home
        "remote_migration_dir": "migration",
        "default_user": DEFAULT_USER,
        "ssh": {
            "connect_timeout": 10,
            "strict_host_key_checking": "accept-new",
            "ssh_bin": "ssh",
            "scp_bin": "scp",
        },
        "log": {
            "enabled": True,
            "file": "logs/activity.jsonl",
        },
    }


def merge_dicts(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with overriding values

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def load_config(config_file: Path) -> Dict[str, Any]:
    """
    Load a configuration file and merge it over the defaults.

    Args:
        config_file: Path to config.yaml

    Returns:
        Configuration dictionary
    """
    defaults = get_default_config()
    if not config_file.exists():
        return defaults

    with open(config_file, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Invalid config file (expected a mapping): {config_file}")

    return merge_dicts(defaults, config)


def save_config(config: Dict[str, Any], config_file: Path) -> None:
    """
    Save the configuration file.

    Args:
        config: Configuration dictionary
        config_file: Destination path
    """
    ensure_app_dir(config_file.parent)

    with open(config_file, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a configuration value by dot-separated path.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "ssh.connect_timeout")
        default: Default value if not found

    Returns:
        Configuration value
    """
    value = config
    for key in path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0", "")


def _as_bool(value: Any, default: bool) -> bool:
    """Read a YAML flag that may have been written as a quoted string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def _resolve_path(app_dir: Path, raw: Any) -> Path:
    path = Path(str(raw)).expanduser()
    if path.is_absolute():
        return path
    return app_dir / path


@dataclass
class AppConfig:
    """Resolved settings, built once at startup and passed to every component."""
    app_dir: Path
    config_file: Path
    store_file: Path
    keys_dir: Path
    fallback_keys_dir: Path
    migration_dir: Path
    remote_migration_dir: str
    default_user: str
    connect_timeout: int
    strict_host_key_checking: str
    ssh_bin: str
    scp_bin: str
    log_enabled: bool
    log_file: Path

    @classmethod
    def from_dict(cls, config: Dict[str, Any], app_dir: Path, config_file: Optional[Path] = None) -> "AppConfig":
        try:
            connect_timeout = int(get_config_value(config, "ssh.connect_timeout", 10))
        except (TypeError, ValueError):
            connect_timeout = 10

        default_user = str(config.get("default_user") or "").strip() or DEFAULT_USER

        return cls(
            app_dir=app_dir,
            config_file=config_file or app_dir / CONFIG_FILENAME,
            store_file=_resolve_path(app_dir, config["store_file"]),
            keys_dir=_resolve_path(app_dir, config["keys_dir"]),
            fallback_keys_dir=_resolve_path(app_dir, config["fallback_keys_dir"]),
            migration_dir=_resolve_path(app_dir, config["migration_dir"]),
            remote_migration_dir=str(config.get("remote_migration_dir") or "migration"),
            default_user=default_user,
            connect_timeout=connect_timeout,
            strict_host_key_checking=str(get_config_value(config, "ssh.strict_host_key_checking", "accept-new")),
            ssh_bin=str(get_config_value(config, "ssh.ssh_bin", "ssh")),
            scp_bin=str(get_config_value(config, "ssh.scp_bin", "scp")),
            log_enabled=_as_bool(get_config_value(config, "log.enabled", True), True),
            log_file=_resolve_path(app_dir, get_config_value(config, "log.file", "logs/activity.jsonl")),
        )


def load_app_config(app_dir: Optional[Path] = None) -> AppConfig:
    """
    Build the AppConfig for this run.

    Args:
        app_dir: Application directory (defaults to $HOSTBOOK_HOME or ~/.config/hostbook)

    Returns:
        Resolved AppConfig
    """
    app_dir = app_dir or default_app_dir()
    ensure_app_dir(app_dir)
    config_file = app_dir / CONFIG_FILENAME
    return AppConfig.from_dict(load_config(config_file), app_dir, config_file)
