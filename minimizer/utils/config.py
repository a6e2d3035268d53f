import os
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from minimizer.utils.exceptions import ConfigError
from minimizer.utils.logging import get_logger

ENV_PREFIX = "HYPRLAND_MINIMIZER_"
MENU_VARIANTS = ("minimal", "extended")

def get_default_config() -> Dict[str, Any]:
    """Returns default configuration settings."""
    return {
        "development": False,  # Enable debug logging
        "menu_variant": "extended",
        "poll_interval": 2.0,
        "special_workspace": "minimized",
        "bus_name_prefix": "org.kde.StatusNotifierItem.minimizer",
        "hyprctl": "hyprctl",
        "command_timeout": None,  # Seconds; None waits forever
        "log_file": None,
    }

def _coerce(key: str, raw: str, default: Any) -> Any:
    """Convert an environment string to the type of the default value."""
    try:
        if isinstance(default, bool):
            lowered = raw.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        if isinstance(default, float) or key == "command_timeout":
            if key == "command_timeout" and raw.strip().lower() in ("", "none"):
                return None
            return float(raw)
        if isinstance(default, int):
            return int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{key.upper()}: {e}")
    if raw == "" and default is None:
        return None
    return raw

def apply_env_overrides(config: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Replace config values with HYPRLAND_MINIMIZER_* environment variables."""
    environ = os.environ if environ is None else environ
    result = dict(config)
    defaults = get_default_config()

    for key in defaults:
        env_var = f"{ENV_PREFIX}{key.upper()}"
        if env_var in environ:
            result[key] = _coerce(key, environ[env_var], defaults[key])

    return result

def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Check config values, raising ConfigError on the first bad one."""
    if config.get("menu_variant") not in MENU_VARIANTS:
        raise ConfigError(
            f"menu_variant must be one of {', '.join(MENU_VARIANTS)}, got {config.get('menu_variant')!r}"
        )

    poll_interval = config.get("poll_interval")
    if not isinstance(poll_interval, (int, float)) or poll_interval <= 0:
        raise ConfigError(f"poll_interval must be a positive number, got {poll_interval!r}")

    timeout = config.get("command_timeout")
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ConfigError(f"command_timeout must be a positive number or unset, got {timeout!r}")

    if not config.get("special_workspace"):
        raise ConfigError("special_workspace must not be empty")

    if not config.get("bus_name_prefix"):
        raise ConfigError("bus_name_prefix must not be empty")

    return config

def load_config(overrides: Optional[Dict[str, Any]] = None, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Build the runtime configuration.

    Defaults are overlaid with environment variables (a .env file in the
    working directory is loaded first) and then with explicit overrides,
    usually from the command line. Overrides whose value is None are ignored.
    """
    if environ is None:
        if load_dotenv():
            get_logger(__name__).debug("Loaded environment from .env")

    config = apply_env_overrides(get_default_config(), environ)

    for key, value in (overrides or {}).items():
        if key not in config:
            raise ConfigError(f"Unknown configuration key: {key}")
        if value is not None:
            config[key] = value

    return validate_config(config)
