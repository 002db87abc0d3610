"""Session state and settings shared by every command of one script run."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .shell.interp import DEFAULT_EXEC_TIMEOUT


@dataclass(frozen=True)
class Settings:
    """Resolved run settings."""

    event_path: str
    exec_timeout: float


def resolve_settings(
    event_option: Optional[str] = None,
    timeout_option: Optional[float] = None,
) -> Settings:
    """Resolve settings from CLI options and the environment.

    Resolution order for each setting:
    1. CLI option (explicit override)
    2. Environment variable ($SENSU_SH_EVENT, $SENSU_SH_EXEC_TIMEOUT)
    3. Default ("-" meaning stdin, and 5 seconds)

    Args:
        event_option: Value of -E/--event if given
        timeout_option: Value of --exec-timeout if given

    Returns:
        Settings

    Raises:
        ValueError: If $SENSU_SH_EXEC_TIMEOUT is not a positive number
    """
    event_path = event_option or os.environ.get("SENSU_SH_EVENT") or "-"

    if timeout_option is not None:
        timeout = timeout_option
    else:
        env_timeout = os.environ.get("SENSU_SH_EXEC_TIMEOUT")
        if env_timeout:
            try:
                timeout = float(env_timeout)
            except ValueError:
                msg = f"SENSU_SH_EXEC_TIMEOUT: invalid number {env_timeout!r}"
                raise ValueError(msg) from None
        else:
            timeout = DEFAULT_EXEC_TIMEOUT

    if timeout <= 0:
        msg = f"exec timeout must be positive, got {timeout:g}"
        raise ValueError(msg)

    return Settings(event_path=event_path, exec_timeout=timeout)


@dataclass(frozen=True)
class Session:
    """Read-only state for one script run.

    The event document is loaded once before the script starts and is
    never modified; every ``event`` command reads the same mapping.
    """

    event: Dict[str, Any]
    settings: Settings
