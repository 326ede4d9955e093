"""Cross-platform command interpreter detection and runtime settings."""

import os
import platform
import shutil
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from shellstream.errors import ConfigurationError

DEFAULT_REAP_TIMEOUT = 5.0


@dataclass(frozen=True)
class ToolInfo:
    """Information about an available tool."""

    name: str
    path: str
    version: Optional[str] = None


@lru_cache(maxsize=1)
def get_platform() -> str:
    """Return 'darwin' for macOS, 'linux' for Linux, 'windows' for Windows."""
    return platform.system().lower()


@lru_cache(maxsize=1)
def detect_shell() -> ToolInfo:
    """
    Detect the command interpreter used by ``stream`` and ``system``.

    Preference order: ``sh`` on POSIX, ``%COMSPEC%`` (or ``cmd``) on Windows.
    Can be overridden with SHELLSTREAM_SHELL env var.

    Raises:
        ConfigurationError: If the override does not resolve to an executable.
        RuntimeError: If no interpreter can be found.
    """
    override = os.environ.get("SHELLSTREAM_SHELL")
    if override:
        path = shutil.which(override)
        if not path:
            raise ConfigurationError(
                f"SHELLSTREAM_SHELL={override!r} is not an executable on PATH"
            )
        return ToolInfo(name=os.path.basename(override), path=path)

    if get_platform() == "windows":
        comspec = os.environ.get("COMSPEC") or shutil.which("cmd")
        if comspec:
            return ToolInfo(name="cmd", path=comspec)
    else:
        path = shutil.which("sh") or ("/bin/sh" if os.path.exists("/bin/sh") else None)
        if path:
            return ToolInfo(name="sh", path=path)

    raise RuntimeError("No command interpreter found")


@lru_cache(maxsize=1)
def reap_timeout() -> float:
    """
    Seconds to wait for a child process during teardown before terminating it.

    Can be overridden with SHELLSTREAM_REAP_TIMEOUT env var.

    Raises:
        ConfigurationError: If the override is not a non-negative number.
    """
    override = os.environ.get("SHELLSTREAM_REAP_TIMEOUT")
    if not override:
        return DEFAULT_REAP_TIMEOUT
    try:
        value = float(override)
    except ValueError:
        raise ConfigurationError(
            f"SHELLSTREAM_REAP_TIMEOUT must be a number, got {override!r}"
        ) from None
    if value < 0:
        raise ConfigurationError("SHELLSTREAM_REAP_TIMEOUT must not be negative")
    return value


@lru_cache(maxsize=1)
def temp_root() -> str:
    """Default parent directory for temporary files and directories.

    Can be overridden with SHELLSTREAM_TMPDIR env var.
    """
    override = os.environ.get("SHELLSTREAM_TMPDIR")
    if override:
        if not os.path.isdir(override):
            raise ConfigurationError(
                f"SHELLSTREAM_TMPDIR={override!r} is not a directory"
            )
        return override
    return tempfile.gettempdir()


def clear_tool_cache() -> None:
    """Clear all cached detection results and settings.

    Use this after changing environment variables (SHELLSTREAM_SHELL,
    SHELLSTREAM_TMPDIR, SHELLSTREAM_REAP_TIMEOUT) to pick up new values.

    Example:
        >>> from shellstream.tools import clear_tool_cache
        >>> clear_tool_cache()
    """
    get_platform.cache_clear()
    detect_shell.cache_clear()
    reap_timeout.cache_clear()
    temp_root.cache_clear()
