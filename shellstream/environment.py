"""Environment variable access."""

import os
from typing import Optional


def export(key: str, value: str) -> None:
    """Set or modify an environment variable."""
    os.environ[key] = value


def unset(key: str) -> None:
    """Delete an environment variable; unknown keys are ignored."""
    os.environ.pop(key, None)


def need(key: str) -> Optional[str]:
    """Look up an environment variable, or None if it is not set."""
    return os.environ.get(key)


def env() -> list[tuple[str, str]]:
    """All environment variables as ``(key, value)`` pairs."""
    return list(os.environ.items())
