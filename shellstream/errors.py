"""Exceptions raised by shellstream.

Filesystem and process failures surface as the builtin ``OSError`` family
(``FileNotFoundError``, ``PermissionError``, ...) and are never wrapped.
"""


class ShellStreamError(Exception):
    """Base class for errors raised by shellstream itself."""


class ConfigurationError(ShellStreamError):
    """An environment override holds an unusable value."""


class TaskCancelled(BaseException):
    """Raised inside a background task once it has been cancelled.

    Derives from ``BaseException`` so that ``except Exception`` blocks in
    user code do not swallow the cancellation.
    """
