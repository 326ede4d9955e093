"""Filesystem operations: directory streams, handles, temporary paths.

Most functions are thin wrappers over ``os``/``shutil`` named after their
Unix counterparts. Failures surface as the builtin ``OSError`` subclasses.
"""

import contextlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import IO, Any, Optional

from shellstream.protected import Protected, checkpoint
from shellstream.shell import Fold, Shell, once
from shellstream.tools import temp_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileStatus:
    """Result of ``stat``."""

    is_file: bool
    is_directory: bool
    size: int
    modified: datetime


def _scandir(path: str) -> Protected[Any]:
    def acquire() -> tuple[Any, Any]:
        entries = os.scandir(path)
        return entries, entries.close

    return Protected(acquire)


def ls(path: str) -> Shell[str]:
    """
    Stream the immediate children of ``path`` (never ``.`` or ``..``).

    Entries come in the order the operating system returns them.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        PermissionError: If ``path`` cannot be read.
    """

    def drive(fold: Fold[str, Any]) -> Any:
        acc = fold.begin()
        with _scandir(path) as entries:
            for entry in entries:
                checkpoint()
                acc = fold.step(acc, os.path.join(path, entry.name))
        return fold.done(acc)

    return Shell(drive)


def lstree(path: str) -> Shell[str]:
    """
    Stream every descendant of ``path`` in preorder.

    Each directory is followed immediately by its own descendants, before its
    later siblings. Symbolic links to directories are listed but not entered.
    """

    def descend(child: str) -> Shell[str]:
        if testdir(child) and not os.path.islink(child):
            return once(child) + lstree(child)
        return once(child)

    return ls(path).bind(descend)


def mv(source: str, target: str) -> None:
    os.rename(source, target)


def mkdir(path: str) -> None:
    os.mkdir(path)


def mktree(path: str) -> None:
    """Create a directory tree (``mkdir -p``)."""
    os.makedirs(path, exist_ok=True)


def cp(source: str, target: str) -> None:
    shutil.copyfile(source, target)


def rm(path: str) -> None:
    os.remove(path)


def rmdir(path: str) -> None:
    """Remove an empty directory."""
    os.rmdir(path)


def rmtree(path: str) -> None:
    shutil.rmtree(path)


def du(path: str) -> int:
    """Size of a file in bytes."""
    return os.path.getsize(path)


def stat(path: str) -> FileStatus:
    info = os.stat(path)
    return FileStatus(
        is_file=os.path.isfile(path),
        is_directory=os.path.isdir(path),
        size=info.st_size,
        modified=datetime.fromtimestamp(info.st_mtime, tz=timezone.utc),
    )


def testfile(path: str) -> bool:
    return os.path.isfile(path)


def testdir(path: str) -> bool:
    return os.path.isdir(path)


def datefile(path: str) -> datetime:
    """Time the file was last modified (UTC)."""
    return stat(path).modified


def cd(path: str) -> None:
    os.chdir(path)


def pwd() -> str:
    return os.getcwd()


def home() -> str:
    return os.path.expanduser("~")


def realpath(path: str) -> str:
    return os.path.realpath(path)


# Handles


def _openhandle(path: str, mode: str) -> Protected[IO[str]]:
    def acquire() -> tuple[IO[str], Any]:
        handle = open(path, mode)
        return handle, handle.close

    return Protected(acquire)


def readhandle(path: str) -> Protected[IO[str]]:
    """A read-only handle, closed on release."""
    return _openhandle(path, "r")


def writehandle(path: str) -> Protected[IO[str]]:
    """A write-only handle (truncating), closed on release."""
    return _openhandle(path, "w")


def appendhandle(path: str) -> Protected[IO[str]]:
    """An append-only handle, closed on release."""
    return _openhandle(path, "a")


# Temporary paths


def mktemp(parent: Optional[str] = None, prefix: str = "tmp") -> Protected[tuple[str, IO[str]]]:
    """
    Create a temporary file under ``parent``.

    Args:
        parent: Directory to create it in (default: ``temp_root()``).
        prefix: File name prefix.

    Returns:
        A Protected ``(path, handle)``. Release closes the handle and deletes
        the file; a file already removed by the body is not an error.
    """

    def acquire() -> tuple[tuple[str, IO[str]], Any]:
        fd, path = tempfile.mkstemp(prefix=prefix, dir=parent or temp_root())
        handle = os.fdopen(fd, "w+")

        def release() -> None:
            try:
                handle.close()
            finally:
                with contextlib.suppress(FileNotFoundError):
                    os.remove(path)
                logger.debug("removed temporary file %s", path)

        return (path, handle), release

    return Protected(acquire)


def mktempdir(parent: Optional[str] = None, prefix: str = "tmp") -> Protected[str]:
    """
    Create a temporary directory under ``parent``.

    Release deletes the directory and everything in it.

    Example:
        >>> with mktempdir() as scratch:
        ...     touch(os.path.join(scratch, "marker"))
    """

    def acquire() -> tuple[str, Any]:
        path = tempfile.mkdtemp(prefix=prefix, dir=parent or temp_root())

        def release() -> None:
            if os.path.isdir(path):
                shutil.rmtree(path)
            logger.debug("removed temporary directory %s", path)

        return path, release

    return Protected(acquire)
