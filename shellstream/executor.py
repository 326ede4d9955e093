"""Subprocess execution for shell streams."""

import logging
import subprocess
from dataclasses import dataclass
from typing import IO, Any, Callable, Optional

from shellstream.errors import TaskCancelled
from shellstream.protected import Protected, Task, checkpoint, current_task
from shellstream.shell import Shell, empty, handlein, sh, using
from shellstream.tools import detect_shell, reap_timeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitCode:
    """Result of running a command: ``ExitSuccess`` or ``ExitFailure``."""

    code: int

    @property
    def success(self) -> bool:
        return self.code == 0


@dataclass(frozen=True)
class ExitSuccess(ExitCode):
    """The command exited with status 0."""

    code: int = 0


@dataclass(frozen=True)
class ExitFailure(ExitCode):
    """The command exited with a non-zero status (negative: killed by signal)."""


def exit_code(returncode: int) -> ExitCode:
    """Convert a process return code into an ExitCode value."""
    if returncode == 0:
        return ExitSuccess()
    return ExitFailure(returncode)


@dataclass
class Spawned:
    """A running command and the task feeding its standard input."""

    command: str
    process: subprocess.Popen
    feeder: Task
    unregister: Callable[[], None]

    @property
    def stdout(self) -> Optional[IO[str]]:
        return self.process.stdout


def _feed(stdin: IO[str], lines: Shell[str], command: str) -> None:
    """Write every line of ``lines`` to ``stdin``, then close it."""

    def write(line: str) -> None:
        stdin.write(line + "\n")

    try:
        sh(lines.map(write))
    except BrokenPipeError:
        logger.debug("%s closed its input early", command)
    finally:
        try:
            stdin.close()
        except BrokenPipeError:
            pass


def spawn(command: str, lines: Optional[Shell[str]] = None, capture: bool = True) -> Protected[Spawned]:
    """
    Start ``command`` through the command interpreter with a feeder task.

    Args:
        command: Command line passed to the interpreter.
        lines: Lines written to the command's standard input.
        capture: Pipe standard output back to us instead of inheriting it.

    Returns:
        A Protected ``Spawned``. Releasing it cancels the feeder, closes our
        end of stdout, and waits for the process. A process still running
        after ``reap_timeout()`` seconds is terminated, then waited on.
        Spawned inside a background task, the process is also terminated
        when that task is cancelled.

    The feeder stops at its next checkpoint, so one blocked reading its own
    input (a terminal, a pipe nobody writes to) cannot be interrupted.
    Release waits ``reap_timeout()`` seconds for it after the process has
    been reaped, then logs a warning and leaves the daemon thread behind.

    Raises:
        OSError: If the interpreter cannot be started.
        Exception: On release, whatever producing ``lines`` raised, once
            the process has been reaped.
    """
    if lines is None:
        lines = empty()

    def acquire() -> tuple[Spawned, Any]:
        interpreter = detect_shell()
        process = subprocess.Popen(
            command,
            shell=True,
            executable=interpreter.path,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE if capture else None,
            text=True,
            bufsize=1,
        )
        logger.debug("spawned pid %d: %s", process.pid, command)
        assert process.stdin is not None
        feeder = Task(
            lambda: _feed(process.stdin, lines, command),
            name=f"feed-{process.pid}",
        ).start()
        task = current_task()
        unregister = task.on_cancel(process.terminate) if task else _nothing
        spawned = Spawned(
            command=command, process=process, feeder=feeder, unregister=unregister
        )
        return spawned, lambda: _reap(spawned)

    return Protected(acquire)


def _nothing() -> None:
    pass


def _reap(spawned: Spawned) -> None:
    process = spawned.process
    spawned.unregister()
    spawned.feeder.cancel()
    if process.stdout is not None:
        process.stdout.close()
    timeout = reap_timeout()
    try:
        process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning("terminating pid %d: %s", process.pid, spawned.command)
        process.terminate()
        process.wait()
    logger.debug("reaped pid %d with status %d", process.pid, process.returncode)
    if not spawned.feeder.join(timeout):
        # Blocked in a read of its own input; the daemon thread is left behind.
        logger.warning(
            "input for %s still blocked after %.1fs, not waiting for it",
            spawned.command,
            timeout,
        )
        return
    error = spawned.feeder.exception()
    if error is not None and not isinstance(error, TaskCancelled):
        raise error


def stream(command: str, lines: Optional[Shell[str]] = None) -> Shell[str]:
    """
    Stream a command's standard output as lines.

    Args:
        command: Command line passed to the interpreter.
        lines: Lines of standard input (default: none).

    Yields:
        Lines of stdout, trailing newline stripped. stderr is inherited.

    Example:
        >>> stream("tr a-z A-Z", select(["abc"])).run()
        ['ABC']
    """
    return using(spawn(command, lines, capture=True)).bind(
        lambda spawned: handlein(spawned.stdout)
    )


def system(command: str, lines: Optional[Shell[str]] = None) -> ExitCode:
    """
    Run a command, inheriting stdout and stderr, and return its exit code.

    A non-zero exit is returned as ``ExitFailure``, never raised. When called
    inside a background task, cancelling the task terminates the command.
    """
    with spawn(command, lines, capture=False) as spawned:
        returncode = spawned.process.wait()
    result = exit_code(returncode)
    logger.debug("%s exited with %r", command, result)
    # A cancelled task sees TaskCancelled, not the signal exit status.
    checkpoint()
    return result
