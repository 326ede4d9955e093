"""Guarded resources and background tasks.

A ``Protected`` value pairs an acquisition with its release. Entering it with
``with`` acquires the resource; leaving the block releases it exactly once,
whether the block returned, raised, or was interrupted by cancellation.

Background work runs in a ``Task`` (one thread each). Cancellation is
cooperative: a cancelled task raises ``TaskCancelled`` at its next
``checkpoint()`` or ``sleep()``, and blocking operations can register
``on_cancel`` callbacks (for example to terminate a child process).
"""

import logging
import threading
import time
from types import TracebackType
from typing import Callable, Generic, Optional, TypeVar

from shellstream.errors import TaskCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

Release = Callable[[], None]


class _Once:
    """Wrap a release function so it only ever runs once."""

    def __init__(self, release: Release):
        self._release = release
        self._lock = threading.Lock()
        self._fired = False

    def __call__(self) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        self._release()


class Protected(Generic[T]):
    """
    A resource with a guaranteed release.

    Args:
        acquire: Callable returning ``(value, release)``. It is called once per
            ``with`` entry, so one ``Protected`` can be entered many times.

    Example:
        >>> def acquire():
        ...     f = open("notes.txt")
        ...     return f, f.close
        >>> with Protected(acquire) as f:
        ...     f.readline()

    If the body raises and the release also fails, the release error is logged
    and the body's exception propagates. If the body succeeded, the release
    error propagates.
    """

    def __init__(self, acquire: Callable[[], tuple[T, Release]]):
        self._acquire = acquire
        self._local = threading.local()

    @classmethod
    def pure(cls, value: T) -> "Protected[T]":
        """A resource with nothing to release."""
        return cls(lambda: (value, _noop))

    def acquire(self) -> tuple[T, Release]:
        """Acquire the resource, returning the value and a run-once release."""
        value, release = self._acquire()
        return value, _Once(release)

    def map(self, fn: Callable[[T], U]) -> "Protected[U]":
        def acquire() -> tuple[U, Release]:
            value, release = self.acquire()
            try:
                return fn(value), release
            except BaseException:
                release()
                raise

        return Protected(acquire)

    def __enter__(self) -> T:
        value, release = self.acquire()
        self._releases().append(release)
        return value

    def __exit__(
        self,
        exc_type: Optional[type],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        release = self._releases().pop()
        if exc is None:
            release()
            return False
        try:
            release()
        except Exception:
            logger.error("release failed while unwinding %r", exc, exc_info=True)
        return False

    def _releases(self) -> list:
        # Per-thread stack so nested and concurrent entries pair up correctly.
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack


def _noop() -> None:
    pass


_current = threading.local()


class Task(Generic[T]):
    """
    A function running on its own thread.

    Args:
        fn: Zero-argument callable to run.
        name: Optional thread name.
    """

    def __init__(self, fn: Callable[[], T], name: Optional[str] = None):
        self._fn = fn
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._result: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> "Task[T]":
        self._thread.start()
        logger.debug("started task %s", self._thread.name)
        return self

    def _run(self) -> None:
        _current.task = self
        try:
            self._result = self._fn()
        except TaskCancelled as exc:
            self._error = exc
            logger.debug("task %s cancelled", self._thread.name)
        except BaseException as exc:
            self._error = exc
            logger.debug("task %s failed: %r", self._thread.name, exc)

    def cancel(self) -> None:
        """Request cancellation and fire the registered callbacks.

        Does not wait for the task to stop; use ``join`` for that.
        """
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.error("cancel callback failed", exc_info=True)

    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register ``callback`` to run when the task is cancelled.

        Runs immediately if the task is already cancelled.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)

                def remove() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return remove
        callback()
        return _noop

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread to finish. Returns True if it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def wait(self) -> T:
        """
        Block until the task finishes and return its result.

        Raises:
            TaskCancelled: If the task was cancelled.
            Exception: Whatever the task's function raised.
        """
        self._thread.join()
        if self._error is not None:
            raise self._error
        return self._result  # type: ignore[return-value]

    def exception(self) -> Optional[BaseException]:
        """The error the task finished with, or None."""
        return self._error

    def _sleep(self, seconds: float) -> None:
        if self._cancelled.wait(seconds):
            raise TaskCancelled()


def current_task() -> Optional[Task]:
    """Return the Task running on this thread, if any."""
    return getattr(_current, "task", None)


def checkpoint() -> None:
    """Raise TaskCancelled if the current task has been cancelled."""
    task = current_task()
    if task is not None and task.cancelled():
        raise TaskCancelled()


def sleep(seconds: float) -> None:
    """Sleep for ``seconds``; inside a task, wake early on cancellation."""
    task = current_task()
    if task is None:
        time.sleep(seconds)
    else:
        task._sleep(seconds)


def fork(fn: Callable[[], T], name: Optional[str] = None) -> Protected[Task[T]]:
    """
    Run ``fn`` in a background task for the duration of a scope.

    Leaving the scope cancels the task and waits for its thread to finish.
    The wait is unbounded: a body that blocks outside ``checkpoint()`` and
    ``sleep()`` (``time.sleep``, a blocking read) holds up the scope exit
    until it returns.

    Example:
        >>> with fork(lambda: system("sleep 60")) as task:
        ...     pass  # the child process is terminated and reaped here
    """

    def acquire() -> tuple[Task[T], Release]:
        task = Task(fn, name=name).start()

        def release() -> None:
            task.cancel()
            task.join()
            logger.debug("joined task %s", task._thread.name)

        return task, release

    return Protected(acquire)


def wait(task: Task[T]) -> T:
    """Block until ``task`` finishes, returning its result."""
    return task.wait()
