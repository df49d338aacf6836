"""Utilities for running the daemon with single-instance and shutdown handling."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Coroutine, Optional

try:
    import fcntl
except ImportError:  # pragma: no cover - fcntl unavailable on non-POSIX platforms  # policy_guard: allow-silent-handler
    fcntl = None

logger = logging.getLogger(__name__)


class SingleInstanceError(RuntimeError):
    """Raised when another instance of the same service is already running."""


def _default_runtime_dir() -> Path:
    env_override = os.getenv("LOCKWATCH_RUNTIME_DIR")
    if env_override:
        return Path(env_override).expanduser()
    return Path(tempfile.gettempdir()) / f"lockwatch-{os.getuid()}"


class ServiceInstanceLock:
    """File-lock based guard to enforce a single daemon per user and lock name."""

    def __init__(self, service_name: str, runtime_dir: Optional[Path] = None) -> None:
        self.service_name = service_name
        self.runtime_dir = runtime_dir or _default_runtime_dir()
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.runtime_dir / f"{service_name}.lock"
        self._fd: Optional[int] = None
        self._released = False

    def acquire(self) -> None:
        """Attempt to acquire the lock; raises if already held."""

        if fcntl is None:  # pragma: no cover - non-POSIX platforms
            raise SingleInstanceError("Single instance enforcement requires fcntl on this platform.")

        fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as exc:
            existing_pid = _read_pid(fd)
            os.close(fd)
            suffix = f" (PID {existing_pid})." if existing_pid else "."
            raise SingleInstanceError(f"Service '{self.service_name}' appears to be running already" + suffix) from exc

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode("utf-8"))
        os.fsync(fd)
        self._fd = fd

    def release(self) -> None:
        """Release the lock and clean up the lock file."""

        if self._released:
            return

        if self._fd is not None:
            try:
                if fcntl is not None:
                    fcntl.flock(self._fd, fcntl.LOCK_UN)
            finally:
                os.close(self._fd)
                self._fd = None

        try:
            self.lock_path.unlink()
        except FileNotFoundError:  # policy_guard: allow-silent-handler
            logger.debug("Lock file %s already removed", self.lock_path)

        self._released = True


def _read_pid(fd: int) -> Optional[str]:
    try:
        os.lseek(fd, 0, os.SEEK_SET)
        data = os.read(fd, 32).decode("utf-8", errors="replace").strip()
    except OSError:  # Best-effort PID inspection  # policy_guard: allow-silent-handler
        return None
    return data or None


@contextmanager
def single_instance_guard(service_name: str, runtime_dir: Optional[Path] = None):
    """Context manager enforcing one running instance per service name."""

    lock = ServiceInstanceLock(service_name, runtime_dir)
    lock.acquire()
    try:
        yield lock
    finally:
        lock.release()


ServiceFactory = Callable[[], Coroutine[Any, Any, None]]


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str,
    runtime_dir: Optional[Path] = None,
    shutdown_message: Optional[str] = None,
) -> None:
    """Run an async service with single-instance and Ctrl+C handling.

    Args:
        factory: Callable returning the coroutine to execute.
        service_name: Identifier used for the instance lock file. Agents
            with different names run side by side.
        runtime_dir: Directory for the lock file; defaults to
            ``LOCKWATCH_RUNTIME_DIR`` or a per-user temp directory.
        shutdown_message: Optional custom message when interrupted.

    Raises:
        SingleInstanceError: When another instance holds the same lock.
    """

    with single_instance_guard(service_name, runtime_dir):
        try:
            asyncio.run(factory())
        except KeyboardInterrupt:  # Expected exception in operation  # policy_guard: allow-silent-handler
            if shutdown_message:
                logger.info(shutdown_message)
            else:
                logger.info("%s interrupted by user", service_name)
