"""
Redirection Manager

Descriptor operations behind every simple command and every pipe:

- ``redirect``: open a path and move it onto a standard descriptor
- ``save`` / ``restore``: keep a copy of a descriptor and put it back
- ``std_streams_saved``: scoped save/restore of stdin, stdout and stderr

Every failure here is fatal: an open that still fails after the
create-on-missing retry, or a dup/dup2/close that fails, means the
descriptor table can no longer be trusted.
"""

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from minishell.core.config_loader import get_config
from minishell.exceptions import DescriptorError, RedirectionError
from minishell.logger import get_logger


STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2

_logger = get_logger('redirection')


class OpenMode(Enum):
    """How a redirection target is opened."""
    TRUNCATE = os.O_WRONLY | os.O_TRUNC
    APPEND = os.O_WRONLY | os.O_APPEND
    READ = os.O_RDONLY


def flush_stdio() -> None:
    """Push Python-level buffers to their descriptors before they move."""
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()


def write_fd(fd: int, text: str) -> None:
    """Write text straight to a descriptor, bypassing Python buffering."""
    data = text.encode()
    while data:
        written = os.write(fd, data)
        data = data[written:]


def _open_target(target_fd: int, path: str, mode: OpenMode) -> int:
    try:
        return os.open(path, mode.value)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise RedirectionError(f"open: {e.strerror}", path=path, fd=target_fd)

    create_mode = get_config().executor.create_mode
    _logger.debug(
        "Creating missing redirection target",
        context={'path': path, 'mode': oct(create_mode)}
    )
    try:
        return os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, create_mode)
    except OSError as e:
        raise RedirectionError(f"open: {e.strerror}", path=path, fd=target_fd)


def redirect(target_fd: int, path: str, mode: OpenMode) -> None:
    """
    Open ``path`` and install it as ``target_fd``.

    A path that does not exist is created (write, truncate) with the
    configured permissions, whatever ``mode`` asked for.

    Args:
        target_fd: Descriptor number to replace (0, 1 or 2)
        path: Resolved redirection target
        mode: How to open the target

    Raises:
        RedirectionError: If the target cannot be opened
        DescriptorError: If the new file cannot be moved onto target_fd
    """
    new_fd = _open_target(target_fd, path, mode)
    flush_stdio()
    replace(new_fd, target_fd)
    close(new_fd)
    _logger.debug(
        "Redirected descriptor",
        context={'fd': target_fd, 'path': path, 'mode': mode.name}
    )


def save(fd: int) -> int:
    """Duplicate ``fd`` and return the copy."""
    try:
        return os.dup(fd)
    except OSError as e:
        raise DescriptorError(f"dup: {e.strerror}", fd=fd)


def replace(source_fd: int, target_fd: int) -> None:
    """Make ``target_fd`` refer to what ``source_fd`` refers to."""
    try:
        os.dup2(source_fd, target_fd)
    except OSError as e:
        raise DescriptorError(f"dup2: {e.strerror}", fd=target_fd)


def close(fd: int) -> None:
    """Close ``fd``."""
    try:
        os.close(fd)
    except OSError as e:
        raise DescriptorError(f"close: {e.strerror}", fd=fd)


def restore(fd: int, saved_fd: int) -> None:
    """Point ``fd`` back at ``saved_fd``'s target and release the copy."""
    replace(saved_fd, fd)
    close(saved_fd)


@dataclass
class SavedStreams:
    """Copies of the three standard descriptors."""
    stdin: int
    stdout: int
    stderr: int
    released: bool = False

    @classmethod
    def capture(cls) -> 'SavedStreams':
        flush_stdio()
        return cls(
            stdin=save(STDIN_FILENO),
            stdout=save(STDOUT_FILENO),
            stderr=save(STDERR_FILENO),
        )

    def reinstate(self, fd: int) -> None:
        """Put one standard descriptor back, keeping the copy."""
        flush_stdio()
        replace(self._copy_of(fd), fd)

    def restore(self) -> None:
        """Put all three descriptors back and release the copies."""
        if self.released:
            return
        flush_stdio()
        restore(STDIN_FILENO, self.stdin)
        restore(STDOUT_FILENO, self.stdout)
        restore(STDERR_FILENO, self.stderr)
        self.released = True

    def _copy_of(self, fd: int) -> int:
        copies = {
            STDIN_FILENO: self.stdin,
            STDOUT_FILENO: self.stdout,
            STDERR_FILENO: self.stderr,
        }
        try:
            return copies[fd]
        except KeyError:
            raise DescriptorError(f"not a standard descriptor: {fd}", fd=fd)


@contextmanager
def std_streams_saved() -> Iterator[SavedStreams]:
    """
    Save stdin, stdout and stderr; restore them when the block exits,
    however it exits.

    Example:
        >>> with std_streams_saved():
        ...     redirect(STDOUT_FILENO, 'out.txt', OpenMode.TRUNCATE)
        ...     write_fd(STDOUT_FILENO, 'hi\\n')
    """
    saved = SavedStreams.capture()
    try:
        yield saved
    finally:
        saved.restore()
