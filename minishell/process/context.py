"""
Process Context Module

Working directory and environment of the shell process, held behind one
handle so builtins mutate an explicit object rather than ambient globals.
"""

import errno
import os
from abc import ABC, abstractmethod
from typing import Mapping, MutableMapping, Optional


class ProcessContext(ABC):
    """Working directory and environment seen by commands."""

    @abstractmethod
    def getcwd(self) -> str:
        """Absolute working directory."""

    @abstractmethod
    def chdir(self, path: str) -> None:
        """Change the working directory. Raises OSError on failure."""

    @property
    @abstractmethod
    def environ(self) -> Mapping[str, str]:
        """Environment passed to executed programs."""

    @abstractmethod
    def setenv(self, name: str, value: str) -> None:
        """Set an environment variable. Raises ValueError for bad names."""

    def getenv(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.environ.get(name, default)


class OsProcessContext(ProcessContext):
    """The real process: ``os.getcwd``, ``os.chdir`` and ``os.environ``."""

    def getcwd(self) -> str:
        return os.getcwd()

    def chdir(self, path: str) -> None:
        os.chdir(path)

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ

    def setenv(self, name: str, value: str) -> None:
        os.environ[name] = value


class VirtualProcessContext(ProcessContext):
    """
    In-memory working directory and environment.

    ``chdir`` targets are still checked against the real filesystem, and
    fail the way ``os.chdir`` would. Programs started through a real
    spawner run in the real working directory.

    Example:
        >>> ctx = VirtualProcessContext(cwd='/', environ={})
        >>> ctx.chdir('tmp')
        >>> ctx.getcwd()
        '/tmp'
    """

    def __init__(
        self,
        cwd: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None
    ):
        self._cwd = os.path.abspath(cwd if cwd is not None else os.getcwd())
        self._environ: MutableMapping[str, str] = dict(
            environ if environ is not None else os.environ
        )

    def getcwd(self) -> str:
        return self._cwd

    def chdir(self, path: str) -> None:
        target = os.path.normpath(os.path.join(self._cwd, path))

        if not os.path.exists(target):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        if not os.path.isdir(target):
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        if not os.access(target, os.X_OK):
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)

        self._cwd = target

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ

    def setenv(self, name: str, value: str) -> None:
        if not name or '=' in name or '\0' in name:
            raise ValueError(f"illegal environment variable name: {name!r}")
        self._environ[name] = value
