"""
Process Spawner Module

The narrow capability the evaluator uses to run work in a new process:

    handle = spawner.spawn(target)   # run target() in a child
    status = spawner.wait(handle)    # block until it terminates

``ForkSpawner`` does this with real OS processes. ``InlineSpawner`` runs
each target to completion inside the calling process, which lets the
evaluator's branching be exercised without forking.
"""

import contextlib
import errno
import os
import signal
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, NoReturn, Optional

from minishell.core.config_loader import get_config
from minishell.exceptions import ExecError, ForkError, ShellException, WaitError
from minishell.ipc.descriptors import STDERR_FILENO, flush_stdio, write_fd
from minishell.logger import get_logger
from .states import EXIT_FAILURE, EXIT_SUCCESS, ProcessState, exit_code


Target = Callable[[], int]
Program = Callable[[List[str], Mapping[str, str]], int]


@dataclass
class ProcessHandle:
    """A child process created by a spawner."""
    pid: int
    status: Optional[int] = None
    state: ProcessState = ProcessState.RUNNING

    def mark_reaped(self, status: int) -> None:
        self.status = status
        self.state = ProcessState.REAPED


class Spawner(ABC):
    """Process creation, reaping and program execution."""

    @abstractmethod
    def spawn(self, target: Target, close_fds: Iterable[int] = ()) -> ProcessHandle:
        """
        Run ``target()`` in a new process.

        Args:
            target: Callable returning the child's status
            close_fds: Descriptors the child must not keep open

        Returns:
            Handle of the new process
        """

    @abstractmethod
    def wait(self, handle: ProcessHandle) -> int:
        """Block until the process terminates; return its exit status."""

    @abstractmethod
    def exec(self, argv: List[str], environ: Mapping[str, str]) -> int:
        """
        Replace the current process image with ``argv[0]``.

        Raises OSError when the program cannot be executed. Only a
        simulated spawner returns, with the program's exit status.
        """


class ForkSpawner(Spawner):
    """
    Spawner backed by ``os.fork``/``os.waitpid``/``os.execvpe``.

    A child never returns into the caller's code: whatever the target
    does, the child leaves through ``os._exit``.
    """

    def __init__(self):
        self._logger = get_logger('process')

    def spawn(self, target: Target, close_fds: Iterable[int] = ()) -> ProcessHandle:
        close_fds = tuple(close_fds)
        flush_stdio()

        try:
            pid = os.fork()
        except OSError as e:
            raise ForkError(f"fork: {e.strerror}", errno=e.errno)

        if pid == 0:
            self._run_child(target, close_fds)

        self._logger.debug("Spawned child", pid=pid)
        return ProcessHandle(pid=pid)

    def _run_child(self, target: Target, close_fds: tuple[int, ...]) -> NoReturn:
        status = EXIT_FAILURE
        try:
            # Python ignores SIGPIPE; programs started from here must not.
            signal.signal(signal.SIGPIPE, signal.SIG_DFL)
            for fd in close_fds:
                os.close(fd)
            status = exit_code(target())
        except SystemExit as e:
            if e.code is None:
                status = EXIT_SUCCESS
            elif isinstance(e.code, int):
                status = e.code & 0xFF
            else:
                status = EXIT_FAILURE
        except KeyboardInterrupt:
            status = 128 + signal.SIGINT
        except ShellException as e:
            self._logger.critical(f"Fatal error: {e}", pid=os.getpid())
            write_fd(STDERR_FILENO, f"minishell: {e}\n")
        except Exception as e:
            self._logger.exception("Unexpected error in child process", exc=e)
            write_fd(STDERR_FILENO, f"minishell: {type(e).__name__}: {e}\n")
        finally:
            # stdio may already be unusable; the exit below must still happen
            with contextlib.suppress(OSError, ValueError):
                flush_stdio()
            os._exit(status)

    def wait(self, handle: ProcessHandle) -> int:
        if handle.state is ProcessState.REAPED:
            return handle.status

        try:
            _, wstatus = os.waitpid(handle.pid, 0)
        except ChildProcessError as e:
            raise WaitError(f"waitpid: {e.strerror}", pid=handle.pid)

        status = os.waitstatus_to_exitcode(wstatus)
        if status < 0:
            status = 128 - status  # killed by signal -status

        handle.mark_reaped(status)
        self._logger.debug("Reaped child", pid=handle.pid, context={'status': status})
        return status

    def exec(self, argv: List[str], environ: Mapping[str, str]) -> int:
        if not argv:
            raise ExecError("Empty argument vector")
        if get_config().executor.search_path:
            os.execvpe(argv[0], argv, environ)
        else:
            os.execve(argv[0], argv, environ)
        raise AssertionError("exec returned")


class InlineSpawner(Spawner):
    """
    Simulated spawner.

    ``spawn`` runs the target immediately, in the calling process, and
    keeps its status until ``wait`` collects it. ``exec`` dispatches to
    registered fake programs instead of replacing the process image.

    Because a pipe's writer runs to completion before its reader starts,
    whatever it writes must fit in the OS pipe buffer.

    Example:
        >>> spawner = InlineSpawner({'true': lambda argv, env: 0})
        >>> handle = spawner.spawn(lambda: spawner.exec(['true'], {}))
        >>> spawner.wait(handle)
        0
    """

    def __init__(
        self,
        programs: Optional[Mapping[str, Program]] = None,
        first_pid: int = 1000
    ):
        self._logger = get_logger('process')
        self.programs: dict[str, Program] = dict(programs or {})
        self.spawned: List[ProcessHandle] = []
        self.reaped: List[ProcessHandle] = []
        self.executed: List[List[str]] = []
        self._results: dict[int, int] = {}
        self._next_pid = first_pid

    def register(self, name: str, program: Program) -> None:
        """Register a fake program under ``name``."""
        self.programs[name] = program

    def spawn(self, target: Target, close_fds: Iterable[int] = ()) -> ProcessHandle:
        handle = ProcessHandle(pid=self._next_pid)
        self._next_pid += 1
        self.spawned.append(handle)
        self._logger.debug("Spawned simulated child", pid=handle.pid)

        try:
            status = exit_code(target())
        except ShellException as e:
            self._logger.critical(f"Fatal error: {e}", pid=handle.pid)
            status = EXIT_FAILURE

        self._results[handle.pid] = status
        return handle

    def wait(self, handle: ProcessHandle) -> int:
        if handle.state is ProcessState.REAPED:
            return handle.status

        try:
            status = self._results.pop(handle.pid)
        except KeyError:
            raise WaitError("waitpid: No child processes", pid=handle.pid)

        handle.mark_reaped(status)
        self.reaped.append(handle)
        return status

    def exec(self, argv: List[str], environ: Mapping[str, str]) -> int:
        if not argv:
            raise ExecError("Empty argument vector")
        self.executed.append(list(argv))
        program = self.programs.get(argv[0])
        if program is None:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), argv[0])
        return program(list(argv), environ)

    def unreaped(self) -> List[ProcessHandle]:
        """Handles spawned but never waited for."""
        return [h for h in self.spawned if h.state is not ProcessState.REAPED]
