"""
Simple Command Executor

Runs one ``SimpleCommand``: resolves its words, applies its output
redirections, then either runs a builtin in the shell process or starts
an external program in a child.

The three standard descriptors are saved on entry and restored on every
way out, so a command's redirections never outlive it.
"""

import errno
from typing import Optional, Union

from minishell.core.config_loader import get_config
from minishell.ipc.descriptors import (
    STDERR_FILENO,
    STDIN_FILENO,
    STDOUT_FILENO,
    OpenMode,
    redirect,
    std_streams_saved,
    write_fd,
)
from minishell.logger import get_logger
from minishell.process.context import ProcessContext
from minishell.process.spawner import ProcessHandle, Spawner
from minishell.process.states import SHELL_EXIT
from .builtins import BuiltinCommands
from .command import RedirectFlags, SimpleCommand, Word


class SimpleCommandExecutor:
    """
    Executes simple commands.

    Example:
        >>> executor = SimpleCommandExecutor(ForkSpawner(), OsProcessContext())
        >>> executor.execute(SimpleCommand.build('echo', 'hi', stdout='out.txt'))
        0
    """

    def __init__(
        self,
        spawner: Spawner,
        context: ProcessContext,
        builtins: Optional[BuiltinCommands] = None
    ):
        self._spawner = spawner
        self._context = context
        self._builtins = builtins or BuiltinCommands(context)
        self._logger = get_logger('executor')

    @property
    def builtins(self) -> BuiltinCommands:
        return self._builtins

    def execute(
        self,
        command: SimpleCommand,
        defer_reap: bool = False
    ) -> Union[int, ProcessHandle]:
        """
        Execute a simple command.

        Args:
            command: The command to run
            defer_reap: Do not wait for an external program; return its
                handle so the caller reaps it

        Returns:
            Exit status, SHELL_EXIT, or the child's handle when
            ``defer_reap`` is set and a child was started
        """
        with std_streams_saved():
            environ = self._context.environ
            argv = command.argv(environ)
            stdin_path = self._resolve(command.stdin)
            stdout_path = self._resolve(command.stdout)
            stderr_path = self._resolve(command.stderr)
            verb = argv[0]

            if self._builtins.is_session_exit(verb):
                self._logger.debug("Session exit requested", context={'verb': verb})
                return SHELL_EXIT

            self._apply_output_redirections(stdout_path, stderr_path, command.flags)

            if self._builtins.is_builtin(verb):
                return self._builtins.execute(verb, argv)

            if self._builtins.is_assignment(command):
                return self._builtins.assign(verb)

            return self._run_external(argv, stdin_path, defer_reap)

    def _resolve(self, word: Optional[Word]) -> Optional[str]:
        if word is None:
            return None
        return word.resolve(self._context.environ)

    def _apply_output_redirections(
        self,
        stdout_path: Optional[str],
        stderr_path: Optional[str],
        flags: RedirectFlags
    ) -> None:
        # cmd > f 2> f: truncate once, then both streams append to the same file
        if (not flags.stdout_append and not flags.stderr_append
                and stdout_path is not None and stdout_path == stderr_path):
            redirect(STDOUT_FILENO, stdout_path, OpenMode.TRUNCATE)
            redirect(STDOUT_FILENO, stdout_path, OpenMode.APPEND)
            redirect(STDERR_FILENO, stderr_path, OpenMode.APPEND)
            return

        if stdout_path is not None:
            mode = OpenMode.APPEND if flags.stdout_append else OpenMode.TRUNCATE
            redirect(STDOUT_FILENO, stdout_path, mode)

        if stderr_path is not None:
            mode = OpenMode.APPEND if flags.stderr_append else OpenMode.TRUNCATE
            redirect(STDERR_FILENO, stderr_path, mode)

    def _run_external(
        self,
        argv: list[str],
        stdin_path: Optional[str],
        defer_reap: bool
    ) -> Union[int, ProcessHandle]:
        environ = dict(self._context.environ)
        failure_status = get_config().executor.exec_failure_status

        def child() -> int:
            # Input is redirected here, never in the shell process
            if stdin_path is not None:
                redirect(STDIN_FILENO, stdin_path, OpenMode.READ)
            try:
                return self._spawner.exec(argv, environ)
            except OSError as e:
                if e.errno == errno.ENOENT:
                    write_fd(STDERR_FILENO, f"Execution failed for '{argv[0]}'\n")
                self._logger.info(
                    "Exec failed",
                    context={'verb': argv[0], 'error': e.strerror}
                )
                return failure_status

        handle = self._spawner.spawn(child)
        self._logger.debug(
            "Started external command",
            pid=handle.pid,
            context={'verb': argv[0], 'deferred': defer_reap}
        )

        if defer_reap:
            return handle
        return self._spawner.wait(handle)
