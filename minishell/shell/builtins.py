"""
Shell Built-in Commands

Commands executed by the shell process itself, without a child:
``exit``/``quit``, ``cd``, ``pwd`` and ``name=value`` assignment.
"""

from typing import Callable, List

from minishell.ipc.descriptors import STDERR_FILENO, STDOUT_FILENO, write_fd
from minishell.logger import get_logger
from minishell.process.context import ProcessContext
from minishell.process.states import EXIT_FAILURE, EXIT_SUCCESS, SHELL_EXIT
from .command import SimpleCommand


class BuiltinCommands:
    """
    Built-in shell commands.

    Output goes straight to descriptors 1 and 2 so it follows whatever
    redirection is in place for the command.
    """

    SESSION_EXIT = frozenset({'exit', 'quit'})

    def __init__(self, context: ProcessContext):
        """
        Args:
            context: Working directory and environment the builtins change
        """
        self._context = context
        self._logger = get_logger('executor')
        self._commands: dict[str, Callable[[List[str]], int]] = {
            'exit': self.cmd_exit,
            'quit': self.cmd_exit,
            'cd': self.cmd_cd,
            'pwd': self.cmd_pwd,
        }

    def get_commands(self) -> dict[str, Callable[[List[str]], int]]:
        """Get all built-in commands."""
        return self._commands

    def is_builtin(self, name: str) -> bool:
        """Check if a command is built-in."""
        return name in self._commands

    def is_session_exit(self, name: str) -> bool:
        return name in self.SESSION_EXIT

    def is_assignment(self, command: SimpleCommand) -> bool:
        """True for ``name=value``: the verb's second part is a literal ``=``."""
        return command.is_assignment

    def execute(self, name: str, argv: List[str]) -> int:
        """
        Execute a built-in command.

        Args:
            name: Command name
            argv: Full argument vector, ``argv[0] == name``

        Returns:
            Exit status, or SHELL_EXIT for exit/quit
        """
        cmd = self._commands.get(name)
        if cmd is None:
            return 127
        return cmd(argv)

    def cmd_exit(self, argv: List[str]) -> int:
        """End the session."""
        return SHELL_EXIT

    def cmd_cd(self, argv: List[str]) -> int:
        """Change directory; without an operand, do nothing."""
        if len(argv) < 2:
            return EXIT_SUCCESS

        path = argv[1]
        try:
            self._context.chdir(path)
        except OSError as e:
            self._logger.debug("cd failed", context={'path': path, 'errno': e.errno})
            write_fd(STDERR_FILENO, f"cd: {path}: {e.strerror}\n")
            return EXIT_FAILURE

        self._logger.debug("Changed directory", context={'cwd': self._context.getcwd()})
        return EXIT_SUCCESS

    def cmd_pwd(self, argv: List[str]) -> int:
        """Print working directory."""
        write_fd(STDOUT_FILENO, f"{self._context.getcwd()}\n")
        return EXIT_SUCCESS

    def assign(self, word: str) -> int:
        """
        Set an environment variable from ``name=value``.

        The word is split at its first ``=``.
        """
        name, _, value = word.partition('=')
        try:
            self._context.setenv(name, value)
        except (OSError, ValueError) as e:
            write_fd(STDERR_FILENO, f"{word}: {e}\n")
            return EXIT_FAILURE

        self._logger.debug("Set variable", context={'name': name})
        return EXIT_SUCCESS
