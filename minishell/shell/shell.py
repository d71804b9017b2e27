"""
minishell Shell Module

The session front end: hands each input line to a parser, evaluates the
resulting command tree and ends the session when a command asks to.
"""

import sys
from typing import Iterable, Optional, Protocol

from minishell.core.config_loader import get_config
from minishell.exceptions import ShellException
from minishell.ipc.descriptors import STDERR_FILENO, write_fd
from minishell.logger import get_logger
from minishell.process.context import ProcessContext
from minishell.process.spawner import Spawner
from minishell.process.states import EXIT_SUCCESS, SHELL_EXIT
from .command import Command
from .evaluator import CommandEvaluator


class CommandParser(Protocol):
    """Anything that turns one input line into a command tree."""

    def parse(self, line: str) -> Optional[Command]:
        """Return the tree for ``line``, or None for a blank line."""


class Shell:
    """
    minishell session.

    Provides:
    - Evaluation of parsed command trees
    - Session termination on ``exit``/``quit``
    - An interactive read-parse-evaluate loop

    Example:
        >>> shell = Shell()
        >>> shell.execute(leaf('echo', 'hello'))
        hello
        0
        >>> shell.execute(leaf('exit'))
        -100
        >>> shell.exiting
        True
    """

    def __init__(
        self,
        parser: Optional[CommandParser] = None,
        spawner: Optional[Spawner] = None,
        context: Optional[ProcessContext] = None
    ):
        self._parser = parser
        self._evaluator = CommandEvaluator(spawner=spawner, context=context)
        self._logger = get_logger('shell')
        self._last_status = EXIT_SUCCESS
        self._running = False
        self._exiting = False

    @property
    def evaluator(self) -> CommandEvaluator:
        return self._evaluator

    @property
    def context(self) -> ProcessContext:
        return self._evaluator.context

    @property
    def parser(self) -> Optional[CommandParser]:
        return self._parser

    @property
    def last_status(self) -> int:
        """Exit status of the last command that did not end the session."""
        return self._last_status

    @property
    def exiting(self) -> bool:
        return self._exiting

    def request_exit(self) -> None:
        self._exiting = True

    def stop(self) -> None:
        """Leave the interactive loop after the current line."""
        self._running = False

    def execute(self, tree: Command) -> int:
        """
        Evaluate one command tree.

        Returns:
            The tree's exit status, or SHELL_EXIT when it ended the session
        """
        status = self._evaluator.evaluate(tree)

        if status == SHELL_EXIT:
            self._logger.notice(
                "Session exit requested",
                context={'last_status': self._last_status}
            )
            self.request_exit()
            return SHELL_EXIT

        self._last_status = status
        return status

    def run_trees(self, trees: Iterable[Command]) -> int:
        """
        Evaluate trees in order until one ends the session.

        Returns:
            The last real exit status
        """
        for tree in trees:
            if self.execute(tree) == SHELL_EXIT:
                break
        return self._last_status

    def run(self) -> int:
        """
        Run the interactive shell.

        Reads lines with the configured prompt until end of input or a
        session exit. Recoverable errors are reported and the loop goes on;
        fatal ones propagate.

        Returns:
            The last real exit status
        """
        if self._parser is None:
            raise ShellException("No parser configured")

        prompt = get_config().shell.prompt
        self._running = True

        while self._running and not self._exiting:
            try:
                line = input(prompt)
            except EOFError:
                self.stop()
                continue
            except KeyboardInterrupt:
                sys.stdout.write("\n")
                continue

            try:
                tree = self._parser.parse(line)
                if tree is not None:
                    self.execute(tree)
            except ShellException as e:
                if not e.recoverable:
                    raise
                self._logger.error(f"Shell error: {e}")
                write_fd(STDERR_FILENO, f"minishell: {e.message}\n")

        self._running = False
        return self._last_status


def create_shell(
    parser: Optional[CommandParser] = None,
    spawner: Optional[Spawner] = None,
    context: Optional[ProcessContext] = None
) -> Shell:
    """Create a shell instance."""
    return Shell(parser=parser, spawner=spawner, context=context)
