"""
Composite Command Evaluator

Walks a command tree and maps each operator onto processes, pipes and
waits:

    Sequential   run cmd1, then cmd2; stop early on SHELL_EXIT
    Background   cmd1 and cmd2 each in a child; wait for both; succeed
    OrElse       cmd2 only if cmd1 failed
    AndThen      cmd2 only if cmd1 succeeded
    Pipe         cmd1 in a child writing the pipe; cmd2 here, reading it
    Leaf         delegate to the simple command executor
    NoOp         succeed

The right operand of a pipe runs in the evaluating process with
``defer_reap`` set: a leaf there returns its child's handle instead of
waiting, and the pipe reaps it after the writer.
"""

from typing import Callable, Optional, Union

from minishell.exceptions import InvalidCommandError
from minishell.ipc.descriptors import STDIN_FILENO, STDOUT_FILENO, std_streams_saved
from minishell.ipc.pipe import Pipe as OsPipe
from minishell.logger import get_logger
from minishell.process.context import OsProcessContext, ProcessContext
from minishell.process.spawner import ForkSpawner, ProcessHandle, Spawner
from minishell.process.states import EXIT_FAILURE, EXIT_SUCCESS, SHELL_EXIT, is_success
from .command import (
    AndThen,
    Background,
    Command,
    Leaf,
    Operator,
    OrElse,
    Pipe,
    Sequential,
)
from .executor import SimpleCommandExecutor


Result = Union[int, ProcessHandle]


class CommandEvaluator:
    """
    Evaluates command trees.

    Example:
        >>> evaluator = CommandEvaluator()
        >>> evaluator.evaluate(OrElse(leaf('false'), leaf('echo', 'ok')))
        ok
        0
    """

    def __init__(
        self,
        spawner: Optional[Spawner] = None,
        context: Optional[ProcessContext] = None,
        executor: Optional[SimpleCommandExecutor] = None
    ):
        self._spawner = spawner or ForkSpawner()
        self._context = context or OsProcessContext()
        self._executor = executor or SimpleCommandExecutor(self._spawner, self._context)
        self._logger = get_logger('evaluator')
        self._handlers: dict[Operator, Callable[[Command, bool], Result]] = {
            Operator.SEQUENTIAL: self._eval_sequential,
            Operator.BACKGROUND: self._eval_background,
            Operator.OR_ELSE: self._eval_or_else,
            Operator.AND_THEN: self._eval_and_then,
            Operator.PIPE: self._eval_pipe,
            Operator.LEAF: self._eval_leaf,
            Operator.NOOP: self._eval_noop,
        }

    @property
    def spawner(self) -> Spawner:
        return self._spawner

    @property
    def context(self) -> ProcessContext:
        return self._context

    def evaluate(self, command: Command) -> int:
        """
        Evaluate a command tree.

        Returns:
            Exit status in 0-255, or SHELL_EXIT
        """
        result = self._dispatch(command, defer_reap=False)
        if isinstance(result, ProcessHandle):
            return self._spawner.wait(result)
        return result

    def _dispatch(self, command: Command, defer_reap: bool) -> Result:
        handler = self._handlers.get(getattr(command, 'op', None))
        if handler is None:
            raise InvalidCommandError(f"Cannot evaluate {type(command).__name__}")
        self._logger.debug("Evaluating", context={'op': command.op.name})
        return handler(command, defer_reap)

    def _eval_sequential(self, command: Sequential, defer_reap: bool) -> Result:
        if command.cmd1 is not None:
            status = self.evaluate(command.cmd1)
            if status == SHELL_EXIT:
                return SHELL_EXIT
        return self.evaluate(command.cmd2)

    def _eval_background(self, command: Background, defer_reap: bool) -> Result:
        first = self._spawner.spawn(lambda: self.evaluate(command.cmd1))
        second = self._spawner.spawn(lambda: self.evaluate(command.cmd2))
        self._spawner.wait(first)
        self._spawner.wait(second)
        return EXIT_SUCCESS

    def _eval_or_else(self, command: OrElse, defer_reap: bool) -> Result:
        status = self.evaluate(command.cmd1)
        # exit on the left is neither success nor failure; cmd2 is skipped
        if status != SHELL_EXIT and not is_success(status):
            return self.evaluate(command.cmd2)
        return EXIT_SUCCESS

    def _eval_and_then(self, command: AndThen, defer_reap: bool) -> Result:
        status = self.evaluate(command.cmd1)
        if is_success(status):
            return self.evaluate(command.cmd2)
        return EXIT_FAILURE

    def _eval_pipe(self, command: Pipe, defer_reap: bool) -> Result:
        with std_streams_saved() as saved:
            channel = OsPipe.create()
            try:
                # The writer inherits stdout already pointing at the pipe
                channel.connect_writer()
                writer = self._spawner.spawn(
                    lambda: self.evaluate(command.cmd1),
                    close_fds=channel.ends
                )
                saved.reinstate(STDOUT_FILENO)
                channel.connect_reader()
            finally:
                channel.close()

            self._logger.debug("Pipe connected", context={'writer': writer.pid})
            result = self._dispatch(command.cmd2, defer_reap=True)

            # Drop our read end first so an early-exiting reader lets the
            # writer see a broken pipe
            saved.reinstate(STDIN_FILENO)
            self._spawner.wait(writer)
            if isinstance(result, ProcessHandle):
                status = self._spawner.wait(result)
            else:
                status = result

        if status == SHELL_EXIT:
            return EXIT_SUCCESS
        return status

    def _eval_leaf(self, command: Leaf, defer_reap: bool) -> Result:
        return self._executor.execute(command.command, defer_reap=defer_reap)

    def _eval_noop(self, command: Command, defer_reap: bool) -> Result:
        return EXIT_SUCCESS
