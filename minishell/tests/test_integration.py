"""
Integration Tests

Real processes through ForkSpawner and real programs from PATH.
"""

import os
import shutil
import signal
import tempfile
import unittest

from minishell.core.config_loader import ConfigLoader
from minishell.exceptions import ExecError, WaitError
from minishell.ipc.descriptors import STDERR_FILENO, STDIN_FILENO, STDOUT_FILENO
from minishell.process.context import VirtualProcessContext
from minishell.process.spawner import ForkSpawner, ProcessHandle
from minishell.process.states import SHELL_EXIT
from minishell.shell.command import (
    AndThen,
    Background,
    Leaf,
    OrElse,
    Sequential,
    SimpleCommand,
    leaf,
    pipeline,
)
from minishell.shell.evaluator import CommandEvaluator
from .support import captured, identity


REQUIRED_PROGRAMS = ('echo', 'cat', 'true', 'false', 'tr', 'sh', 'yes', 'head', 'touch')


@unittest.skipUnless(hasattr(os, 'fork'), "requires os.fork")
class TestForkSpawner(unittest.TestCase):
    """Test process creation and reaping."""

    def setUp(self):
        ConfigLoader().reset()
        self.spawner = ForkSpawner()

    def test_status(self):
        handle = self.spawner.spawn(lambda: 7)

        self.assertNotEqual(handle.pid, os.getpid())
        self.assertEqual(self.spawner.wait(handle), 7)
        self.assertEqual(self.spawner.wait(handle), 7)

    def test_session_exit_in_child(self):
        self.assertEqual(self.spawner.wait(self.spawner.spawn(lambda: SHELL_EXIT)), 0)

    def test_system_exit(self):
        def target():
            raise SystemExit(3)

        self.assertEqual(self.spawner.wait(self.spawner.spawn(target)), 3)

    def test_exception_in_child(self):
        """Test an escaping exception fails the child, not the caller."""
        def target():
            raise RuntimeError("child blew up")

        with captured(STDERR_FILENO) as err:
            status = self.spawner.wait(self.spawner.spawn(target))

        self.assertEqual(status, 1)
        self.assertIn("child blew up", err.text)

    def test_killed_by_signal(self):
        def target():
            os.kill(os.getpid(), signal.SIGTERM)
            return 0

        status = self.spawner.wait(self.spawner.spawn(target))
        self.assertEqual(status, 128 + signal.SIGTERM)

    def test_wait_unknown_child(self):
        with self.assertRaises(WaitError):
            self.spawner.wait(ProcessHandle(pid=os.getpid()))

    def test_exec_empty_argv(self):
        with self.assertRaises(ExecError):
            self.spawner.exec([], {})


@unittest.skipUnless(hasattr(os, 'fork'), "requires os.fork")
@unittest.skipUnless(
    all(shutil.which(p) for p in REQUIRED_PROGRAMS),
    "requires standard POSIX utilities"
)
class TestRealCommands(unittest.TestCase):
    """Test command trees running real programs."""

    def setUp(self):
        ConfigLoader().reset()
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.context = VirtualProcessContext(cwd=self.tmp)
        self.evaluator = CommandEvaluator(spawner=ForkSpawner(), context=self.context)

    def tearDown(self):
        self._tmp.cleanup()
        ConfigLoader().reset()

    def path(self, name):
        return os.path.join(self.tmp, name)

    def read(self, name):
        with open(self.path(name)) as f:
            return f.read()

    def run_tree(self, tree):
        with captured(STDOUT_FILENO) as out:
            status = self.evaluator.evaluate(tree)
        return status, out.text

    def test_echo_to_file(self):
        """Test echo hi > out.txt."""
        status, out = self.run_tree(leaf('echo', 'hi', stdout=self.path('out.txt')))

        self.assertEqual(status, 0)
        self.assertEqual(self.read('out.txt'), 'hi\n')
        self.assertEqual(out, '')

    def test_or_else(self):
        """Test false || echo ok."""
        self.assertEqual(self.run_tree(OrElse(leaf('false'), leaf('echo', 'ok'))), (0, 'ok\n'))

    def test_and_then(self):
        status, out = self.run_tree(AndThen(leaf('false'), leaf('echo', 'no')))
        self.assertEqual((status, out), (1, ''))

    def test_three_stage_pipeline(self):
        """Test echo | tr | cat."""
        tree = pipeline(leaf('echo', 'hello world'), leaf('tr', 'a-z', 'A-Z'), leaf('cat'))

        status, out = self.run_tree(tree)

        self.assertEqual(status, 0)
        self.assertEqual(out, 'HELLO WORLD\n')

    def test_pipeline_status(self):
        self.assertEqual(self.run_tree(pipeline(leaf('echo', 'x'), leaf('false')))[0], 1)
        self.assertEqual(self.run_tree(pipeline(leaf('false'), leaf('true')))[0], 0)

    def test_reader_exits_early(self):
        """Test yes | head -n 1 finishes once the reader is done."""
        status, out = self.run_tree(pipeline(leaf('yes'), leaf('head', '-n', '1')))

        self.assertEqual(status, 0)
        self.assertEqual(out, 'y\n')

    def test_large_pipe_transfer(self):
        with open(self.path('big.txt'), 'w') as f:
            f.write('line of text\n' * 20000)

        tree = pipeline(leaf('cat', stdin=self.path('big.txt')), leaf('cat'))
        status, out = self.run_tree(tree)

        self.assertEqual(status, 0)
        self.assertEqual(out, 'line of text\n' * 20000)

    def test_all_children_reaped(self):
        self.run_tree(pipeline(leaf('echo', 'x'), leaf('cat'), leaf('cat')))

        with self.assertRaises(ChildProcessError):
            os.waitpid(-1, os.WNOHANG)

    def test_cd_failure(self):
        with captured(STDERR_FILENO) as err:
            status, _ = self.run_tree(leaf('cd', '/nonexistent'))

        self.assertEqual(status, 1)
        self.assertIn('/nonexistent', err.text)
        self.assertIn('No such file or directory', err.text)
        self.assertEqual(self.context.getcwd(), self.tmp)

    def test_same_file_for_both_streams(self):
        target = self.path('all.txt')
        tree = leaf('sh', '-c', 'echo out; echo err >&2', stdout=target, stderr=target)

        status, _ = self.run_tree(tree)

        self.assertEqual(status, 0)
        self.assertEqual(self.read('all.txt'), 'out\nerr\n')

    def test_input_redirection(self):
        with open(self.path('in.txt'), 'w') as f:
            f.write('abc\n')

        status, out = self.run_tree(leaf('tr', 'a-z', 'A-Z', stdin=self.path('in.txt')))

        self.assertEqual((status, out), (0, 'ABC\n'))

    def test_exec_failure(self):
        with captured(STDERR_FILENO) as err:
            status, _ = self.run_tree(leaf('minishell-no-such-program'))

        self.assertEqual(status, 1)
        self.assertEqual(err.text, "Execution failed for 'minishell-no-such-program'\n")

    def test_background(self):
        tree = Background(
            leaf('echo', 'a', stdout=self.path('a.txt')),
            leaf('echo', 'b', stdout=self.path('b.txt')),
        )

        self.assertEqual(self.run_tree(tree)[0], 0)
        self.assertEqual(self.read('a.txt'), 'a\n')
        self.assertEqual(self.read('b.txt'), 'b\n')

    def test_exit_stops_sequence(self):
        tree = Sequential(leaf('exit'), leaf('touch', self.path('never')))

        self.assertEqual(self.run_tree(tree)[0], SHELL_EXIT)
        self.assertFalse(os.path.exists(self.path('never')))

    def test_signal_status(self):
        status, _ = self.run_tree(leaf('sh', '-c', 'kill -TERM $$'))
        self.assertEqual(status, 128 + signal.SIGTERM)

    def test_assignment_reaches_programs(self):
        tree = Sequential(
            Leaf(SimpleCommand.assignment('MINISHELL_TEST_VAR', 'from-shell')),
            leaf('sh', '-c', 'echo "$MINISHELL_TEST_VAR"'),
        )
        self.assertEqual(self.run_tree(tree), (0, 'from-shell\n'))

    def test_descriptor_scoping(self):
        before = [identity(fd) for fd in (STDIN_FILENO, STDOUT_FILENO, STDERR_FILENO)]

        self.run_tree(leaf('echo', 'x', stdout=self.path('o'), stderr=self.path('e')))
        self.run_tree(pipeline(leaf('echo', 'x'), leaf('cat')))

        after = [identity(fd) for fd in (STDIN_FILENO, STDOUT_FILENO, STDERR_FILENO)]
        self.assertEqual(before, after)


if __name__ == '__main__':
    unittest.main()
