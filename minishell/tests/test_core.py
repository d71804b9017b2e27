#!/usr/bin/env python3
"""
minishell Core Tests

Exceptions, logging, configuration and status values.

Run with: python -m pytest minishell/tests -v
Or: python -m unittest discover minishell/tests
"""

import json
import logging
import os
import sys
import tempfile
import unittest

from minishell.core.config_loader import Config, ConfigLoader, get_config
from minishell.exceptions import (
    ConfigValidationError,
    DescriptorError,
    ExecError,
    ForkError,
    InvalidCommandError,
    IPCException,
    PipeError,
    ProcessException,
    RedirectionError,
    ShellException,
    WaitError,
)
from minishell.logger import LogFormatter, Logger, LogLevel, get_logger
from minishell.process.states import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    SHELL_EXIT,
    exit_code,
    is_success,
)


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_shell_exception(self):
        """Test ShellException creation and properties."""
        exc = ShellException("Test error", error_code=1234, recoverable=True)

        self.assertEqual(exc.message, "Test error")
        self.assertEqual(exc.error_code, 1234)
        self.assertTrue(exc.recoverable)
        self.assertIn("1234", str(exc))

    def test_default_code(self):
        exc = ShellException("boom")
        self.assertEqual(exc.error_code, 1000)
        self.assertFalse(exc.recoverable)

    def test_context_in_message(self):
        exc = DescriptorError("dup2: Bad file descriptor", fd=7)
        self.assertEqual(exc.fd, 7)
        self.assertIn("fd=7", str(exc))

    def test_codes_and_tiers(self):
        """Machinery failures are fatal; bad input is recoverable."""
        cases = [
            (ConfigValidationError("x"), 1001, True),
            (InvalidCommandError("x"), 1002, True),
            (ProcessException("x"), 2000, False),
            (ForkError("x"), 2001, False),
            (ExecError("x"), 2002, False),
            (WaitError("x"), 2003, False),
            (IPCException("x"), 6000, False),
            (PipeError("x"), 6001, False),
            (DescriptorError("x"), 6002, False),
            (RedirectionError("x"), 6003, False),
        ]
        for exc, code, recoverable in cases:
            with self.subTest(exc=type(exc).__name__):
                self.assertIsInstance(exc, ShellException)
                self.assertEqual(exc.error_code, code)
                self.assertEqual(exc.recoverable, recoverable)

    def test_hierarchy(self):
        self.assertTrue(issubclass(ForkError, ProcessException))
        self.assertTrue(issubclass(RedirectionError, IPCException))

    def test_redirection_error_fields(self):
        exc = RedirectionError("open: Permission denied", path="/x/y", fd=1)
        self.assertEqual(exc.path, "/x/y")
        self.assertEqual(exc.context, {'path': '/x/y', 'fd': 1})


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def tearDown(self):
        Logger.shutdown()

    def test_logger_singleton(self):
        """Test logger creation and singleton."""
        log1 = Logger('test1')
        log2 = get_logger('test1')

        self.assertIs(log1, log2)
        self.assertEqual(log1.subsystem, 'test1')

    def test_log_levels(self):
        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertTrue(LogLevel.DEBUG < LogLevel.NOTICE < LogLevel.WARNING)
        self.assertEqual(logging.getLevelName(LogLevel.NOTICE), 'NOTICE')

    def test_formatter(self):
        """Test record layout: subsystem, pid and context."""
        record = logging.LogRecord(
            'minishell.executor', LogLevel.DEBUG, __file__, 1,
            "spawned child", None, None
        )
        record.subsystem = 'executor'
        record.pid = 42
        record.context = {'verb': 'ls'}

        line = LogFormatter(use_colors=False).format(record)

        self.assertIn("DEBUG", line)
        self.assertIn("[executor]", line)
        self.assertIn("(pid=42)", line)
        self.assertIn("spawned child", line)
        self.assertIn("{verb=ls}", line)

    def test_file_output(self):
        """Test that records reach the configured log file."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'logs', 'minishell.log')
            Logger.initialize(level=LogLevel.CRITICAL, log_file=path, use_colors=False)

            get_logger('test_file').critical("it broke", context={'fd': 3})
            get_logger('test_file').debug("filtered out")
            Logger.shutdown()

            with open(path) as f:
                content = f.read()

        self.assertIn("it broke", content)
        self.assertIn("{fd=3}", content)
        self.assertNotIn("filtered out", content)

    def test_notice(self):
        """Test notice sits between info and warning."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'minishell.log')
            Logger.initialize(level=LogLevel.NOTICE, log_file=path, use_colors=False)

            get_logger('test_notice').notice("leaving", context={'last_status': 2})
            get_logger('test_notice').info("too quiet")
            Logger.shutdown()

            with open(path) as f:
                content = f.read()

        self.assertIn("NOTICE", content)
        self.assertIn("leaving", content)
        self.assertIn("{last_status=2}", content)
        self.assertNotIn("too quiet", content)

    def test_console_handler_uses_stderr(self):
        Logger.initialize(level=LogLevel.WARNING)
        root = logging.getLogger('minishell')

        streams = [h.stream for h in root.handlers if isinstance(h, logging.StreamHandler)]

        self.assertIn(sys.stderr, streams)
        self.assertNotIn(sys.stdout, streams)

    def test_initialize_once(self):
        Logger.initialize()
        Logger.initialize()
        root = logging.getLogger('minishell')
        self.assertEqual(len(root.handlers), 1)


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def setUp(self):
        ConfigLoader().reset()

    def tearDown(self):
        ConfigLoader().reset()

    def _write(self, tmp, data):
        path = os.path.join(tmp, 'config.json')
        with open(path, 'w') as f:
            f.write(data if isinstance(data, str) else json.dumps(data))
        return path

    def test_default_config(self):
        """Test default configuration values."""
        config = Config()

        self.assertEqual(config.logging.level, "WARNING")
        self.assertEqual(config.executor.create_mode, 0o644)
        self.assertEqual(config.executor.exec_failure_status, 1)
        self.assertTrue(config.executor.search_path)
        self.assertEqual(config.shell.prompt, "> ")
        self.assertIsNone(config.shell.parser)

    def test_singleton(self):
        self.assertIs(ConfigLoader(), ConfigLoader())
        self.assertIs(get_config(), ConfigLoader().config)

    def test_load(self):
        """Test configuration loading, octal strings included."""
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write(tmp, {
                'logging': {'level': 'DEBUG'},
                'executor': {'create_mode': '0600'},
                'shell': {'prompt': '$ '},
            })
            config = ConfigLoader().load(path)

        self.assertEqual(config.logging.level, 'DEBUG')
        self.assertEqual(config.executor.create_mode, 0o600)
        self.assertEqual(config.executor.exec_failure_status, 1)
        self.assertEqual(config.shell.prompt, '$ ')
        self.assertIs(get_config(), config)

    def test_load_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigValidationError):
                ConfigLoader().load(os.path.join(tmp, 'missing.json'))

            with self.assertRaises(ConfigValidationError):
                ConfigLoader().load(self._write(tmp, '{not json'))

            with self.assertRaises(ConfigValidationError):
                ConfigLoader().load(self._write(tmp, '[1, 2]'))

            with self.assertRaises(ConfigValidationError) as ctx:
                ConfigLoader().load(self._write(tmp, {'executor': {'create_mode': 'rw'}}))
            self.assertEqual(ctx.exception.key, 'executor.create_mode')

    def test_get_and_set(self):
        loader = ConfigLoader()

        loader.set('shell.prompt', '% ')
        self.assertEqual(loader.get('shell.prompt'), '% ')
        self.assertEqual(get_config().shell.prompt, '% ')
        self.assertEqual(loader.get('shell.nothing', 'dflt'), 'dflt')

        with self.assertRaises(ConfigValidationError):
            loader.set('shell.colour', 'red')
        with self.assertRaises(ConfigValidationError):
            loader.set('nowhere.prompt', '% ')

    def test_reset_and_to_dict(self):
        loader = ConfigLoader()
        loader.set('executor.exec_failure_status', 127)

        self.assertEqual(loader.to_dict()['executor']['exec_failure_status'], 127)

        loader.reset()
        self.assertEqual(loader.to_dict()['executor']['exec_failure_status'], 1)


class TestStates(unittest.TestCase):
    """Test status values."""

    def test_success(self):
        self.assertTrue(is_success(EXIT_SUCCESS))
        self.assertFalse(is_success(EXIT_FAILURE))
        self.assertFalse(is_success(SHELL_EXIT))
        self.assertFalse(is_success(2))

    def test_exit_code(self):
        """A child's exit ends only the child, successfully."""
        self.assertEqual(exit_code(SHELL_EXIT), 0)
        self.assertEqual(exit_code(3), 3)
        self.assertEqual(exit_code(256), 0)


if __name__ == '__main__':
    unittest.main()
