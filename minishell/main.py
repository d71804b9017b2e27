#!/usr/bin/env python3
"""
minishell - A POSIX-style command-tree evaluator

This is the command-line entry point.

Startup sequence:
1. Load configuration (``MINISHELL_CONFIG`` names a JSON file)
2. Initialize logging
3. Load the configured parser
4. Run the interactive shell
"""

import importlib
import os
import sys
from typing import Optional

from minishell.core.config_loader import ConfigLoader, get_config
from minishell.exceptions import ConfigValidationError, ShellException
from minishell.logger import Logger, LogLevel, get_logger
from minishell.shell.shell import CommandParser, Shell


CONFIG_ENV = 'MINISHELL_CONFIG'


def load_parser(spec: str) -> CommandParser:
    """
    Build a parser from a ``module:attribute`` reference.

    The attribute is a class or factory taking no arguments.

    Raises:
        ConfigValidationError: If the reference cannot be resolved
    """
    module_name, _, attr = spec.partition(':')
    if not module_name or not attr:
        raise ConfigValidationError(
            f"Parser must be given as 'module:attribute', got {spec!r}",
            key='shell.parser'
        )

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigValidationError(f"Cannot load parser {spec!r}: {e}", key='shell.parser')

    return factory()


def _init_logging() -> None:
    log_config = get_config().logging
    try:
        level = LogLevel[log_config.level.upper()]
    except KeyError:
        raise ConfigValidationError(
            f"Unknown log level: {log_config.level}",
            key='logging.level'
        )
    Logger.initialize(
        level=level,
        log_file=log_config.log_file,
        use_colors=log_config.use_colors,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for minishell.

    Returns:
        Process exit status
    """
    argv = sys.argv[1:] if argv is None else argv

    try:
        config_path = os.environ.get(CONFIG_ENV)
        if config_path:
            ConfigLoader().load(config_path)
        _init_logging()

        parser_spec = argv[0] if argv else get_config().shell.parser
        if not parser_spec:
            sys.stderr.write(
                "minishell: no parser configured; pass 'module:attribute' or set shell.parser\n"
            )
            return 2

        shell = Shell(parser=load_parser(parser_spec))
        return shell.run()

    except ShellException as e:
        get_logger('shell').critical(f"Fatal error: {e}", pid=os.getpid())
        sys.stderr.write(f"minishell: fatal: {e}\n")
        return 1
    finally:
        Logger.shutdown()


if __name__ == '__main__':
    sys.exit(main())
