"""
minishell - A POSIX-style command-tree evaluator

Executes command trees produced by a shell parser: sequencing,
background pairs, conditional chains, pipelines, simple commands with
I/O redirection, and a small set of builtins.
"""

__version__ = "1.0.0"

from .shell.command import (
    Sequential,
    Background,
    OrElse,
    AndThen,
    Pipe,
    Leaf,
    NoOp,
    SimpleCommand,
    leaf,
    pipeline,
)
from .shell.evaluator import CommandEvaluator
from .shell.shell import Shell, create_shell
from .process.states import SHELL_EXIT

__all__ = [
    'Sequential',
    'Background',
    'OrElse',
    'AndThen',
    'Pipe',
    'Leaf',
    'NoOp',
    'SimpleCommand',
    'leaf',
    'pipeline',
    'CommandEvaluator',
    'Shell',
    'create_shell',
    'SHELL_EXIT',
]
