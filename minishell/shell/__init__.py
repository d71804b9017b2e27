"""
minishell Shell Module

Command trees and their evaluation:
- Command tree nodes and words
- Built-in commands
- Simple command execution with redirection
- Composite operator evaluation
- The session front end
"""

from .command import (
    Operator,
    WordPart,
    Word,
    RedirectFlags,
    SimpleCommand,
    Command,
    BinaryCommand,
    Sequential,
    Background,
    OrElse,
    AndThen,
    Pipe,
    Leaf,
    NoOp,
    leaf,
    pipeline,
)
from .builtins import BuiltinCommands
from .executor import SimpleCommandExecutor
from .evaluator import CommandEvaluator
from .shell import CommandParser, Shell, create_shell

__all__ = [
    # Command tree
    'Operator',
    'WordPart',
    'Word',
    'RedirectFlags',
    'SimpleCommand',
    'Command',
    'BinaryCommand',
    'Sequential',
    'Background',
    'OrElse',
    'AndThen',
    'Pipe',
    'Leaf',
    'NoOp',
    'leaf',
    'pipeline',
    # Execution
    'BuiltinCommands',
    'SimpleCommandExecutor',
    'CommandEvaluator',
    # Front end
    'CommandParser',
    'Shell',
    'create_shell',
]
