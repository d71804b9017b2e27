"""
minishell Exception Hierarchy

All custom exceptions inherit from ShellException. They describe failures
of the OS machinery behind the evaluator; a failing user command is an exit
status, not an exception.

Architecture:
    ShellException (Base)
    ├── ConfigValidationError
    ├── InvalidCommandError
    ├── ProcessException
    │   ├── ForkError
    │   ├── ExecError
    │   └── WaitError
    └── IPCException
        ├── PipeError
        ├── DescriptorError
        └── RedirectionError
"""

from .shell_exceptions import (
    ShellException,
    ConfigValidationError,
    InvalidCommandError,
)

from .process_exceptions import (
    ProcessException,
    ForkError,
    ExecError,
    WaitError,
)

from .ipc_exceptions import (
    IPCException,
    PipeError,
    DescriptorError,
    RedirectionError,
)

__all__ = [
    # Shell exceptions
    "ShellException",
    "ConfigValidationError",
    "InvalidCommandError",
    # Process exceptions
    "ProcessException",
    "ForkError",
    "ExecError",
    "WaitError",
    # IPC exceptions
    "IPCException",
    "PipeError",
    "DescriptorError",
    "RedirectionError",
]
