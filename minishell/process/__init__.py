"""
minishell Process Module

Process creation and the process-wide state commands can change:
- Exit status values and the session-exit sentinel
- Spawners (real fork-based, and in-process simulated)
- Process context (working directory, environment)
"""

from .states import (
    ProcessState,
    EXIT_SUCCESS,
    EXIT_FAILURE,
    SHELL_EXIT,
    exit_code,
    is_success,
)
from .spawner import ProcessHandle, Spawner, ForkSpawner, InlineSpawner
from .context import ProcessContext, OsProcessContext, VirtualProcessContext

__all__ = [
    # States
    'ProcessState',
    'EXIT_SUCCESS',
    'EXIT_FAILURE',
    'SHELL_EXIT',
    'exit_code',
    'is_success',
    # Spawners
    'ProcessHandle',
    'Spawner',
    'ForkSpawner',
    'InlineSpawner',
    # Context
    'ProcessContext',
    'OsProcessContext',
    'VirtualProcessContext',
]
