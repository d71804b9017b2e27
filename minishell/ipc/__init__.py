"""
minishell IPC Module

Descriptor plumbing:
- Redirection of the standard streams
- Scoped save/restore of the standard streams
- OS pipes
"""

from .descriptors import (
    STDIN_FILENO,
    STDOUT_FILENO,
    STDERR_FILENO,
    OpenMode,
    SavedStreams,
    close,
    flush_stdio,
    redirect,
    replace,
    restore,
    save,
    std_streams_saved,
    write_fd,
)
from .pipe import Pipe

__all__ = [
    'STDIN_FILENO',
    'STDOUT_FILENO',
    'STDERR_FILENO',
    'OpenMode',
    'SavedStreams',
    'close',
    'flush_stdio',
    'redirect',
    'replace',
    'restore',
    'save',
    'std_streams_saved',
    'write_fd',
    'Pipe',
]
