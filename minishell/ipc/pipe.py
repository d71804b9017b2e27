"""
OS Pipe Module

A thin wrapper over ``os.pipe()`` that remembers which of its ends are
still open, so releasing it twice is harmless.
"""

import os
from dataclasses import dataclass

from minishell.exceptions import PipeError
from minishell.logger import get_logger
from . import descriptors


_logger = get_logger('redirection')


@dataclass
class Pipe:
    """A one-way OS pipe."""
    read_fd: int
    write_fd: int
    read_open: bool = True
    write_open: bool = True

    @classmethod
    def create(cls) -> 'Pipe':
        """
        Create a new pipe.

        Raises:
            PipeError: If the OS cannot create the pipe
        """
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise PipeError(f"pipe: {e.strerror}", context={'errno': e.errno})
        _logger.debug("Created pipe", context={'read': read_fd, 'write': write_fd})
        return cls(read_fd=read_fd, write_fd=write_fd)

    @property
    def ends(self) -> tuple[int, int]:
        return (self.read_fd, self.write_fd)

    def connect_writer(self) -> None:
        """Make standard output the write end."""
        descriptors.replace(self.write_fd, descriptors.STDOUT_FILENO)

    def connect_reader(self) -> None:
        """Make standard input the read end."""
        descriptors.replace(self.read_fd, descriptors.STDIN_FILENO)

    def close(self) -> None:
        """Close whichever ends are still open."""
        if self.read_open:
            self.read_open = False
            descriptors.close(self.read_fd)
        if self.write_open:
            self.write_open = False
            descriptors.close(self.write_fd)
