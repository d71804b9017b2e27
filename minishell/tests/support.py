"""
Test helpers.

Commands write straight to descriptors 1 and 2, often from child
processes, so output is captured at the descriptor level rather than by
swapping ``sys.stdout``.
"""

import os
import sys
import tempfile
from contextlib import contextmanager
from typing import Iterator, List, Mapping

from minishell.ipc.descriptors import STDIN_FILENO, STDOUT_FILENO, write_fd
from minishell.process.spawner import InlineSpawner


class Captured:
    """Text written to a captured descriptor, available after the block."""

    def __init__(self):
        self.text = ''


@contextmanager
def captured(fd: int) -> Iterator[Captured]:
    """Point ``fd`` at a temporary file for the duration of the block."""
    result = Captured()
    with tempfile.TemporaryFile() as tmp:
        sys.stdout.flush()
        sys.stderr.flush()
        saved = os.dup(fd)
        os.dup2(tmp.fileno(), fd)
        try:
            yield result
        finally:
            sys.stdout.flush()
            sys.stderr.flush()
            os.dup2(saved, fd)
            os.close(saved)
            tmp.seek(0)
            result.text = tmp.read().decode()


def identity(fd: int) -> tuple[int, int]:
    """What a descriptor refers to: (device, inode)."""
    st = os.fstat(fd)
    return (st.st_dev, st.st_ino)


def read_all(fd: int) -> bytes:
    chunks = []
    while True:
        chunk = os.read(fd, 4096)
        if not chunk:
            return b''.join(chunks)
        chunks.append(chunk)


# Fake programs for InlineSpawner: (argv, environ) -> status

def fake_echo(argv: List[str], environ: Mapping[str, str]) -> int:
    write_fd(STDOUT_FILENO, ' '.join(argv[1:]) + '\n')
    return 0


def fake_cat(argv: List[str], environ: Mapping[str, str]) -> int:
    os.write(STDOUT_FILENO, read_all(STDIN_FILENO))
    return 0


def fake_upper(argv: List[str], environ: Mapping[str, str]) -> int:
    os.write(STDOUT_FILENO, read_all(STDIN_FILENO).upper())
    return 0


def fake_both(argv: List[str], environ: Mapping[str, str]) -> int:
    write_fd(STDOUT_FILENO, 'out\n')
    write_fd(2, 'err\n')
    return 0


def fake_printenv(argv: List[str], environ: Mapping[str, str]) -> int:
    write_fd(STDOUT_FILENO, environ.get(argv[1], '') + '\n')
    return 0


def make_spawner() -> InlineSpawner:
    """An InlineSpawner with a small set of fake programs."""
    return InlineSpawner({
        'echo': fake_echo,
        'cat': fake_cat,
        'upper': fake_upper,
        'both': fake_both,
        'printenv': fake_printenv,
        'true': lambda argv, env: 0,
        'false': lambda argv, env: 1,
        'status': lambda argv, env: int(argv[1]),
    })
