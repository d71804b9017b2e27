"""
Process States Module

Lifecycle states of child processes and the status values the evaluator
passes around.
"""

from enum import Enum, auto


class ProcessState(Enum):
    """
    Child process lifecycle states.

    State transitions:
        RUNNING -> REAPED: Parent collected the exit status
    """

    RUNNING = auto()
    """Process was created and has not been waited for."""

    REAPED = auto()
    """Process terminated and its status was collected."""


EXIT_SUCCESS = 0
EXIT_FAILURE = 1

SHELL_EXIT = -100
"""Sentinel status: terminate the whole session. Never a process exit code."""


def is_success(status: int) -> bool:
    return status == EXIT_SUCCESS


def exit_code(status: int) -> int:
    """
    Convert an evaluator status into a process exit code.

    ``exit`` inside a child process ends that child only, successfully.
    """
    if status == SHELL_EXIT:
        return EXIT_SUCCESS
    return status & 0xFF
