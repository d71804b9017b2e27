"""
Process Exceptions

Failures of the OS process primitives the evaluator depends on:
creating, executing and reaping child processes.
"""

from typing import Optional, Any

from .shell_exceptions import ShellException


class ProcessException(ShellException):
    """
    Base exception for all process-related errors.

    Attributes:
        message: Human-readable error description
        pid: Process ID associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        pid: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if pid is not None:
            ctx["pid"] = pid
        super().__init__(
            message=message,
            error_code=error_code or 2000,
            recoverable=False,
            context=ctx
        )
        self.pid = pid


class ForkError(ProcessException):
    """
    The OS refused to create a new process.

    Example:
        >>> raise ForkError("fork: Resource temporarily unavailable", errno=11)
    """

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if errno is not None:
            ctx["errno"] = errno
        super().__init__(
            message=message,
            error_code=2001,
            context=ctx
        )
        self.errno = errno


class ExecError(ProcessException):
    """
    Replacing the process image failed.

    Only raised where an exec failure cannot be turned into an exit
    status (the simulated spawner has no program to report it for).

    Example:
        >>> raise ExecError("No such program", program="frobnicate")
    """

    def __init__(
        self,
        message: str,
        program: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if program is not None:
            ctx["program"] = program
        super().__init__(
            message=message,
            error_code=2002,
            context=ctx
        )
        self.program = program


class WaitError(ProcessException):
    """
    Waiting for a child process failed.

    Example:
        >>> raise WaitError("waitpid: No child processes", pid=4242)
    """

    def __init__(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            pid=pid,
            error_code=2003,
            context=context
        )
