"""
IPC Exceptions

Failures of descriptor-level plumbing: pipes, descriptor duplication
and redirection targets.
"""

from typing import Optional, Any

from .shell_exceptions import ShellException


class IPCException(ShellException):
    """
    Base exception for all descriptor and pipe errors.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or 6000,
            recoverable=False,
            context=context
        )


class PipeError(IPCException):
    """
    Creating or wiring an OS pipe failed.

    Example:
        >>> raise PipeError("pipe: Too many open files")
    """

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code=6001,
            context=context
        )


class DescriptorError(IPCException):
    """
    Duplicating, replacing or closing a descriptor failed.

    This indicates a corrupted descriptor table and is never retried.

    Example:
        >>> raise DescriptorError("dup2: Bad file descriptor", fd=1)
    """

    def __init__(
        self,
        message: str,
        fd: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if fd is not None:
            ctx["fd"] = fd
        super().__init__(
            message=message,
            error_code=6002,
            context=ctx
        )
        self.fd = fd


class RedirectionError(IPCException):
    """
    A redirection target could not be opened, even after the
    create-on-missing retry.

    Example:
        >>> raise RedirectionError("open: Permission denied", path="/etc/shadow")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        fd: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if path is not None:
            ctx["path"] = path
        if fd is not None:
            ctx["fd"] = fd
        super().__init__(
            message=message,
            error_code=6003,
            context=ctx
        )
        self.path = path
        self.fd = fd
