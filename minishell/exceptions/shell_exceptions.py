"""
Shell Exceptions

Base of the minishell exception hierarchy, plus the errors raised while
building command trees and loading configuration.
"""

from typing import Optional, Any


class ShellException(Exception):
    """
    Base exception for all minishell errors.

    Exceptions of this hierarchy signal failures of the machinery the
    evaluator relies on (descriptors, pipes, process creation). A user
    command failing is never an exception; it is an exit status.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        recoverable: Whether the session can continue after this error
        context: Additional context about the error

    Example:
        >>> raise ShellException("Evaluator failure", error_code=1000)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        recoverable: bool = False,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 1000
        self.recoverable = recoverable
        self.context = context or {}

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({context_str})"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"recoverable={self.recoverable})"
        )


class ConfigValidationError(ShellException):
    """
    Configuration could not be loaded or a key is invalid.

    Example:
        >>> raise ConfigValidationError("Invalid configuration key: shell.colour")
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key is not None:
            ctx["key"] = key
        super().__init__(
            message=message,
            error_code=1001,
            recoverable=True,
            context=ctx
        )
        self.key = key


class InvalidCommandError(ShellException):
    """
    A command tree node was built with missing or malformed parts.

    Raised at construction time, before anything is evaluated.

    Example:
        >>> raise InvalidCommandError("Pipe requires two operands", op="PIPE")
    """

    def __init__(
        self,
        message: str,
        op: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if op is not None:
            ctx["op"] = op
        super().__init__(
            message=message,
            error_code=1002,
            recoverable=True,
            context=ctx
        )
        self.op = op
