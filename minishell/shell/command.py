"""
Command Tree Module

The parsed, read-only representation of one shell input. A parser builds
it; the evaluator walks it. Nodes are immutable.

    Sequential(a, b)   a ; b
    Background(a, b)   a & b
    OrElse(a, b)       a || b
    AndThen(a, b)      a && b
    Pipe(a, b)         a | b
    Leaf(s)            one simple command
    NoOp()             does nothing, succeeds
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Mapping, Optional, Tuple, Union

from minishell.exceptions import InvalidCommandError


class Operator(Enum):
    """Command tree node kinds."""
    SEQUENTIAL = auto()
    BACKGROUND = auto()
    OR_ELSE = auto()
    AND_THEN = auto()
    PIPE = auto()
    LEAF = auto()
    NOOP = auto()


@dataclass(frozen=True)
class WordPart:
    """A fragment of a word; ``expand`` parts name an environment variable."""
    text: str
    expand: bool = False

    def resolve(self, environ: Mapping[str, str]) -> str:
        if self.expand:
            return environ.get(self.text, '')
        return self.text


@dataclass(frozen=True)
class Word:
    """
    A shell word: parts concatenated into one string.

    Example:
        >>> Word.of('log-', WordPart('USER', expand=True)).resolve({'USER': 'ada'})
        'log-ada'
    """
    parts: Tuple[WordPart, ...]

    def __post_init__(self):
        if not self.parts:
            raise InvalidCommandError("A word needs at least one part")

    @classmethod
    def literal(cls, text: str) -> 'Word':
        return cls((WordPart(text),))

    @classmethod
    def of(cls, *parts: Union[str, WordPart]) -> 'Word':
        return cls(tuple(
            part if isinstance(part, WordPart) else WordPart(part)
            for part in parts
        ))

    def resolve(self, environ: Mapping[str, str]) -> str:
        return ''.join(part.resolve(environ) for part in self.parts)

    @property
    def is_assignment(self) -> bool:
        """True for ``name = value`` words: the second part is a literal ``=``."""
        return (
            len(self.parts) > 1
            and not self.parts[1].expand
            and self.parts[1].text == '='
        )


@dataclass(frozen=True)
class RedirectFlags:
    """Append flags for the output and error redirections."""
    stdout_append: bool = False
    stderr_append: bool = False

    @classmethod
    def from_mode(cls, mode: int) -> 'RedirectFlags':
        """
        Decode the legacy 0-3 mode code: bit 0 appends stdout, bit 1
        appends stderr.
        """
        if mode not in (0, 1, 2, 3):
            raise InvalidCommandError(f"Invalid redirection mode: {mode}")
        return cls(stdout_append=bool(mode & 1), stderr_append=bool(mode & 2))

    @property
    def mode(self) -> int:
        return int(self.stdout_append) | (int(self.stderr_append) << 1)


WordLike = Union[str, Word]


def _as_word(value: Optional[WordLike]) -> Optional[Word]:
    if value is None or isinstance(value, Word):
        return value
    return Word.literal(value)


@dataclass(frozen=True)
class SimpleCommand:
    """
    One program or builtin invocation with its redirections.

    Example:
        >>> SimpleCommand.build('echo', 'hi', stdout='out.txt')
    """
    verb: Word
    params: Tuple[Word, ...] = ()
    stdin: Optional[Word] = None
    stdout: Optional[Word] = None
    stderr: Optional[Word] = None
    flags: RedirectFlags = field(default_factory=RedirectFlags)

    @classmethod
    def build(
        cls,
        verb: WordLike,
        *params: WordLike,
        stdin: Optional[WordLike] = None,
        stdout: Optional[WordLike] = None,
        stderr: Optional[WordLike] = None,
        mode: int = 0
    ) -> 'SimpleCommand':
        """Build a command from plain strings or words."""
        return cls(
            verb=_as_word(verb),
            params=tuple(_as_word(p) for p in params),
            stdin=_as_word(stdin),
            stdout=_as_word(stdout),
            stderr=_as_word(stderr),
            flags=RedirectFlags.from_mode(mode),
        )

    @classmethod
    def assignment(cls, name: str, value: WordLike) -> 'SimpleCommand':
        """Build ``name=value``."""
        value_parts = _as_word(value).parts
        return cls(verb=Word((WordPart(name), WordPart('=')) + value_parts))

    @property
    def is_assignment(self) -> bool:
        return self.verb.is_assignment

    def argv(self, environ: Mapping[str, str]) -> list[str]:
        """Resolve the verb and parameters into an argument vector."""
        return [self.verb.resolve(environ)] + [p.resolve(environ) for p in self.params]


class Command:
    """Base of all command tree nodes."""
    op: ClassVar[Operator]


def _check_operand(node: Command, name: str, value: object) -> None:
    if not isinstance(value, Command):
        raise InvalidCommandError(
            f"{type(node).__name__}.{name} must be a command, got {type(value).__name__}",
            op=node.op.name
        )


@dataclass(frozen=True)
class BinaryCommand(Command):
    """A node owning exactly two operands."""
    cmd1: Command
    cmd2: Command

    def __post_init__(self):
        _check_operand(self, 'cmd1', self.cmd1)
        _check_operand(self, 'cmd2', self.cmd2)


@dataclass(frozen=True)
class Sequential(Command):
    """Run cmd1 (when present), then cmd2."""
    cmd1: Optional[Command]
    cmd2: Command
    op: ClassVar[Operator] = Operator.SEQUENTIAL

    def __post_init__(self):
        if self.cmd1 is not None:
            _check_operand(self, 'cmd1', self.cmd1)
        _check_operand(self, 'cmd2', self.cmd2)


@dataclass(frozen=True)
class Background(BinaryCommand):
    """Run cmd1 and cmd2 concurrently."""
    op: ClassVar[Operator] = Operator.BACKGROUND


@dataclass(frozen=True)
class OrElse(BinaryCommand):
    """Run cmd2 only if cmd1 fails."""
    op: ClassVar[Operator] = Operator.OR_ELSE


@dataclass(frozen=True)
class AndThen(BinaryCommand):
    """Run cmd2 only if cmd1 succeeds."""
    op: ClassVar[Operator] = Operator.AND_THEN


@dataclass(frozen=True)
class Pipe(BinaryCommand):
    """Feed cmd1's standard output into cmd2's standard input."""
    op: ClassVar[Operator] = Operator.PIPE


@dataclass(frozen=True)
class Leaf(Command):
    """A single simple command."""
    command: SimpleCommand
    op: ClassVar[Operator] = Operator.LEAF

    def __post_init__(self):
        if not isinstance(self.command, SimpleCommand):
            raise InvalidCommandError("Leaf requires a simple command", op=self.op.name)


@dataclass(frozen=True)
class NoOp(Command):
    """Placeholder node; succeeds without doing anything."""
    op: ClassVar[Operator] = Operator.NOOP


def leaf(verb: WordLike, *params: WordLike, **redirections) -> Leaf:
    """Shorthand for ``Leaf(SimpleCommand.build(...))``."""
    return Leaf(SimpleCommand.build(verb, *params, **redirections))


def pipeline(*commands: Command) -> Command:
    """
    Chain commands left to right: ``pipeline(a, b, c)`` is ``a | b | c``.

    The chain nests on the right, ``Pipe(a, Pipe(b, c))``, so every stage
    after the first is read in place by its enclosing pipe.
    """
    if not commands:
        raise InvalidCommandError("A pipeline needs at least one command", op='PIPE')
    result = commands[-1]
    for command in reversed(commands[:-1]):
        result = Pipe(command, result)
    return result
