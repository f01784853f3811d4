"""Exceptions for pathtree."""


class InvalidPatternError(ValueError):
    """Raised when a glob pattern cannot be compiled.

    Raised before any filesystem access, so no operation has side effects
    when a pattern is rejected.  The offending pattern is available as
    :attr:`pattern`.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


PatternCompileError = InvalidPatternError


class AlreadyExistsError(FileExistsError):
    """Raised when a destination entry already exists.

    Either a file collision under the *stop* existing-entry policy (see
    :meth:`~pathtree.Option.stop_existing`), or a rename onto an occupied
    name.
    """


class WatchServiceClosedError(RuntimeError):
    """Signals that a watch service was closed; ends the observe loop."""
