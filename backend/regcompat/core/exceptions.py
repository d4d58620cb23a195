"""Exceptions raised by the compat compression engine."""


class CompatError(Exception):
    """Base exception for all compat engine failures.

    This is the parent class for every error the engine raises,
    allowing callers to abort a registration with a single except clause.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize compat error.

        Args:
            message: Human-readable error description
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.cause = cause


class ParseError(CompatError):
    """Malformed version, requirement or range string.

    Raised when:
    - A version string is not MAJOR.MINOR.PATCH[-PRE][+BUILD]
    - A requirement clause cannot be parsed
    - A range denotes no versions at all (e.g. "<0")
    - A dependency name is not a valid identifier
    """

    def __init__(
        self,
        message: str,
        clause: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.clause = clause


class DocumentError(ParseError):
    """Persisted compat document cannot be read.

    Raised when:
    - The text is not valid TOML
    - A section does not map dependency names to range strings
    - An entry would be lost on rewrite because it covers no registered
      version
    """

    pass


class OverlapInvariantViolation(CompatError):
    """A dependency is defined by two sections covering the same version.

    Raised after recompression when the compressor produced an invalid
    document, or when decoding an existing document in strict mode.
    """

    def __init__(
        self,
        dependency: str,
        version: str,
        first_window: str,
        second_window: str,
    ):
        super().__init__(
            f"Overlapping ranges for {dependency} at version {version}: "
            f"sections [{first_window}] and [{second_window}] both define it"
        )
        self.dependency = dependency
        self.version = version
        self.first_window = first_window
        self.second_window = second_window


class OrderingAmbiguity(CompatError):
    """Two textually distinct versions compare equal."""

    def __init__(self, first: str, second: str):
        super().__init__(
            f"Versions '{first}' and '{second}' have the same precedence "
            "and cannot both be registered"
        )
        self.first = first
        self.second = second
