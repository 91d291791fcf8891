"""Custom exception classes for the module resolver."""


class ResolverException(Exception):
    """Base exception for all resolver errors.

    Attributes:
        message: Human-readable error message.
        status_code: Suggested HTTP status code for callers exposing the error.
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            status_code: Suggested HTTP status code.
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class UnknownModuleError(ResolverException):
    """Raised when a referenced module does not exist in the data source."""

    def __init__(self, module_id: str) -> None:
        """Initialize the exception.

        Args:
            module_id: ID of the module that was not found.
        """
        super().__init__(
            message=f"Module '{module_id}' not found",
            status_code=404,
        )
        self.module_id = module_id


class SelfDependencyError(ResolverException):
    """Raised when a module is declared as its own dependency."""

    def __init__(self, module_id: str) -> None:
        """Initialize the exception.

        Args:
            module_id: ID of the module.
        """
        super().__init__(
            message="A module cannot depend on itself",
            status_code=400,
        )
        self.module_id = module_id


class CircularDependencyError(ResolverException):
    """Raised when a dependency graph operation would produce or hits a cycle."""

    def __init__(self, message: str, cycle: list[str] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message describing the cycle.
            cycle: Module IDs along the cycle, closing node last.
        """
        super().__init__(message=message, status_code=409)
        self.cycle = cycle or []


class ConcurrentModificationError(ResolverException):
    """Raised when the graph changed between a guard check and the write."""

    def __init__(self, expected: int, actual: int) -> None:
        """Initialize the exception.

        Args:
            expected: Revision the writer based its checks on.
            actual: Revision found at write time.
        """
        super().__init__(
            message=(
                f"Dependency graph was modified concurrently "
                f"(expected revision {expected}, found {actual})"
            ),
            status_code=409,
        )
        self.expected = expected
        self.actual = actual


class GraphSourceError(ResolverException):
    """Raised when the graph data source cannot serve a request."""

    def __init__(self, message: str, operation: str = "unknown") -> None:
        """Initialize the exception.

        Args:
            message: Error message describing the failure.
            operation: The data source operation that failed.
        """
        super().__init__(
            message=f"Graph source error during '{operation}': {message}",
            status_code=503,
        )
        self.operation = operation


class InvariantViolationError(ResolverException):
    """Raised when an internal invariant of the resolver is broken.

    Signals a bug in the resolver itself rather than a graph condition,
    e.g. a cycle reaching the topological sorter after cycle detection passed.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Description of the violated invariant.
        """
        super().__init__(message=message, status_code=500)


class ValidationError(ResolverException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message describing the validation failure.
            field: The field that failed validation.
        """
        super().__init__(message=message, status_code=400)
        self.field = field
