"""
Diagnostics Errors

Exception hierarchy shared by the registry, runner and probe functions.
"""


class DiagnosticError(Exception):
    """Base class for all diagnostics errors."""
    pass


class DuplicateDiagnosticError(DiagnosticError):
    """Raised when a (category, name) pair is registered twice."""

    def __init__(self, name: str, category: str):
        self.name = name
        self.category = category
        super().__init__(
            f"diagnostic with name {name} already exists in category {category}"
        )


class ScopeCancelled(DiagnosticError):
    """Raised when work observes a cancelled scope."""

    default_message = "scope cancelled"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class DeadlineExceeded(ScopeCancelled):
    """Raised when work observes a scope whose deadline has passed."""

    default_message = "deadline exceeded"


class DiagnosticFailure(DiagnosticError):
    """Raised by a diagnostic function to report a failed check."""
    pass


class ConfigError(DiagnosticError):
    """Raised when diagnostics configuration is invalid."""
    pass
