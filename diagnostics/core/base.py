"""
Base types for the diagnostics service.

Provides the descriptor, result and report records shared by the registry,
the runner and the report source, plus validation of probe detail maps.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

if TYPE_CHECKING:
    from diagnostics.core.scope import CancelScope


# Name of the export pipeline event that carries diagnostics reports
DIAGNOSTICS_EVENT_NAME = "diagnostics"

DetailValue = Union[str, int, float, bool, Dict[str, Any], List[Any]]

# A diagnostic function receives a cancellation scope and returns a detail
# mapping (or None). Raising any Exception marks the diagnostic as failed.
DiagnosticFunc = Callable[["CancelScope"], Optional[Mapping[str, DetailValue]]]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Diagnostic:
    """
    Identity of a registered diagnostic.

    Attributes:
        name: Name of the diagnostic, unique within its category
        description: Human-readable description of what the diagnostic shows
        category: Category used to group similar diagnostics together
    """
    name: str
    description: str
    category: str

    @property
    def key(self) -> str:
        return f"{self.category}/{self.name}"


@dataclass(frozen=True)
class RegisteredDiagnostic:
    """A diagnostic descriptor paired with the function that executes it."""
    diagnostic: Diagnostic
    func: DiagnosticFunc

    def __call__(self, scope: "CancelScope") -> Optional[Mapping[str, DetailValue]]:
        return self.func(scope)


@dataclass(frozen=True)
class DiagnosticResult:
    """
    Outcome of a single diagnostic execution.

    Exactly one of ``error`` and ``details`` carries the outcome: a failed
    diagnostic has a non-empty ``error`` and ``details`` of None, a successful
    one has an empty ``error`` and a (possibly empty) ``details`` mapping.

    Attributes:
        id: Unique, time-ordered identifier of this result
        name: Name of the diagnostic that ran
        description: Description of the diagnostic that ran
        category: Category of the diagnostic that ran
        timestamp: UTC time at which the diagnostic completed
        error: Failure text, empty on success
        details: Detail mapping returned by the diagnostic, None on failure
    """
    id: str
    name: str
    description: str
    category: str
    timestamp: datetime
    error: str = ""
    details: Optional[Dict[str, DetailValue]] = None

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a plain mapping."""
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'timestamp': self.timestamp.isoformat(),
        }
        if self.error:
            data['error'] = self.error
        if self.details is not None:
            data['details'] = self.details
        return data

    def __str__(self) -> str:
        status = f"FAIL: {self.error}" if self.failed else "OK"
        return f"[{status}] {self.category}/{self.name}"


@dataclass
class DiagnosticsRunReport:
    """Start time of a full diagnostics run together with all of its results."""
    start_time: datetime
    results: List[DiagnosticResult] = field(default_factory=list)

    def failures(self) -> List[DiagnosticResult]:
        return [r for r in self.results if r.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_time': self.start_time.isoformat(),
            'results': [r.to_dict() for r in self.results],
        }


def normalize_details(details: Optional[Mapping[str, Any]]) -> Dict[str, DetailValue]:
    """
    Validate and copy a detail mapping returned by a diagnostic function.

    Keys must be text. Values must be text, integers, floats, booleans, or
    mappings and lists built from the same. Tuples are copied as lists.

    Args:
        details: Mapping returned by the diagnostic, or None

    Returns:
        A new dict safe to hand to other threads

    Raises:
        TypeError: If the mapping or any nested value has an unsupported type
    """
    if details is None:
        return {}
    if not isinstance(details, Mapping):
        raise TypeError(
            f"diagnostic returned {type(details).__name__}, expected a mapping of details"
        )
    return _normalize_mapping(details, path="")


def _normalize_mapping(mapping: Mapping, path: str) -> Dict[str, DetailValue]:
    normalized = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise TypeError(f"detail key {key!r} at '{path or '.'}' is not a string")
        normalized[key] = _normalize_value(value, f"{path}.{key}" if path else key)
    return normalized


def _normalize_value(value: Any, path: str) -> DetailValue:
    # bool is a subclass of int, both are accepted as-is
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, Mapping):
        return _normalize_mapping(value, path)
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v, f"{path}[{i}]") for i, v in enumerate(value)]
    raise TypeError(f"unsupported detail value type {type(value).__name__} for '{path}'")
