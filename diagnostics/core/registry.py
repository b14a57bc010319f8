"""
Diagnostic Registry

Stores diagnostics keyed by (category, name) in a two-level mapping and keeps
a running total. Writers take the exclusive side of a reader/writer lock;
readers copy what they need under the shared side and release it before
any diagnostic runs, so long runs never hold up registration.
"""

from typing import Dict, List, Optional, Tuple

from diagnostics.core.base import Diagnostic, DiagnosticFunc, RegisteredDiagnostic
from diagnostics.core.errors import DuplicateDiagnosticError
from diagnostics.core.rwlock import ReadWriteLock


class DiagnosticRegistry:
    """
    Registry for diagnostics.

    Invariants:
        - (category, name) is unique
        - ``total()`` equals the number of registered diagnostics
        - a category bucket exists only while it holds at least one diagnostic
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._diagnostics: Dict[str, Dict[str, RegisteredDiagnostic]] = {}
        self._count = 0

    def register(
        self,
        name: str,
        description: str,
        category: str,
        func: DiagnosticFunc,
    ) -> RegisteredDiagnostic:
        """
        Register a diagnostic function.

        Names and categories are compared exactly, no normalization is applied.

        Args:
            name: Diagnostic name, unique within the category
            description: Human-readable description
            category: Category bucket
            func: Function executed when the diagnostic runs

        Returns:
            The registered entry

        Raises:
            DuplicateDiagnosticError: If (category, name) is already registered
            TypeError: If func is not callable
        """
        if not callable(func):
            raise TypeError(f"Expected a callable diagnostic function, got {type(func)}")

        entry = RegisteredDiagnostic(
            diagnostic=Diagnostic(name=name, description=description, category=category),
            func=func,
        )

        with self._lock.write_locked():
            bucket = self._diagnostics.get(category)
            if bucket is not None and name in bucket:
                raise DuplicateDiagnosticError(name, category)
            if bucket is None:
                bucket = self._diagnostics[category] = {}
            bucket[name] = entry
            self._count += 1

        return entry

    def unregister(self, name: str, category: str) -> bool:
        """
        Unregister a diagnostic.

        Returns:
            True if the diagnostic was removed, False if it was not registered
        """
        with self._lock.write_locked():
            bucket = self._diagnostics.get(category)
            if bucket is None or name not in bucket:
                return False
            del bucket[name]
            if not bucket:
                del self._diagnostics[category]
            self._count -= 1

        return True

    def get(self, category: str, name: str) -> Optional[RegisteredDiagnostic]:
        with self._lock.read_locked():
            bucket = self._diagnostics.get(category)
            if bucket is None:
                return None
            return bucket.get(name)

    def get_all(self) -> List[RegisteredDiagnostic]:
        """
        Snapshot every registered diagnostic.

        Returns:
            A new list; later registry changes do not affect it
        """
        with self._lock.read_locked():
            return [
                entry
                for bucket in self._diagnostics.values()
                for entry in bucket.values()
            ]

    def get_by_category(self, category: str) -> Optional[List[RegisteredDiagnostic]]:
        """
        Snapshot the diagnostics of one category.

        Returns:
            A new list, or None if the category does not exist
        """
        with self._lock.read_locked():
            bucket = self._diagnostics.get(category)
            if bucket is None:
                return None
            return list(bucket.values())

    def list_diagnostics(self) -> List[Diagnostic]:
        """Return the descriptors of all registered diagnostics, in no particular order."""
        with self._lock.read_locked():
            return [
                entry.diagnostic
                for bucket in self._diagnostics.values()
                for entry in bucket.values()
            ]

    def categories(self) -> List[str]:
        with self._lock.read_locked():
            return list(self._diagnostics.keys())

    def total(self) -> int:
        with self._lock.read_locked():
            return self._count

    def clear(self) -> None:
        """Remove all registered diagnostics."""
        with self._lock.write_locked():
            self._diagnostics.clear()
            self._count = 0

    def __len__(self) -> int:
        return self.total()

    def __contains__(self, key: Tuple[str, str]) -> bool:
        category, name = key
        return self.get(category, name) is not None
