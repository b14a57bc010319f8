"""
Diagnostic Service

Facade over the registry and the runner: register diagnostics once, then run
all of them, one category, or a single diagnostic on demand.

Usage:
    service = DiagnosticService()
    service.register("ping", "Checks upstream reachability", "network", ping)

    results = service.run()
    results = service.run_category("network")
    result = service.run_diagnostic("network", "ping")
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from diagnostics.core.base import Diagnostic, DiagnosticFunc, DiagnosticResult
from diagnostics.core.config import DiagnosticsConfig
from diagnostics.core.registry import DiagnosticRegistry
from diagnostics.core.runner import DiagnosticRunner
from diagnostics.core.scope import CancelScope

logger = logging.getLogger(__name__)


class DiagnosticService:
    """
    Registers diagnostics and runs them on demand.

    Every run method blocks until each scheduled diagnostic has produced a
    result. Without an explicit scope a run uses a fresh background scope.
    """

    def __init__(
        self,
        registry: DiagnosticRegistry = None,
        runner: DiagnosticRunner = None,
        config: DiagnosticsConfig = None,
    ):
        """
        Initialize the service.

        Args:
            registry: Registry to use (default: a new, empty registry)
            runner: Runner to use (default: built from config)
            config: Runner settings, ignored when a runner is given
        """
        self._registry = registry if registry is not None else DiagnosticRegistry()
        if runner is None:
            runner = DiagnosticRunner.from_config(config or DiagnosticsConfig())
        self._runner = runner

    @property
    def registry(self) -> DiagnosticRegistry:
        return self._registry

    @property
    def runner(self) -> DiagnosticRunner:
        return self._runner

    def register(self, name: str, description: str, category: str, func: DiagnosticFunc) -> None:
        """
        Register a diagnostic that runs the next time diagnostics are requested.

        Raises:
            DuplicateDiagnosticError: If category and name are already registered
        """
        self._registry.register(name, description, category, func)
        logger.info(f"Registered diagnostic {category}/{name}")

    def unregister(self, name: str, category: str) -> bool:
        """Unregister a diagnostic. Returns True if it was registered."""
        removed = self._registry.unregister(name, category)
        if removed:
            logger.info(f"Unregistered diagnostic {category}/{name}")
        return removed

    def run(self, scope: CancelScope = None) -> List[DiagnosticResult]:
        """
        Run all registered diagnostics.

        Args:
            scope: Caller's cancellation scope (default: background)

        Returns:
            One result per diagnostic registered when the run started
        """
        diagnostics = self._registry.get_all()
        return self._run_batch("all", diagnostics, scope)

    def run_category(self, category: str, scope: CancelScope = None) -> List[DiagnosticResult]:
        """
        Run all diagnostics in a category.

        Returns:
            One result per diagnostic in the category, or an empty list if the
            category does not exist
        """
        diagnostics = self._registry.get_by_category(category)
        if diagnostics is None:
            logger.debug(f"No diagnostics registered in category {category}")
            return []
        return self._run_batch(category, diagnostics, scope)

    def run_diagnostic(
        self,
        category: str,
        name: str,
        scope: CancelScope = None,
    ) -> Optional[DiagnosticResult]:
        """
        Run a single diagnostic.

        Returns:
            The result, or None if no diagnostic is registered under category and name
        """
        entry = self._registry.get(category, name)
        if entry is None:
            return None
        return self._runner.run_one(entry, scope or CancelScope.background())

    def diagnostics(self) -> List[Diagnostic]:
        """Return all registered diagnostic descriptors, in no particular order."""
        return self._registry.list_diagnostics()

    def total(self) -> int:
        """Return the number of registered diagnostics."""
        return self._registry.total()

    def _run_batch(self, label, diagnostics, scope) -> List[DiagnosticResult]:
        if scope is None:
            scope = CancelScope.background()

        logger.info(f"Running {len(diagnostics)} diagnostic(s) [{label}]")
        start = time.monotonic()
        results = self._runner.run_all(diagnostics, scope)
        failed = sum(1 for r in results if r.failed)
        logger.info(
            f"Finished {len(results)} diagnostic(s) [{label}] in "
            f"{(time.monotonic() - start) * 1000:.0f}ms, {failed} failed"
        )
        return results


# Global service instance
_global_service: Optional[DiagnosticService] = None
_global_lock = threading.Lock()


def get_service() -> DiagnosticService:
    """
    Get the global diagnostic service.

    Returns:
        The process-wide DiagnosticService instance
    """
    global _global_service
    with _global_lock:
        if _global_service is None:
            _global_service = DiagnosticService()
        return _global_service


def diagnostic(
    name: str,
    description: str,
    category: str,
    service: DiagnosticService = None,
) -> Callable[[DiagnosticFunc], DiagnosticFunc]:
    """
    Decorator to register a diagnostic function.

    Example:
        @diagnostic("cache_size", "Reports cache occupancy", "storage")
        def cache_size(scope):
            return {"entries": len(cache)}
    """
    def decorator(func: DiagnosticFunc) -> DiagnosticFunc:
        (service or get_service()).register(name, description, category, func)
        return func
    return decorator
