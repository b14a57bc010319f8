"""
Pytest Configuration
====================

Shared fixtures for the diagnostics test suite.
"""

import sys
import time
from pathlib import Path

import pytest

# Ensure project root is in path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from diagnostics.core.runner import DiagnosticRunner
from diagnostics.core.service import DiagnosticService


CATEGORY_RED = "TestCategoryRed"
CATEGORY_BLUE = "TestCategoryBlue"
CATEGORY_GREEN = "TestCategoryGreen"


def sleeping_diagnostic(test_name: str, duration: float):
    """
    Diagnostic function that waits ``duration`` seconds while honouring its
    scope, then returns {"test": test_name}.
    """
    def run(scope):
        scope.sleep(duration)
        return {"test": test_name}
    return run


# (name, description, category, delay)
SIX_DIAGNOSTICS = [
    ("TestDiagnosticA", "Diagnostic A Description...", CATEGORY_RED, 0.05),
    ("TestDiagnosticB", "Diagnostic B Description...", CATEGORY_RED, 0.03),
    ("TestDiagnosticC", "Diagnostic C Description...", CATEGORY_BLUE, 0.07),
    ("TestDiagnosticD", "Diagnostic D Description...", CATEGORY_BLUE, 0.09),
    ("TestDiagnosticE", "Diagnostic E Description...", CATEGORY_GREEN, 0.11),
    ("TestDiagnosticF", "Diagnostic F Description...", CATEGORY_GREEN, 0.13),
]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def make_sleeper():
    """Factory fixture: make_sleeper(name, duration) -> diagnostic function."""
    return sleeping_diagnostic


@pytest.fixture
def six_diagnostics():
    """The six standard test diagnostics as (name, description, category, delay)."""
    return list(SIX_DIAGNOSTICS)


@pytest.fixture
def service():
    """Fresh DiagnosticService with default runner settings."""
    return DiagnosticService()


@pytest.fixture
def fast_service():
    """DiagnosticService whose per-diagnostic deadline is 0.3s."""
    return DiagnosticService(runner=DiagnosticRunner(timeout_seconds=0.3))


@pytest.fixture
def six_registered(service):
    """Service with the six standard test diagnostics across three categories."""
    for name, description, category, delay in SIX_DIAGNOSTICS:
        service.register(name, description, category, sleeping_diagnostic(name, delay))
    return service


@pytest.fixture
def concurrency_probe():
    """
    Factory for diagnostics that record how many of them run at once.

    Returns:
        (make, peak) where make(duration) builds a diagnostic function and
        peak() returns the highest concurrency observed
    """
    import threading

    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    def make(duration: float):
        def run(scope):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            try:
                time.sleep(duration)
            finally:
                with lock:
                    state["active"] -= 1
            return {"slept": duration}
        return run

    return make, lambda: state["peak"]
