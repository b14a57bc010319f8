"""
Diagnostic Runner

Executes diagnostics on a bounded thread pool and materializes exactly one
DiagnosticResult per diagnostic:
- At most ``max_workers`` diagnostics execute at once
- Each diagnostic gets a child scope with its own deadline
- Failures and deadline expiry are captured in the result, never raised
- Result order is completion order

Diagnostics cannot be interrupted. A function that ignores its scope keeps
its worker (and the caller) busy until it returns; authors must poll the
scope or block through ``scope.wait()`` / ``scope.sleep()``.
"""

import concurrent.futures
import logging
import threading
import time
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from diagnostics.core.base import (
    DiagnosticResult,
    RegisteredDiagnostic,
    normalize_details,
    utc_now,
)
from diagnostics.core.config import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT_SECONDS,
    DiagnosticsConfig,
)
from diagnostics.core.ids import new_id
from diagnostics.core.scope import CancelScope

logger = logging.getLogger(__name__)

UNKNOWN_FAILURE = "unknown failure"


def failure_text(exc: BaseException) -> str:
    """Render an exception as result error text, never empty."""
    try:
        text = str(exc)
    except Exception:
        text = ""
    return text or f"{UNKNOWN_FAILURE} ({type(exc).__name__})"


class DiagnosticRunner:
    """
    Runs diagnostics with bounded parallelism and per-diagnostic deadlines.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        id_provider: Callable[[], str] = None,
        now_provider: Callable[[], datetime] = None,
    ):
        """
        Initialize the diagnostic runner.

        Args:
            max_workers: Max diagnostics executing concurrently
            timeout_seconds: Deadline for each diagnostic, from its own start
            id_provider: Returns a unique id per result (default: UUIDv7 generator)
            now_provider: Returns the current UTC time (default: utc_now)
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")

        self._max_workers = max_workers
        self._timeout_seconds = timeout_seconds
        self._id_provider = id_provider or new_id
        self._now_provider = now_provider or utc_now

    @classmethod
    def from_config(cls, config: DiagnosticsConfig, **kwargs) -> "DiagnosticRunner":
        return cls(
            max_workers=config.max_workers,
            timeout_seconds=config.timeout_seconds,
            **kwargs,
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def run_all(
        self,
        diagnostics: Iterable[RegisteredDiagnostic],
        scope: CancelScope,
    ) -> List[DiagnosticResult]:
        """
        Run diagnostics and collect their results.

        The iterable is consumed lazily: a new diagnostic is only taken once a
        worker slot is free. Cancelling ``scope`` signals every in-flight
        diagnostic; those not yet started still run against the cancelled
        scope so that each one produces a result.

        Args:
            diagnostics: Diagnostics to run
            scope: Caller's cancellation scope

        Returns:
            One result per diagnostic, in completion order
        """
        results: List[DiagnosticResult] = []
        futures = []
        slots = threading.BoundedSemaphore(self._max_workers)

        def release_slot(_future):
            slots.release()

        with scope.child() as run_scope:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="diagnostics",
            ) as executor:
                for diagnostic in diagnostics:
                    slots.acquire()
                    future = executor.submit(self._execute, diagnostic, run_scope)
                    future.add_done_callback(release_slot)
                    futures.append(future)

                for future in concurrent.futures.as_completed(futures):
                    results.append(future.result())

        return results

    def run_one(self, diagnostic: RegisteredDiagnostic, scope: CancelScope) -> DiagnosticResult:
        """Run a single diagnostic on the calling thread."""
        return self._execute(diagnostic, scope)

    def _execute(self, entry: RegisteredDiagnostic, scope: CancelScope) -> DiagnosticResult:
        """Execute one diagnostic under its own deadline and build its result."""
        diagnostic = entry.diagnostic
        result_id = self._id_provider()
        error = ""
        details = None

        logger.debug(f"Running diagnostic: {diagnostic.key}")
        start = time.monotonic()

        with scope.child(timeout=self._timeout_seconds) as diag_scope:
            try:
                details = normalize_details(entry(diag_scope))
            except Exception as e:
                error = failure_text(e)
                details = None
                logger.warning(f"Diagnostic {diagnostic.key} failed: {error}")

            timestamp = self._now_provider()

        elapsed = time.monotonic() - start
        if elapsed > self._timeout_seconds:
            logger.warning(
                f"Diagnostic {diagnostic.key} returned {elapsed - self._timeout_seconds:.2f}s "
                f"after its {self._timeout_seconds}s deadline"
            )
        logger.debug(f"Finished diagnostic: {diagnostic.key} ({elapsed * 1000:.0f}ms)")

        return DiagnosticResult(
            id=result_id,
            name=diagnostic.name,
            description=diagnostic.description,
            category=diagnostic.category,
            timestamp=timestamp,
            error=error,
            details=details,
        )
