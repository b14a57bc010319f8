"""
Diagnostic report source for export controllers.

An export controller calls ``make(now)`` on its own schedule and exports
whatever report comes back; None means there is nothing to export.
"""

import logging
from datetime import datetime
from typing import Optional

from diagnostics.core.base import DIAGNOSTICS_EVENT_NAME, DiagnosticsRunReport
from diagnostics.core.scope import CancelScope
from diagnostics.core.service import DiagnosticService

logger = logging.getLogger(__name__)

DIAGNOSTICS_SOURCE_NAME = f"{DIAGNOSTICS_EVENT_NAME}-source"


class DiagnosticSource:
    """Builds a DiagnosticsRunReport from a full run of a DiagnosticService."""

    def __init__(self, service: DiagnosticService):
        self._service = service

    def make(self, now: datetime) -> Optional[DiagnosticsRunReport]:
        """
        Run all diagnostics and wrap the results in a report.

        Each run uses a fresh background scope, so shutting the controller
        down does not cancel a report that is already being built.

        Args:
            now: Start time recorded on the report

        Returns:
            The report, or None when no diagnostics are registered
        """
        if self._service.total() == 0:
            logger.debug("No diagnostics registered, skipping report")
            return None

        return DiagnosticsRunReport(
            start_time=now,
            results=self._service.run(CancelScope.background()),
        )

    def name(self) -> str:
        return DIAGNOSTICS_SOURCE_NAME
