"""
Diagnostics Providers

Components that own diagnostics (data sources, caches, clients) register
them in bulk through these helpers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Protocol

from diagnostics.core.errors import DuplicateDiagnosticError
from diagnostics.core.service import DiagnosticService

logger = logging.getLogger(__name__)


class DiagnosticsProvider(Protocol):
    """Interface for components that register their own diagnostics."""

    def register_diagnostics(self, service: DiagnosticService) -> None:
        """Register this component's diagnostics with the service."""


@dataclass(frozen=True)
class DiagnosticDefinition:
    """Identifier and description of a diagnostic exposed by a component."""
    id: str
    description: str


def register_definitions(
    service: DiagnosticService,
    category: str,
    definitions: Iterable[DiagnosticDefinition],
    details_for: Callable[[str], Mapping[str, Any]],
) -> int:
    """
    Register one diagnostic per definition.

    Each diagnostic returns ``details_for(definition.id)``; whatever that call
    raises becomes the diagnostic's failure. Definitions that collide with an
    existing registration are logged and skipped.

    Args:
        service: Service to register with
        category: Category for all of the definitions
        definitions: Definitions to register
        details_for: Produces the details for a definition id

    Returns:
        Number of diagnostics registered
    """
    registered = 0
    for definition in definitions:
        def run(scope, diagnostic_id=definition.id):
            scope.check()
            return details_for(diagnostic_id)

        try:
            service.register(definition.id, definition.description, category, run)
        except DuplicateDiagnosticError as e:
            logger.warning(f"Failed to register {category} diagnostic {definition.id}: {e}")
            continue
        registered += 1
    return registered


def register_providers(service: DiagnosticService, providers: Iterable[DiagnosticsProvider]) -> None:
    for provider in providers:
        provider.register_diagnostics(service)
