"""
Diagnostics Service

A registry of named, categorized diagnostics that run on demand with bounded
concurrency and per-diagnostic deadlines.

Usage:
    from diagnostics import DiagnosticService, CancelScope

    service = DiagnosticService()

    def queue_depth(scope):
        return {"depth": queue.qsize()}

    service.register("queue_depth", "Reports work queue depth", "workers", queue_depth)

    # Run all diagnostics
    results = service.run()

    # Run one category, cancellable by the caller
    scope = CancelScope.background()
    results = service.run_category("workers", scope)

    # Run one diagnostic
    result = service.run_diagnostic("workers", "queue_depth")
"""

from diagnostics.core import (
    DIAGNOSTICS_EVENT_NAME,
    DIAGNOSTICS_SOURCE_NAME,
    CancelScope,
    ConfigError,
    DeadlineExceeded,
    Diagnostic,
    DiagnosticError,
    DiagnosticFailure,
    DiagnosticFunc,
    DiagnosticRegistry,
    DiagnosticResult,
    DiagnosticRunner,
    DiagnosticService,
    DiagnosticSource,
    DiagnosticsConfig,
    DiagnosticsRunReport,
    DuplicateDiagnosticError,
    RegisteredDiagnostic,
    ScopeCancelled,
    diagnostic,
    get_service,
    load_config,
)
from diagnostics.providers import (
    DiagnosticDefinition,
    DiagnosticsProvider,
    register_definitions,
    register_providers,
)


def run_all_diagnostics(scope: CancelScope = None) -> list:
    """
    Run every diagnostic registered with the global service.

    Args:
        scope: Cancellation scope (default: background)

    Returns:
        List of DiagnosticResult, one per registered diagnostic
    """
    return get_service().run(scope)


__all__ = [
    'DIAGNOSTICS_EVENT_NAME',
    'DIAGNOSTICS_SOURCE_NAME',
    'CancelScope',
    'ConfigError',
    'DeadlineExceeded',
    'Diagnostic',
    'DiagnosticDefinition',
    'DiagnosticError',
    'DiagnosticFailure',
    'DiagnosticFunc',
    'DiagnosticRegistry',
    'DiagnosticResult',
    'DiagnosticRunner',
    'DiagnosticService',
    'DiagnosticSource',
    'DiagnosticsConfig',
    'DiagnosticsProvider',
    'DiagnosticsRunReport',
    'DuplicateDiagnosticError',
    'RegisteredDiagnostic',
    'ScopeCancelled',
    'diagnostic',
    'get_service',
    'load_config',
    'register_definitions',
    'register_providers',
    'run_all_diagnostics',
]

__version__ = '1.0.0'
