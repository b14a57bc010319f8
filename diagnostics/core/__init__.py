"""
Diagnostics Core Module

Contains the registry, runner, service facade and report source of the
diagnostics framework.
"""

from diagnostics.core.base import (
    DIAGNOSTICS_EVENT_NAME,
    Diagnostic,
    DiagnosticFunc,
    DiagnosticResult,
    DiagnosticsRunReport,
    RegisteredDiagnostic,
)
from diagnostics.core.config import DiagnosticsConfig, load_config
from diagnostics.core.errors import (
    ConfigError,
    DeadlineExceeded,
    DiagnosticError,
    DiagnosticFailure,
    DuplicateDiagnosticError,
    ScopeCancelled,
)
from diagnostics.core.registry import DiagnosticRegistry
from diagnostics.core.runner import DiagnosticRunner
from diagnostics.core.scope import CancelScope
from diagnostics.core.service import DiagnosticService, diagnostic, get_service
from diagnostics.core.source import DIAGNOSTICS_SOURCE_NAME, DiagnosticSource

__all__ = [
    'DIAGNOSTICS_EVENT_NAME',
    'DIAGNOSTICS_SOURCE_NAME',
    'CancelScope',
    'ConfigError',
    'DeadlineExceeded',
    'Diagnostic',
    'DiagnosticError',
    'DiagnosticFailure',
    'DiagnosticFunc',
    'DiagnosticRegistry',
    'DiagnosticResult',
    'DiagnosticRunner',
    'DiagnosticService',
    'DiagnosticSource',
    'DiagnosticsConfig',
    'DiagnosticsRunReport',
    'DuplicateDiagnosticError',
    'RegisteredDiagnostic',
    'ScopeCancelled',
    'diagnostic',
    'get_service',
    'load_config',
]
