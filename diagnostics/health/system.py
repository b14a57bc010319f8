"""
System Health Diagnostics

Checks for Python version and disk space.
"""

import shutil
import sys
from functools import partial
from pathlib import Path
from typing import Dict, Union

from diagnostics.core.errors import DiagnosticFailure
from diagnostics.core.scope import CancelScope
from diagnostics.core.service import DiagnosticService

SYSTEM_CATEGORY = "system"

MIN_PYTHON_VERSION = (3, 10)
MIN_FREE_GB = 1.0


def python_version(scope: CancelScope) -> Dict[str, str]:
    """Check the Python version meets the minimum requirement."""
    current = sys.version_info[:2]
    version_str = f"{current[0]}.{current[1]}"
    minimum_str = f"{MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]}"

    if current < MIN_PYTHON_VERSION:
        raise DiagnosticFailure(f"Python {version_str} is below minimum {minimum_str}")

    return {
        "current_version": version_str,
        "minimum_version": minimum_str,
        "full_version": sys.version,
    }


def disk_space(
    scope: CancelScope,
    path: Union[str, Path] = None,
    min_free_gb: float = MIN_FREE_GB,
) -> Dict[str, Union[str, float]]:
    """
    Check available disk space on the partition holding ``path``.

    Args:
        scope: Cancellation scope
        path: Any path on the partition to check (default: home directory)
        min_free_gb: Free space below which the check fails
    """
    path = Path(path) if path is not None else Path.home()
    scope.check()

    try:
        usage = shutil.disk_usage(path)
    except OSError as e:
        raise DiagnosticFailure(f"Could not check disk space at {path}: {e}") from e

    free_gb = usage.free / (1024 ** 3)
    details = {
        "path": str(path),
        "free_gb": round(free_gb, 2),
        "total_gb": round(usage.total / (1024 ** 3), 2),
        "used_percent": round((usage.used / usage.total) * 100, 1) if usage.total else 0.0,
    }

    if free_gb < min_free_gb:
        raise DiagnosticFailure(
            f"Only {free_gb:.1f}GB free disk space at {path} (minimum {min_free_gb}GB)"
        )
    return details


def register_system_diagnostics(
    service: DiagnosticService,
    disk_path: Union[str, Path] = None,
    min_free_gb: float = MIN_FREE_GB,
) -> None:
    """Register the system diagnostics in the ``system`` category."""
    service.register(
        "python_version",
        "Check Python version is compatible",
        SYSTEM_CATEGORY,
        python_version,
    )
    service.register(
        "disk_space",
        "Check available disk space",
        SYSTEM_CATEGORY,
        partial(disk_space, path=disk_path, min_free_gb=min_free_gb),
    )
