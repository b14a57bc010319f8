"""
Health Diagnostics

Ready-made system health diagnostics.
"""

from diagnostics.health.system import (
    SYSTEM_CATEGORY,
    disk_space,
    python_version,
    register_system_diagnostics,
)

__all__ = [
    'SYSTEM_CATEGORY',
    'disk_space',
    'python_version',
    'register_system_diagnostics',
]
