"""Learner progress and curriculum gating.

Provides:
- Progress records per (learner, module)
- Sequential unlocking, strike-out and re-watch rules
- The progress gateway (in-memory and Cassandra)
"""

from .exceptions import (
    ConfigurationError,
    GatewayReadFailure,
    GatewayWriteFailure,
    ModuleLockedError,
    TrainingError,
)
from .gating import MAX_FAILED_ATTEMPTS, ModuleStatus
from .models import PROGRESS_TABLES_CQL, ProgressRecord


__all__ = [
    "MAX_FAILED_ATTEMPTS",
    "PROGRESS_TABLES_CQL",
    "ConfigurationError",
    "GatewayReadFailure",
    "GatewayWriteFailure",
    "ModuleLockedError",
    "ModuleStatus",
    "ProgressRecord",
    "TrainingError",
]
