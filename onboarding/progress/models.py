"""Database models for learner progress.

Cassandra table definitions for:
- Progress by learner: one row per (learner, module), the learner's view
- Progress by module: the same rows partitioned by module, for reports

Architecture: Dual-write pattern for efficient queries by both
learner_id and module_id perspectives.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from onboarding.catalog.models import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

PROGRESS_BY_LEARNER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.progress_by_learner (
    learner_id TEXT,
    module_id UUID,
    video_watched BOOLEAN,
    score INT,
    passed BOOLEAN,
    attempts INT,
    updated_at TIMESTAMP,
    PRIMARY KEY (learner_id, module_id)
)
"""

# Lookup: all learners' progress on a module (admin reports)
PROGRESS_BY_MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.progress_by_module (
    module_id UUID,
    learner_id TEXT,
    video_watched BOOLEAN,
    score INT,
    passed BOOLEAN,
    attempts INT,
    updated_at TIMESTAMP,
    PRIMARY KEY (module_id, learner_id)
)
"""

PROGRESS_TABLES_CQL = [
    PROGRESS_BY_LEARNER_TABLE_CQL,
    PROGRESS_BY_MODULE_TABLE_CQL,
]

# Fields a progress write may carry
WRITABLE_FIELDS = frozenset({"video_watched", "score", "passed", "attempts"})


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass(frozen=True)
class ProgressRecord:
    """A learner's state on one module.

    Attributes:
        learner_id: Login id of the learner (email)
        module_id: Module UUID
        video_watched: Training video has been watched since the last re-watch
        score: Last finished quiz score (0-100), None when no score is current
        passed: Quiz passed
        attempts: Consecutive failed attempts since the last re-watch
        updated_at: Last write timestamp
    """

    learner_id: str
    module_id: UUID
    video_watched: bool = False
    score: int | None = None
    passed: bool = False
    attempts: int = 0
    updated_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.attempts < 0:
            msg = "attempts cannot be negative"
            raise ValueError(msg)

    def merge(self, **fields: Any) -> "ProgressRecord":
        """Return a copy with `fields` laid over this record.

        Raises:
            ValueError: For fields that are not writable progress fields
        """
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            msg = f"Unknown progress fields: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        return replace(self, **fields, updated_at=datetime.now(UTC))

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        """Create ProgressRecord instance from Cassandra row."""
        return cls(
            learner_id=row.learner_id,
            module_id=row.module_id,
            video_watched=bool(row.video_watched),
            score=row.score,
            passed=bool(row.passed),
            attempts=row.attempts or 0,
            updated_at=ensure_utc_aware(row.updated_at),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "learner_id": self.learner_id,
            "module_id": self.module_id,
            "video_watched": self.video_watched,
            "score": self.score,
            "passed": self.passed,
            "attempts": self.attempts,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord learner={self.learner_id} module={self.module_id} "
            f"video={self.video_watched} score={self.score} "
            f"passed={self.passed} attempts={self.attempts}>"
        )
