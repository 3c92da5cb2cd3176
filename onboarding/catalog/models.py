"""Database models for the training module catalog.

Cassandra table definitions for:
- Training modules: module content with embedded quiz questions
- Modules by role: ordered curriculum per staff role

Architecture: the module sequence of a role is the clustering order of
`modules_by_role` (ordinal ASC), so reading a role's curriculum never depends
on insertion or fetch order.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from onboarding.auth.permissions import StaffRole


class ModuleCategory(str, Enum):
    """Which portal a module was authored for."""

    NEW = "NEW"  # New joining onboarding content
    REFRESHER = "REFRESHER"  # Refresher content for existing staff


# Hosts whose videos open in a new tab instead of the embedded player
EXTERNAL_VIDEO_HOSTS = ("drive.google.com", "youtu.be")

# Drive videos count as watched as soon as they are opened
DRIVE_VIDEO_HOST = "drive.google.com"


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def is_external_video(url: str) -> bool:
    """Check if a video link opens outside the portal's player."""
    return any(host in url for host in EXTERNAL_VIDEO_HOSTS)


def is_drive_video(url: str) -> bool:
    """Check if a video is a Google Drive file, marked watched once opened."""
    return DRIVE_VIDEO_HOST in url


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

TRAINING_MODULES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.training_modules (
    id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    role TEXT,
    category TEXT,
    folder TEXT,
    video_url TEXT,
    transcript TEXT,
    questions TEXT,
    ordinal INT,
    created_at TIMESTAMP
)
"""

# Curriculum order per role
MODULES_BY_ROLE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules_by_role (
    role TEXT,
    ordinal INT,
    module_id UUID,
    PRIMARY KEY (role, ordinal, module_id)
) WITH CLUSTERING ORDER BY (ordinal ASC, module_id ASC)
"""

CATALOG_TABLES_CQL = [
    TRAINING_MODULES_TABLE_CQL,
    MODULES_BY_ROLE_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass(frozen=True)
class Question:
    """Multiple choice quiz question embedded in a module."""

    text: str
    options: tuple[str, ...]
    correct_answer_index: int

    def __post_init__(self) -> None:
        if len(self.options) < 2:  # noqa: PLR2004
            msg = "A question needs at least two options"
            raise ValueError(msg)
        if not 0 <= self.correct_answer_index < len(self.options):
            msg = "correct_answer_index must point at one of the options"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "options": list(self.options),
            "correct_answer_index": self.correct_answer_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        return cls(
            text=data["text"],
            options=tuple(data["options"]),
            correct_answer_index=int(data["correct_answer_index"]),
        )


@dataclass(frozen=True)
class TrainingModule:
    """Training module entity: one video plus its quiz.

    Attributes:
        id: Module UUID
        title: Display title
        role: Staff role whose curriculum contains the module
        ordinal: Position inside the role's curriculum (0-based)
        category: NEW or REFRESHER content
        folder: Display grouping (None means the default folder)
        video_url: Training video link
        questions: Embedded quiz questions
    """

    id: UUID
    title: str
    role: StaffRole
    ordinal: int
    video_url: str
    questions: tuple[Question, ...] = ()
    description: str = ""
    category: ModuleCategory = ModuleCategory.NEW
    folder: str | None = None
    transcript: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_quiz_configured(self) -> bool:
        """A module without questions can never be passed."""
        return len(self.questions) > 0

    @property
    def opens_externally(self) -> bool:
        return is_external_video(self.video_url)

    @property
    def watched_on_open(self) -> bool:
        return is_drive_video(self.video_url)

    def with_ordinal(self, ordinal: int) -> "TrainingModule":
        return replace(self, ordinal=ordinal)

    def folder_name(self, default: str) -> str:
        return self.folder or default

    @classmethod
    def from_row(cls, row: Any) -> "TrainingModule":
        """Create TrainingModule instance from Cassandra row."""
        raw_questions = json.loads(row.questions) if row.questions else []
        return cls(
            id=row.id,
            title=row.title,
            description=row.description or "",
            role=StaffRole(row.role),
            category=ModuleCategory(row.category or ModuleCategory.NEW.value),
            folder=row.folder,
            video_url=row.video_url or "",
            transcript=row.transcript or "",
            questions=tuple(Question.from_dict(q) for q in raw_questions),
            ordinal=row.ordinal or 0,
            created_at=ensure_utc_aware(row.created_at) or datetime.now(UTC),
        )

    def questions_json(self) -> str:
        return json.dumps([q.to_dict() for q in self.questions])

    def __repr__(self) -> str:
        return (
            f"<TrainingModule {self.role.value}#{self.ordinal} "
            f"{self.title!r} questions={len(self.questions)}>"
        )
