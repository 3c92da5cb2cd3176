"""Pydantic schemas for learner progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from onboarding.auth.permissions import AccountType, StaffRole
from onboarding.catalog.models import ModuleCategory

from .gating import ModuleStatus
from .models import ProgressRecord
from .service import ModuleView


class ProgressResponse(BaseModel):
    """A learner's stored state on one module."""

    module_id: UUID
    video_watched: bool
    score: int | None
    passed: bool
    attempts: int
    updated_at: datetime | None

    @classmethod
    def from_entity(cls, entity: ProgressRecord) -> "ProgressResponse":
        """Create response from entity."""
        return cls(
            module_id=entity.module_id,
            video_watched=entity.video_watched,
            score=entity.score,
            passed=entity.passed,
            attempts=entity.attempts,
            updated_at=entity.updated_at,
        )


class ProgressListResponse(BaseModel):
    """All progress records of the learner."""

    items: list[ProgressResponse]
    total: int


class LearnerModuleResponse(BaseModel):
    """Module as shown to a learner (quiz answers never included)."""

    id: UUID
    title: str
    description: str
    category: ModuleCategory
    folder: str
    ordinal: int
    video_url: str
    opens_externally: bool
    transcript: str
    question_count: int
    locked: bool
    status: ModuleStatus
    completion_percent: int
    video_watched: bool = False
    score: int | None = None
    passed: bool = False
    attempts: int = 0

    @classmethod
    def from_view(
        cls, view: ModuleView, default_folder: str
    ) -> "LearnerModuleResponse":
        """Create response from a module view."""
        module = view.module
        progress = view.progress
        return cls(
            id=module.id,
            title=module.title,
            description=module.description,
            category=module.category,
            folder=module.folder_name(default_folder),
            ordinal=module.ordinal,
            video_url=module.video_url,
            opens_externally=module.opens_externally,
            transcript=module.transcript,
            question_count=len(module.questions),
            locked=view.locked,
            status=view.status,
            completion_percent=view.completion_percent,
            video_watched=progress.video_watched if progress else False,
            score=progress.score if progress else None,
            passed=progress.passed if progress else False,
            attempts=progress.attempts if progress else 0,
        )


class FolderResponse(BaseModel):
    """Modules of one folder, in curriculum order."""

    name: str
    modules: list[LearnerModuleResponse]


class DashboardResponse(BaseModel):
    """The learner's whole curriculum."""

    role: StaffRole
    account_type: AccountType
    folders: list[FolderResponse]
    passed_count: int
    total: int
