"""Pydantic schemas for the training module catalog."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from onboarding.auth.permissions import StaffRole

from .models import ModuleCategory, Question, TrainingModule


# ==============================================================================
# Authoring Schemas
# ==============================================================================


class QuestionSchema(BaseModel):
    """Quiz question as authored (manually or by the question generator)."""

    text: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=2)
    correct_answer_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_answer_index(self) -> "QuestionSchema":
        if self.correct_answer_index >= len(self.options):
            msg = "correct_answer_index must point at one of the options"
            raise ValueError(msg)
        return self

    def to_entity(self) -> Question:
        return Question(
            text=self.text,
            options=tuple(self.options),
            correct_answer_index=self.correct_answer_index,
        )


class CreateModuleRequest(BaseModel):
    """Request to add a module at the end of a role's curriculum."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    role: StaffRole
    category: ModuleCategory = ModuleCategory.NEW
    folder: str | None = Field(None, max_length=100)
    video_url: str = Field(..., min_length=1)
    transcript: str = ""
    questions: list[QuestionSchema] = Field(default_factory=list)


class ReorderModulesRequest(BaseModel):
    """New curriculum order for a role (every module exactly once)."""

    role: StaffRole
    module_ids: list[UUID] = Field(..., min_length=1)


# ==============================================================================
# Response Schemas
# ==============================================================================


class QuestionResponse(BaseModel):
    """Question with its answer (admin view only)."""

    text: str
    options: list[str]
    correct_answer_index: int


class ModuleResponse(BaseModel):
    """Full module description for administrators."""

    id: UUID
    title: str
    description: str
    role: StaffRole
    category: ModuleCategory
    folder: str | None
    video_url: str
    transcript: str
    ordinal: int
    question_count: int
    questions: list[QuestionResponse] = []
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: TrainingModule) -> "ModuleResponse":
        """Create response from entity."""
        return cls(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            role=entity.role,
            category=entity.category,
            folder=entity.folder,
            video_url=entity.video_url,
            transcript=entity.transcript,
            ordinal=entity.ordinal,
            question_count=len(entity.questions),
            questions=[
                QuestionResponse(
                    text=q.text,
                    options=list(q.options),
                    correct_answer_index=q.correct_answer_index,
                )
                for q in entity.questions
            ],
            created_at=entity.created_at,
        )


class ModuleListResponse(BaseModel):
    """List of modules in curriculum order."""

    items: list[ModuleResponse]
    total: int
