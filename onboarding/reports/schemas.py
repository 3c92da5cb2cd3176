"""Pydantic schemas for admin reports."""

from uuid import UUID

from pydantic import BaseModel

from onboarding.auth.permissions import StaffRole

from .service import LearnerReport


class LearnerProgressResponse(BaseModel):
    """One row of the staff progress table."""

    learner_id: str
    role: StaffRole
    passed_count: int
    total_modules: int
    percent: int
    label: str
    certified: bool

    @classmethod
    def from_report(cls, report: LearnerReport) -> "LearnerProgressResponse":
        """Create response from a learner report."""
        return cls(
            learner_id=report.learner_id,
            role=report.role,
            passed_count=report.stats.passed_count,
            total_modules=report.stats.total,
            percent=report.stats.percent,
            label=report.stats.label,
            certified=report.stats.certified,
        )


class ProgressReportResponse(BaseModel):
    """Staff progress table."""

    items: list[LearnerProgressResponse]
    total: int


class ModulePassCount(BaseModel):
    module_id: UUID
    passed_learners: int


class ModulePassCountsResponse(BaseModel):
    """Pass counts per module of one role."""

    role: StaffRole
    items: list[ModulePassCount]
