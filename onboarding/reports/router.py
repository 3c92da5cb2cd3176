"""Admin reporting API endpoints.

Department heads only ever see their own role; HR sees every role.
"""

from fastapi import APIRouter, Query

from onboarding.auth.dependencies import AdminUser
from onboarding.auth.permissions import StaffRole
from onboarding.catalog.router import ensure_manages_role
from onboarding.progress.dependencies import handle_training_error
from onboarding.progress.exceptions import TrainingError

from .dependencies import ReportServiceDep
from .schemas import (
    LearnerProgressResponse,
    ModulePassCount,
    ModulePassCountsResponse,
    ProgressReportResponse,
)


router = APIRouter(prefix="/v1/admin/reports", tags=["admin-reports"])


@router.get(
    "/progress",
    response_model=ProgressReportResponse,
    summary="Staff progress",
)
async def progress_report(
    reports: ReportServiceDep,
    admin: AdminUser,
    role: StaffRole | None = Query(None, description="Restrict to one role"),
    search: str | None = Query(None, max_length=200, description="Learner id filter"),
) -> ProgressReportResponse:
    """Overall progress of each learner on their role's curriculum."""
    if role is not None:
        ensure_manages_role(admin, role)
    try:
        rows = await reports.progress_report(admin.admin_scope, role, search)
    except TrainingError as e:
        raise handle_training_error(e) from e
    items = [LearnerProgressResponse.from_report(r) for r in rows]
    return ProgressReportResponse(items=items, total=len(items))


@router.get(
    "/modules",
    response_model=ModulePassCountsResponse,
    summary="Module pass counts",
)
async def module_pass_counts(
    reports: ReportServiceDep,
    admin: AdminUser,
    role: StaffRole = Query(..., description="Curriculum to report on"),
) -> ModulePassCountsResponse:
    """How many learners passed each module of a role."""
    ensure_manages_role(admin, role)
    try:
        counts = await reports.module_pass_counts(role)
    except TrainingError as e:
        raise handle_training_error(e) from e
    return ModulePassCountsResponse(
        role=role,
        items=[
            ModulePassCount(module_id=module_id, passed_learners=count)
            for module_id, count in counts.items()
        ],
    )
