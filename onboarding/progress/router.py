"""Learner curriculum and progress API endpoints.

Provides routes for:
- The learner's dashboard (modules grouped by folder, with lock state)
- Module detail (403 while locked)
- Video completion and re-watch
- Progress queries
- Training data cleanup when a staff account is deleted (HR)
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from onboarding.auth.dependencies import AdminUser, CurrentLearner
from onboarding.auth.permissions import is_hr
from onboarding.catalog.dependencies import handle_catalog_error
from onboarding.catalog.service import CatalogError

from .dependencies import TrainingServiceDep, handle_training_error
from .exceptions import TrainingError
from .gating import ModuleStatus
from .schemas import (
    DashboardResponse,
    FolderResponse,
    LearnerModuleResponse,
    ProgressListResponse,
    ProgressResponse,
)


modules_router = APIRouter(prefix="/v1/modules", tags=["modules"])
router = APIRouter(prefix="/v1/progress", tags=["progress"])
admin_router = APIRouter(prefix="/v1/admin/learners", tags=["admin-learners"])


# ==============================================================================
# Curriculum Endpoints
# ==============================================================================


@modules_router.get("", response_model=DashboardResponse, summary="My curriculum")
async def get_dashboard(
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> DashboardResponse:
    """Get the modules of the learner's role, grouped by folder, in order."""
    try:
        views = await training.get_dashboard(learner)
    except TrainingError as e:
        raise handle_training_error(e) from e

    folders = [
        FolderResponse(
            name=name,
            modules=[
                LearnerModuleResponse.from_view(v, training.default_folder)
                for v in group
            ],
        )
        for name, group in training.group_by_folder(views).items()
    ]
    return DashboardResponse(
        role=learner.role,
        account_type=learner.account_type,
        folders=folders,
        passed_count=sum(1 for v in views if v.status == ModuleStatus.PASSED),
        total=len(views),
    )


@modules_router.get(
    "/{module_id}",
    response_model=LearnerModuleResponse,
    summary="Open module",
)
async def get_module(
    module_id: UUID,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> LearnerModuleResponse:
    """Get one module of the learner's curriculum.

    Locked modules are refused with 403 until the previous one is passed.
    """
    try:
        view = await training.get_module_view(learner, module_id)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return LearnerModuleResponse.from_view(view, training.default_folder)


# ==============================================================================
# Progress Endpoints
# ==============================================================================


@router.get("", response_model=ProgressListResponse, summary="My progress")
async def list_progress(
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> ProgressListResponse:
    """Get every stored progress record of the learner."""
    try:
        records = await training.list_progress(learner)
    except TrainingError as e:
        raise handle_training_error(e) from e
    items = [ProgressResponse.from_entity(r) for r in records]
    return ProgressListResponse(items=items, total=len(items))


@router.post(
    "/{module_id}/video",
    response_model=ProgressResponse,
    summary="Mark video watched",
)
async def mark_video_watched(
    module_id: UUID,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> ProgressResponse:
    """Record that the learner finished (or opened, for external links) the video."""
    try:
        record = await training.mark_video_watched(learner, module_id)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return ProgressResponse.from_entity(record)


@router.post(
    "/{module_id}/rewatch",
    response_model=ProgressResponse,
    summary="Re-watch video",
)
async def rewatch(
    module_id: UUID,
    training: TrainingServiceDep,
    learner: CurrentLearner,
) -> ProgressResponse:
    """Reset the module: video, score, pass and failed attempts.

    This is the only way out of a strike-out.
    """
    try:
        record = await training.rewatch(learner, module_id)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    except TrainingError as e:
        raise handle_training_error(e) from e
    return ProgressResponse.from_entity(record)


# ==============================================================================
# Admin Endpoints
# ==============================================================================


@admin_router.delete(
    "/{learner_id}/progress",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete learner training data",
)
async def delete_learner_progress(
    learner_id: str,
    training: TrainingServiceDep,
    admin: AdminUser,
) -> None:
    """Remove all progress of a deleted staff account. HR only."""
    if not is_hr(admin.admin_scope):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only HR can delete staff training data",
        )
    try:
        await training.delete_learner(learner_id)
    except TrainingError as e:
        raise handle_training_error(e) from e
