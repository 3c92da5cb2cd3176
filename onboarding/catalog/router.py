"""Curriculum management API endpoints (administrators).

HR (scope ALL) manages every role's curriculum; a department head only the
curriculum of the role their scope names.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from onboarding.auth.dependencies import AdminUser
from onboarding.auth.permissions import StaffRole, can_manage_role, visible_roles
from onboarding.auth.schemas import LearnerIdentity

from .dependencies import CatalogServiceDep, handle_catalog_error
from .schemas import (
    CreateModuleRequest,
    ModuleListResponse,
    ModuleResponse,
    ReorderModulesRequest,
)
from .service import CatalogError


router = APIRouter(prefix="/v1/admin/modules", tags=["admin-modules"])


def ensure_manages_role(admin: LearnerIdentity, role: StaffRole) -> None:
    """Raise 403 unless the admin's scope covers `role`."""
    if admin.admin_scope is None or not can_manage_role(admin.admin_scope, role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Role outside of your admin scope",
        )


@router.get("", response_model=ModuleListResponse, summary="List curriculum")
async def list_modules(
    catalog: CatalogServiceDep,
    admin: AdminUser,
    role: StaffRole | None = Query(None, description="Restrict to one role"),
) -> ModuleListResponse:
    """List modules of every role visible to the admin, in curriculum order."""
    if role is not None:
        ensure_manages_role(admin, role)
        roles = [role]
    else:
        roles = visible_roles(admin.admin_scope)

    items: list[ModuleResponse] = []
    for r in roles:
        modules = await catalog.list_modules(r)
        items.extend(ModuleResponse.from_entity(m) for m in modules)
    return ModuleListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=ModuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add module",
)
async def create_module(
    data: CreateModuleRequest,
    catalog: CatalogServiceDep,
    admin: AdminUser,
) -> ModuleResponse:
    """Append a module (video + quiz) to the end of a role's curriculum."""
    ensure_manages_role(admin, data.role)
    module = await catalog.create_module(data)
    return ModuleResponse.from_entity(module)


@router.put("/order", response_model=ModuleListResponse, summary="Reorder curriculum")
async def reorder_modules(
    data: ReorderModulesRequest,
    catalog: CatalogServiceDep,
    admin: AdminUser,
) -> ModuleListResponse:
    """Set the sequential order of a role's modules."""
    ensure_manages_role(admin, data.role)
    try:
        modules = await catalog.reorder_modules(data.role, data.module_ids)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
    items = [ModuleResponse.from_entity(m) for m in modules]
    return ModuleListResponse(items=items, total=len(items))


@router.delete(
    "/{module_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete module",
)
async def delete_module(
    module_id: UUID,
    catalog: CatalogServiceDep,
    admin: AdminUser,
) -> None:
    """Remove a module from its curriculum."""
    try:
        module = await catalog.get_module(module_id)
        ensure_manages_role(admin, module.role)
        await catalog.delete_module(module_id)
    except CatalogError as e:
        raise handle_catalog_error(e) from e
