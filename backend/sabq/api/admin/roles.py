"""
Admin API endpoints for roles, permissions and role assignment.

Every route is guarded by the permissions declared for it in the
enforcement matrix. Labels are returned in the request locale.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ...auth.rbac import RBAC
from ...crud.role import RoleRepository
from ...dependencies import get_db, get_locale, get_rbac, require_enforced_permission
from ...errors import NotFoundError
from ...models.user import User
from ...schemas.activity_log import ActivityLogResponse
from ...schemas.permission import PermissionGroupResponse, PermissionResponse
from ...schemas.role import (
    AssignableRoleResponse,
    RoleAssignmentRequest,
    RoleAssignmentResponse,
    RoleResponse,
)
from ...services.admin.role_service import RoleAssignmentService
from ...services.audit.activity_service import ActivityService, action_label


router = APIRouter(prefix="/admin", tags=["admin-roles"])


def _role_response(rbac: RBAC, name: str, locale: str, user_count: int) -> RoleResponse:
    return RoleResponse(
        name=name,
        label=rbac.registry.label_for(name, locale),
        description=rbac.registry.description_for(name, locale),
        permissions=sorted(rbac.binding.permissions_for(name)),
        is_wildcard=rbac.binding.is_wildcard(name),
        user_count=user_count,
    )


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(
    locale: str = Depends(get_locale),
    rbac: RBAC = Depends(get_rbac),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_enforced_permission("GET", "/api/admin/roles")),
):
    counts = await RoleRepository(db).count_users_by_role()
    return [
        _role_response(rbac, role.name, locale, counts.get(role.name, 0))
        for role in rbac.registry.list_roles()
    ]


@router.get("/roles/{name}", response_model=RoleResponse)
async def get_role(
    name: str,
    locale: str = Depends(get_locale),
    rbac: RBAC = Depends(get_rbac),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_enforced_permission("GET", "/api/admin/roles/{name}")),
):
    if name not in rbac.registry:
        raise NotFoundError("Role not found")
    counts = await RoleRepository(db).count_users_by_role()
    return _role_response(rbac, name, locale, counts.get(name, 0))


@router.get("/permissions", response_model=list[PermissionGroupResponse])
async def list_permissions(
    locale: str = Depends(get_locale),
    rbac: RBAC = Depends(get_rbac),
    _: User = Depends(require_enforced_permission("GET", "/api/admin/permissions")),
):
    return [
        PermissionGroupResponse(
            resource=resource,
            permissions=[
                PermissionResponse(
                    code=permission.code,
                    label=rbac.catalog.label_for(permission.code, locale),
                    resource=permission.resource,
                    action=permission.action,
                )
                for permission in permissions
            ],
        )
        for resource, permissions in rbac.catalog.group_by_resource().items()
    ]


@router.get("/users/{user_id}/assignable-roles", response_model=list[AssignableRoleResponse])
async def list_assignable_roles(
    user_id: UUID,
    locale: str = Depends(get_locale),
    rbac: RBAC = Depends(get_rbac),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_enforced_permission("GET", "/api/admin/users/{user_id}/assignable-roles")
    ),
):
    """Roles the caller may grant to ``user_id``; empty when it is the caller."""
    if current_user.id == user_id:
        return []
    roles = await RoleAssignmentService(db, rbac).assignable_roles(current_user)
    return [
        AssignableRoleResponse(name=role.name, label=rbac.registry.label_for(role, locale))
        for role in roles
    ]


@router.put("/users/{user_id}/roles", response_model=RoleAssignmentResponse)
async def assign_user_roles(
    user_id: UUID,
    payload: RoleAssignmentRequest,
    request: Request,
    rbac: RBAC = Depends(get_rbac),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_enforced_permission("PUT", "/api/admin/users/{user_id}/roles")
    ),
):
    roles = await RoleAssignmentService(db, rbac).assign_roles(
        current_user,
        user_id,
        payload.roles,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return RoleAssignmentResponse(user_id=user_id, roles=roles)


@router.get("/activity-logs", response_model=list[ActivityLogResponse])
async def list_activity_logs(
    action: str | None = Query(None, max_length=100),
    user_id: UUID | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    locale: str = Depends(get_locale),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_enforced_permission("GET", "/api/admin/activity-logs")),
):
    entries = await ActivityService(db).list_recent(
        limit=limit, offset=offset, action=action, user_id=user_id
    )
    responses = []
    for entry in entries:
        response = ActivityLogResponse.model_validate(entry)
        response.action_label = action_label(entry.action, locale)
        responses.append(response)
    return responses
