from fastapi import APIRouter, Depends

from ..dependencies import get_current_user, get_permission_service
from ..models.user import User
from ..schemas.permission import UserPermissionsResponse
from ..services.admin.permission_service import PermissionService


router = APIRouter(prefix="/me", tags=["me"])


@router.get("/permissions", response_model=UserPermissionsResponse)
async def my_permissions(
    current_user: User = Depends(get_current_user),
    permission_service: PermissionService = Depends(get_permission_service),
):
    roles = await permission_service.get_user_roles(current_user)
    permissions = await permission_service.get_user_permissions(current_user)
    return UserPermissionsResponse(roles=roles, permissions=sorted(permissions))
