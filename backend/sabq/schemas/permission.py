from pydantic import BaseModel


class PermissionResponse(BaseModel):
    code: str
    label: str
    resource: str
    action: str


class PermissionGroupResponse(BaseModel):
    resource: str
    permissions: list[PermissionResponse]


class UserPermissionsResponse(BaseModel):
    roles: list[str]
    permissions: list[str]
