import uuid

from pydantic import BaseModel, Field


class RoleResponse(BaseModel):
    name: str
    label: str
    description: str
    permissions: list[str]
    is_wildcard: bool
    user_count: int = 0


class AssignableRoleResponse(BaseModel):
    name: str
    label: str


class RoleAssignmentRequest(BaseModel):
    roles: list[str] = Field(..., min_length=1, max_length=20)


class RoleAssignmentResponse(BaseModel):
    user_id: uuid.UUID
    roles: list[str]
