import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sabq.errors import (
    NotFoundError,
    RoleAssignmentDeniedError,
    SelfModificationError,
    ValidationError,
)
from sabq.models.role import Role
from sabq.models.user import User
from sabq.services.admin.role_service import RoleAssignmentService
from sabq.services.audit.activity_service import ActivityAction


def make_user(role: str) -> User:
    return User(id=uuid.uuid4(), email=f"{role}@example.com", role=role, status="active")


def make_role_row(name: str) -> Role:
    return Role(id=uuid.uuid4(), name=name, name_ar=name, display_name=name)


@pytest.fixture
def session():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def target():
    return make_user("reader")


@pytest.fixture
def service(session, target):
    service = RoleAssignmentService(session)
    service.user_repo = MagicMock()
    service.user_repo.get_by_id = AsyncMock(return_value=target)
    service.role_repo = MagicMock()
    service.role_repo.get_user_role_names = AsyncMock(return_value=[])
    service.role_repo.list_by_names = AsyncMock(
        side_effect=lambda names: [make_role_row(name) for name in names]
    )
    service.role_repo.replace_user_roles = AsyncMock()
    # The nested permission service reads actor roles through its own repo
    service.permission_service.role_repo = MagicMock()
    service.permission_service.role_repo.get_user_role_names = AsyncMock(return_value=[])
    return service


@pytest.mark.anyio
async def test_cannot_modify_own_roles(service):
    actor = make_user("system_admin")
    with pytest.raises(SelfModificationError) as exc_info:
        await service.assign_roles(actor, actor.id, ["reader"])
    assert exc_info.value.status_code == 403
    service.role_repo.replace_user_roles.assert_not_called()


@pytest.mark.anyio
async def test_target_must_exist(service):
    service.user_repo.get_by_id.return_value = None
    with pytest.raises(NotFoundError):
        await service.assign_roles(make_user("admin"), uuid.uuid4(), ["reader"])


@pytest.mark.anyio
async def test_unknown_role_rejected(service, target):
    with pytest.raises(ValidationError) as exc_info:
        await service.assign_roles(make_user("admin"), target.id, ["editor", "ghost"])
    assert exc_info.value.code == "UNKNOWN_ROLE"
    assert exc_info.value.details == ["ghost"]


@pytest.mark.anyio
async def test_admin_cannot_grant_system_admin(service, target):
    with pytest.raises(RoleAssignmentDeniedError) as exc_info:
        await service.assign_roles(make_user("admin"), target.id, ["editor", "system_admin"])
    assert exc_info.value.details == {"role": "system_admin"}
    service.role_repo.replace_user_roles.assert_not_called()


@pytest.mark.anyio
async def test_editor_cannot_grant_anything(service, target):
    with pytest.raises(RoleAssignmentDeniedError):
        await service.assign_roles(make_user("editor"), target.id, ["reader"])


@pytest.mark.anyio
async def test_missing_seed_row_rejected(service, target):
    service.role_repo.list_by_names.side_effect = None
    service.role_repo.list_by_names.return_value = []
    with pytest.raises(ValidationError) as exc_info:
        await service.assign_roles(make_user("admin"), target.id, ["editor"])
    assert exc_info.value.code == "ROLE_NOT_SEEDED"


@pytest.mark.anyio
async def test_successful_assignment_replaces_rows_and_logs(service, session, target):
    actor = make_user("admin")
    with patch("sabq.services.admin.role_service.ActivityService") as MockActivityService:
        MockActivityService.return_value.log = AsyncMock()
        roles = await service.assign_roles(
            actor,
            target.id,
            ["reporter", "editor", "editor"],
            ip_address="10.0.0.1",
            user_agent="pytest",
        )

    assert roles == ["editor", "reporter"]
    replace_args = service.role_repo.replace_user_roles.call_args
    assert replace_args.args[0] == target.id
    assert [row.name for row in replace_args.args[1]] == ["editor", "reporter"]
    assert replace_args.kwargs["assigned_by"] == actor.id
    session.commit.assert_awaited_once()

    log_call = MockActivityService.return_value.log.call_args
    assert log_call.args[0] == ActivityAction.ROLES_UPDATED
    assert log_call.kwargs["old_value"] == {"roles": ["reader"]}
    assert log_call.kwargs["new_value"] == {"roles": ["editor", "reporter"]}
    assert log_call.kwargs["ip_address"] == "10.0.0.1"
    assert log_call.kwargs["commit"] is False


@pytest.mark.anyio
async def test_assignable_roles_for_admin(service, rbac):
    roles = await service.assignable_roles(make_user("admin"))
    assert [role.name for role in roles] == [
        name for name in rbac.registry.names() if name != "system_admin"
    ]


@pytest.mark.anyio
async def test_assignable_roles_for_reporter_is_empty(service):
    assert await service.assignable_roles(make_user("reporter")) == []


@pytest.mark.anyio
async def test_failed_audit_write_leaves_roles_uncommitted(service, session, target):
    with patch("sabq.services.admin.role_service.ActivityService") as MockActivityService:
        MockActivityService.return_value.log = AsyncMock(side_effect=RuntimeError("db down"))
        with pytest.raises(RuntimeError):
            await service.assign_roles(make_user("admin"), target.id, ["editor"])

    service.role_repo.replace_user_roles.assert_awaited_once()
    session.commit.assert_not_called()
    session.rollback.assert_awaited_once()


@pytest.mark.anyio
async def test_admin_cannot_demote_system_admin(service, session):
    service.role_repo.get_user_role_names.return_value = ["system_admin"]
    with pytest.raises(RoleAssignmentDeniedError) as exc_info:
        await service.assign_roles(make_user("admin"), uuid.uuid4(), ["reader"])
    assert exc_info.value.details == {"role": "system_admin"}
    service.role_repo.replace_user_roles.assert_not_called()
    session.commit.assert_not_called()


@pytest.mark.anyio
async def test_legacy_system_admin_column_is_also_guarded(service, session):
    service.user_repo.get_by_id.return_value = make_user("system_admin")
    with pytest.raises(RoleAssignmentDeniedError):
        await service.assign_roles(make_user("admin"), uuid.uuid4(), ["editor"])
    session.commit.assert_not_called()


@pytest.mark.anyio
async def test_system_admin_may_demote_system_admin(service, session):
    service.role_repo.get_user_role_names.return_value = ["system_admin"]
    with patch("sabq.services.admin.role_service.ActivityService") as MockActivityService:
        MockActivityService.return_value.log = AsyncMock()
        roles = await service.assign_roles(make_user("system_admin"), uuid.uuid4(), ["reader"])
    assert roles == ["reader"]
    session.commit.assert_awaited_once()
    log_call = MockActivityService.return_value.log.call_args
    assert log_call.kwargs["old_value"] == {"roles": ["system_admin"]}
