"""
Tests for PermissionService role lookup and permission checks.

Repositories and the activity log writer are mocked; the RBAC bundle is real.
"""
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sabq.auth.errors import UnknownPermissionError, UnknownRoleError
from sabq.errors import PermissionError
from sabq.models.user import User
from sabq.services.admin.permission_service import PermissionService
from sabq.services.audit.activity_service import ActivityAction


def make_user(role: str = "reader") -> User:
    return User(id=uuid.uuid4(), email="user@example.com", role=role, status="active")


@pytest.fixture
def permission_service():
    service = PermissionService(MagicMock())
    service.role_repo = MagicMock()
    service.role_repo.get_user_role_names = AsyncMock(return_value=[])
    return service


class TestRoleLookup:
    @pytest.mark.anyio
    async def test_uses_user_roles_rows(self, permission_service):
        permission_service.role_repo.get_user_role_names.return_value = ["reporter", "editor"]
        roles = await permission_service.get_user_roles(make_user("reader"))
        assert roles == ["editor", "reporter"]

    @pytest.mark.anyio
    async def test_falls_back_to_legacy_column(self, permission_service):
        roles = await permission_service.get_user_roles(make_user("comments_moderator"))
        assert roles == ["comments_moderator"]

    @pytest.mark.anyio
    async def test_unregistered_role_in_database_fails_closed(self, permission_service, caplog):
        permission_service.role_repo.get_user_role_names.return_value = ["superuser_typo"]
        with pytest.raises(UnknownRoleError):
            await permission_service.get_user_roles(make_user())
        assert any("superuser_typo" in record.getMessage() for record in caplog.records)


class TestPermissionChecks:
    @pytest.mark.anyio
    async def test_effective_permissions_for_legacy_editor(self, permission_service, rbac):
        permissions = await permission_service.get_user_permissions(make_user("editor"))
        assert permissions == rbac.binding.permissions_for("editor")

    @pytest.mark.anyio
    async def test_has_permission(self, permission_service):
        user = make_user("reporter")
        assert await permission_service.has_permission(user, "articles.create") is True
        assert await permission_service.has_permission(user, "articles.publish") is False

    @pytest.mark.anyio
    async def test_none_user_has_nothing(self, permission_service):
        assert await permission_service.has_permission(None, "articles.view") is False
        assert await permission_service.has_any_permission(None, ["articles.view"]) is False

    @pytest.mark.anyio
    async def test_unknown_code_raises_even_for_anonymous(self, permission_service):
        with pytest.raises(UnknownPermissionError):
            await permission_service.has_permission(None, "articles.teleport")
        with pytest.raises(UnknownPermissionError):
            await permission_service.has_all_permissions(make_user(), ["articles.view", "nope.nope"])

    @pytest.mark.anyio
    async def test_system_admin_holds_everything(self, permission_service, rbac):
        user = make_user("system_admin")
        assert await permission_service.has_all_permissions(user, rbac.catalog.codes())

    @pytest.mark.anyio
    async def test_has_role(self, permission_service):
        permission_service.role_repo.get_user_role_names.return_value = ["editor"]
        user = make_user()
        assert await permission_service.has_role(user, "admin", "editor")
        assert not await permission_service.has_role(user, "admin")
        with pytest.raises(UnknownRoleError):
            await permission_service.has_role(user, "ghost")


class TestDenial:
    @pytest.mark.anyio
    async def test_require_permission_passes_silently(self, permission_service):
        with patch(
            "sabq.services.admin.permission_service.log_best_effort", new_callable=AsyncMock
        ) as log_mock:
            await permission_service.require_permission(make_user("admin"), "users.view")
        log_mock.assert_not_called()

    @pytest.mark.anyio
    async def test_require_permission_denies_and_logs(self, permission_service):
        user = make_user("reader")
        with patch(
            "sabq.services.admin.permission_service.log_best_effort", new_callable=AsyncMock
        ) as log_mock:
            with pytest.raises(PermissionError) as exc_info:
                await permission_service.require_permission(
                    user, "users.view", {"request_path": "/api/admin/roles"}
                )

        assert exc_info.value.status_code == 403
        assert "users.view" not in exc_info.value.message
        log_mock.assert_awaited_once()
        args, kwargs = log_mock.call_args
        assert args[0] == ActivityAction.PERMISSION_DENIED
        assert kwargs["entity_id"] == "users.view"
        assert kwargs["actor"] is user
        assert kwargs["new_value"]["request_path"] == "/api/admin/roles"

    @pytest.mark.anyio
    async def test_require_any_permission(self, permission_service):
        user = make_user("media_manager")
        with patch(
            "sabq.services.admin.permission_service.log_best_effort", new_callable=AsyncMock
        ) as log_mock:
            await permission_service.require_any_permission(user, ["users.view", "media.delete"])
            with pytest.raises(PermissionError):
                await permission_service.require_any_permission(user, ["users.view", "users.ban"])
        assert log_mock.call_args.kwargs["new_value"]["match"] == "any"

    @pytest.mark.anyio
    async def test_require_all_permissions(self, permission_service):
        user = make_user("media_manager")
        with patch(
            "sabq.services.admin.permission_service.log_best_effort", new_callable=AsyncMock
        ):
            await permission_service.require_all_permissions(user, ["media.view", "media.delete"])
            with pytest.raises(PermissionError):
                await permission_service.require_all_permissions(user, ["media.view", "users.ban"])
