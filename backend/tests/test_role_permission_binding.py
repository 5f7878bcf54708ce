import pytest

from sabq.auth.bindings import ALL_PERMISSIONS, ExplicitPermissions
from sabq.auth.errors import RBACConfigurationError, UnknownRoleError
from sabq.auth.rbac import build_rbac


def test_explicit_roles_are_subsets_of_catalog(rbac) -> None:
    catalog = set(rbac.catalog.codes())
    for name in rbac.registry.names():
        if name == rbac.binding.wildcard_role:
            continue
        assert rbac.binding.permissions_for(name) <= catalog


def test_wildcard_role_gets_whole_catalog(rbac) -> None:
    assert rbac.binding.wildcard_role == "system_admin"
    assert rbac.binding.is_wildcard("system_admin")
    assert rbac.binding.permissions_for("system_admin") == frozenset(rbac.catalog.codes())


def test_wildcard_follows_catalog_growth(small_tables) -> None:
    small_tables["permissions"] = (
        *small_tables["permissions"],
        ("posts.pin", "Pin Posts", "تثبيت المنشورات"),
    )
    grown = build_rbac(**small_tables)
    assert "posts.pin" in grown.binding.permissions_for("owner")
    assert "posts.pin" not in grown.binding.permissions_for("writer")


def test_permissions_for_unknown_role_raises(rbac) -> None:
    with pytest.raises(UnknownRoleError):
        rbac.binding.permissions_for("superuser_typo")


def test_grant_for_unregistered_role_rejected(small_tables) -> None:
    small_tables["grants"] = {**small_tables["grants"], "ghost": ExplicitPermissions()}
    with pytest.raises(RBACConfigurationError, match="unregistered role 'ghost'"):
        build_rbac(**small_tables)


def test_grant_of_unknown_code_rejected(small_tables) -> None:
    small_tables["grants"] = {
        **small_tables["grants"],
        "guest": ExplicitPermissions(frozenset({"posts.delete"})),
    }
    with pytest.raises(RBACConfigurationError, match="unknown permission 'posts.delete'"):
        build_rbac(**small_tables)


def test_role_without_binding_rejected(small_tables) -> None:
    grants = dict(small_tables["grants"])
    del grants["guest"]
    small_tables["grants"] = grants
    with pytest.raises(RBACConfigurationError, match="Role 'guest' has no permission binding"):
        build_rbac(**small_tables)


def test_no_wildcard_role_rejected(small_tables) -> None:
    small_tables["grants"] = {**small_tables["grants"], "owner": ExplicitPermissions()}
    with pytest.raises(RBACConfigurationError, match="found 0"):
        build_rbac(**small_tables)


def test_two_wildcard_roles_rejected(small_tables) -> None:
    small_tables["grants"] = {**small_tables["grants"], "writer": ALL_PERMISSIONS}
    with pytest.raises(RBACConfigurationError, match="found 2"):
        build_rbac(**small_tables)


def test_string_marker_is_not_a_grant(small_tables) -> None:
    small_tables["grants"] = {**small_tables["grants"], "guest": "*"}
    with pytest.raises(RBACConfigurationError, match="invalid grant"):
        build_rbac(**small_tables)


def test_all_problems_reported_together(small_tables) -> None:
    small_tables["grants"] = {
        "owner": ExplicitPermissions(),
        "writer": ExplicitPermissions(frozenset({"posts.nope"})),
    }
    with pytest.raises(RBACConfigurationError) as exc_info:
        build_rbac(**small_tables)
    assert len(exc_info.value.problems) == 3
