import pytest

from sabq.auth.errors import RBACConfigurationError, UnknownLocaleError, UnknownRoleError
from sabq.auth.rbac_contract import RoleName
from sabq.auth.roles import Role, RoleRegistry


def test_list_roles_keeps_declaration_order(rbac) -> None:
    assert rbac.registry.names() == tuple(member.value for member in RoleName)
    assert rbac.registry.list_roles() == rbac.registry.list_roles()


def test_label_for_each_supported_locale(rbac) -> None:
    assert rbac.registry.label_for("editor", "en") == "Editor"
    assert rbac.registry.label_for("editor", "ar") == "محرر"
    assert rbac.registry.label_for(RoleName.READER, "en") == "Reader"


def test_description_for_returns_localized_text(rbac) -> None:
    assert "Full system access" in rbac.registry.description_for("system_admin", "en")


def test_label_for_unknown_role_raises(rbac) -> None:
    with pytest.raises(UnknownRoleError) as exc_info:
        rbac.registry.label_for("superuser_typo", "en")
    assert exc_info.value.role == "superuser_typo"


def test_label_for_unsupported_locale_raises(rbac) -> None:
    with pytest.raises(UnknownLocaleError) as exc_info:
        rbac.registry.label_for("editor", "fr")
    assert exc_info.value.supported == ("ar", "en")


def test_contains_accepts_enum_and_string(rbac) -> None:
    assert "admin" in rbac.registry
    assert RoleName.ADMIN in rbac.registry
    assert "ghost" not in rbac.registry
    assert 42 not in rbac.registry


def test_duplicate_role_rejected() -> None:
    labels = {"en": "X"}
    with pytest.raises(RBACConfigurationError, match="Duplicate role 'x'"):
        RoleRegistry([Role("x", labels, labels), Role("x", labels, labels)], ("en",))


def test_missing_translation_rejected() -> None:
    with pytest.raises(RBACConfigurationError) as exc_info:
        RoleRegistry([Role("x", {"en": "X"}, {"en": "X"})], ("ar", "en"))
    assert "Role 'x' has no 'ar' label" in exc_info.value.problems
    assert "Role 'x' has no 'ar' description" in exc_info.value.problems
