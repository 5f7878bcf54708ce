"""Declarative mapping of protected endpoints to required permissions.

Each key is a (METHOD, PATH) tuple and the value is the tuple of permission
codes the caller must hold. Every code must exist in the permission catalog;
the matrix is checked when this module is imported.
"""
from .errors import RBACConfigurationError
from .permissions import PermissionCatalog
from .rbac import get_rbac

ENFORCEMENT_MATRIX: dict[tuple[str, str], tuple[str, ...]] = {
    ("GET", "/api/admin/roles"): ("users.view",),
    ("GET", "/api/admin/roles/{name}"): ("users.view",),
    ("GET", "/api/admin/permissions"): ("users.view",),
    ("GET", "/api/admin/users/{user_id}/assignable-roles"): ("users.change_role",),
    ("PUT", "/api/admin/users/{user_id}/roles"): ("users.change_role",),
    ("GET", "/api/admin/activity-logs"): ("system.view_audit",),
}


def validate_matrix(
    catalog: PermissionCatalog,
    matrix: dict[tuple[str, str], tuple[str, ...]] = ENFORCEMENT_MATRIX,
) -> None:
    problems = [
        f"{method} {path} requires unknown permission '{code}'"
        for (method, path), codes in matrix.items()
        for code in codes
        if code not in catalog
    ]
    problems.extend(
        f"{method} {path} declares no permissions"
        for (method, path), codes in matrix.items()
        if not codes
    )
    if problems:
        raise RBACConfigurationError(problems)


def permissions_for(method: str, path: str) -> tuple[str, ...]:
    return ENFORCEMENT_MATRIX[(method, path)]


validate_matrix(get_rbac().catalog)
