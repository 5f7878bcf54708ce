"""
RBAC wiring - builds the immutable registry, catalog, binding, resolver and
authorizer from the authored contract.

Callers should go through get_rbac() (or receive an RBAC bundle by injection)
rather than reading rbac_contract tables directly. Tests build alternate
bundles with build_rbac(...) and explicit tables.

The default contract is validated when this module is imported, and again by
the application lifespan before it serves requests. Any authoring mistake
raises RBACConfigurationError and must abort startup.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from . import rbac_contract
from .assignment import AssignmentRule, RoleAssignmentAuthorizer
from .bindings import PermissionGrant, RolePermissionBinding
from .permissions import PermissionCatalog
from .resolver import PermissionResolver
from .roles import RoleRegistry

logger = logging.getLogger("sabq.rbac")


@dataclass(frozen=True)
class RBAC:
    registry: RoleRegistry
    catalog: PermissionCatalog
    binding: RolePermissionBinding
    resolver: PermissionResolver
    authorizer: RoleAssignmentAuthorizer


def build_rbac(
    *,
    role_names: Iterable[str | Enum] = tuple(rbac_contract.RoleName),
    role_labels: Mapping[str, Mapping[str, str]] = rbac_contract.ROLE_LABELS,
    role_descriptions: Mapping[str, Mapping[str, str]] = rbac_contract.ROLE_DESCRIPTIONS,
    permissions: Iterable[Sequence[str]] = rbac_contract.PERMISSIONS,
    permission_label_columns: Sequence[str] = rbac_contract.PERMISSION_LABEL_COLUMNS,
    grants: Mapping[str | Enum, PermissionGrant] = rbac_contract.ROLE_PERMISSION_MAPPINGS,
    assignment_rules: Mapping[str | Enum, AssignmentRule] = rbac_contract.ROLE_ASSIGNMENT_RULES,
    locales: Sequence[str] = rbac_contract.SUPPORTED_LOCALES,
) -> RBAC:
    """Build an RBAC bundle. Raises RBACConfigurationError on inconsistent tables."""
    registry = RoleRegistry.from_tables(role_names, role_labels, role_descriptions, locales)
    catalog = PermissionCatalog.from_table(permissions, locales, permission_label_columns)
    binding = RolePermissionBinding(registry, catalog, grants)
    return RBAC(
        registry=registry,
        catalog=catalog,
        binding=binding,
        resolver=PermissionResolver(binding),
        authorizer=RoleAssignmentAuthorizer(registry, assignment_rules),
    )


_default_rbac: RBAC | None = None
_default_rbac_lock = threading.Lock()


def get_rbac() -> RBAC:
    """Return the default RBAC bundle, building it on first access."""
    global _default_rbac

    if _default_rbac is not None:
        return _default_rbac

    with _default_rbac_lock:
        if _default_rbac is None:
            _default_rbac = build_rbac()

    return _default_rbac


def validate_contract() -> RBAC:
    """Validate the authored contract and log its size.

    Raises:
        RBACConfigurationError: If any table references an unknown role or
            permission, or any role or code is malformed.
    """
    rbac = get_rbac()
    logger.info(
        "RBAC contract validated: %d roles, %d permissions, wildcard role '%s'",
        len(rbac.registry),
        len(rbac.catalog),
        rbac.binding.wildcard_role,
    )
    return rbac


def resolve_permissions(role_names: Iterable[str | Enum]) -> frozenset[str]:
    return get_rbac().resolver.resolve(role_names)


def can_assign_role(assigner_role: str | Enum, target_role: str | Enum) -> bool:
    return get_rbac().authorizer.can_assign(assigner_role, target_role)


# Fail fast on import
validate_contract()
