"""Role -> permission binding.

A role's grant is either an explicit set of codes or ALL_PERMISSIONS. The
wildcard is resolved against the catalog every time it is asked for, so a
code added to the catalog reaches the wildcard role with no other change.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Union

from .errors import RBACConfigurationError
from .permissions import PermissionCatalog
from .roles import Role, RoleRegistry, role_key


@dataclass(frozen=True)
class ExplicitPermissions:
    codes: frozenset[str] = frozenset()


@dataclass(frozen=True)
class AllPermissions:
    pass


ALL_PERMISSIONS = AllPermissions()

PermissionGrant = Union[ExplicitPermissions, AllPermissions]


class RolePermissionBinding:
    def __init__(
        self,
        registry: RoleRegistry,
        catalog: PermissionCatalog,
        grants: Mapping[str | Enum, PermissionGrant],
    ):
        self._registry = registry
        self._catalog = catalog
        normalized = {role_key(role): grant for role, grant in grants.items()}
        self._validate(normalized)
        self._grants = MappingProxyType(normalized)

    def _validate(self, grants: Mapping[str, PermissionGrant]) -> None:
        problems: list[str] = []
        wildcard_roles: list[str] = []

        for role, grant in grants.items():
            if role not in self._registry:
                problems.append(f"Binding references unregistered role '{role}'")
                continue
            if isinstance(grant, AllPermissions):
                wildcard_roles.append(role)
            elif isinstance(grant, ExplicitPermissions):
                for code in sorted(grant.codes):
                    if code not in self._catalog:
                        problems.append(
                            f"Role '{role}' is granted unknown permission '{code}'"
                        )
            else:
                problems.append(
                    f"Role '{role}' has an invalid grant {grant!r}; "
                    "use ExplicitPermissions or ALL_PERMISSIONS"
                )

        for name in self._registry.names():
            if name not in grants:
                problems.append(f"Role '{name}' has no permission binding")

        if len(wildcard_roles) != 1:
            problems.append(
                "Exactly one role must be bound to ALL_PERMISSIONS, "
                f"found {len(wildcard_roles)}: {sorted(wildcard_roles)}"
            )

        if problems:
            raise RBACConfigurationError(problems)

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    @property
    def registry(self) -> RoleRegistry:
        return self._registry

    def grant_for(self, role: str | Enum | Role) -> PermissionGrant:
        return self._grants[self._registry.get(role).name]

    def is_wildcard(self, role: str | Enum | Role) -> bool:
        return isinstance(self.grant_for(role), AllPermissions)

    @property
    def wildcard_role(self) -> str:
        for name, grant in self._grants.items():
            if isinstance(grant, AllPermissions):
                return name
        raise RBACConfigurationError(["No role is bound to ALL_PERMISSIONS"])

    def permissions_for(self, role: str | Enum | Role) -> frozenset[str]:
        grant = self.grant_for(role)
        if isinstance(grant, AllPermissions):
            return frozenset(self._catalog.codes())
        return grant.codes
