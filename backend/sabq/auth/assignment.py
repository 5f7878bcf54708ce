"""Role assignment authorization.

Decides whether a holder of one role may grant another role to a user. The
rules are authored as a literal table (see rbac_contract.ROLE_ASSIGNMENT_RULES)
and compiled once into the set of allowed (assigner, target) pairs. There is
no numeric role hierarchy: a new role can only assign or be assigned after an
explicit edit of that table.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import RBACConfigurationError
from .roles import Role, RoleRegistry, role_key


@dataclass(frozen=True)
class AnyRoleExcept:
    """Assigner may grant every registered role but the excluded ones."""

    excluded: frozenset[str] = frozenset()


@dataclass(frozen=True)
class OnlyRoles:
    """Assigner may grant exactly these roles."""

    roles: frozenset[str] = frozenset()


AssignmentRule = Union[AnyRoleExcept, OnlyRoles]


class RoleAssignmentAuthorizer:
    def __init__(self, registry: RoleRegistry, rules: Mapping[str | Enum, AssignmentRule]):
        self._registry = registry
        self._allowed = self._compile(rules)

    def _compile(self, rules: Mapping[str | Enum, AssignmentRule]) -> frozenset[tuple[str, str]]:
        problems: list[str] = []
        allowed: set[tuple[str, str]] = set()

        for assigner, rule in rules.items():
            assigner_name = role_key(assigner)
            if assigner_name not in self._registry:
                problems.append(f"Assignment rule for unregistered role '{assigner_name}'")
                continue

            if isinstance(rule, AnyRoleExcept):
                listed = {role_key(role) for role in rule.excluded}
                targets = [name for name in self._registry.names() if name not in listed]
            elif isinstance(rule, OnlyRoles):
                listed = {role_key(role) for role in rule.roles}
                targets = [name for name in self._registry.names() if name in listed]
            else:
                problems.append(f"Role '{assigner_name}' has an invalid assignment rule {rule!r}")
                continue

            for name in sorted(listed):
                if name not in self._registry:
                    problems.append(
                        f"Assignment rule for '{assigner_name}' references unregistered role '{name}'"
                    )
            allowed.update((assigner_name, target) for target in targets)

        if problems:
            raise RBACConfigurationError(problems)
        return frozenset(allowed)

    def can_assign(self, assigner_role: str | Enum | Role, target_role: str | Enum | Role) -> bool:
        assigner = self._registry.get(assigner_role).name
        target = self._registry.get(target_role).name
        return (assigner, target) in self._allowed

    def can_assign_any(
        self, held_roles: Iterable[str | Enum | Role], target_role: str | Enum | Role
    ) -> bool:
        """True when at least one of the held roles may grant ``target_role``."""
        target = self._registry.get(target_role).name
        assigners = {self._registry.get(role).name for role in held_roles}
        return any((assigner, target) in self._allowed for assigner in assigners)

    def assignable_roles(self, assigner_role: str | Enum | Role) -> tuple[Role, ...]:
        assigner = self._registry.get(assigner_role).name
        return tuple(
            role
            for role in self._registry.list_roles()
            if (assigner, role.name) in self._allowed
        )
