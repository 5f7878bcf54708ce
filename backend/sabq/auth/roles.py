"""Role registry: the fixed, ordered set of roles and their localized text."""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .errors import RBACConfigurationError, UnknownLocaleError, UnknownRoleError


def role_key(role: str | Enum | "Role") -> str:
    """Normalize a role given as a plain string, an enum member or a Role."""
    if isinstance(role, Role):
        return role.name
    if isinstance(role, Enum):
        return str(role.value)
    return role


@dataclass(frozen=True)
class Role:
    name: str
    labels: Mapping[str, str] = field(default_factory=dict, compare=False)
    descriptions: Mapping[str, str] = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        return self.name


class RoleRegistry:
    """Immutable registry of roles, in declaration order."""

    def __init__(self, roles: Iterable[Role], locales: Sequence[str]):
        self._locales = tuple(locales)
        ordered = tuple(roles)
        problems: list[str] = []
        by_name: dict[str, Role] = {}

        for role in ordered:
            if not role.name:
                problems.append("Role with an empty name")
                continue
            if role.name in by_name:
                problems.append(f"Duplicate role '{role.name}'")
                continue
            by_name[role.name] = role
            for locale in self._locales:
                if not role.labels.get(locale):
                    problems.append(f"Role '{role.name}' has no '{locale}' label")
                if not role.descriptions.get(locale):
                    problems.append(f"Role '{role.name}' has no '{locale}' description")

        if problems:
            raise RBACConfigurationError(problems)

        self._roles = ordered
        self._by_name = MappingProxyType(by_name)

    @classmethod
    def from_tables(
        cls,
        names: Iterable[str | Enum],
        labels: Mapping[str, Mapping[str, str]],
        descriptions: Mapping[str, Mapping[str, str]],
        locales: Sequence[str],
    ) -> "RoleRegistry":
        roles = []
        for name in names:
            roles.append(
                Role(
                    name=role_key(name),
                    labels=MappingProxyType(
                        {loc: labels.get(loc, {}).get(name, "") for loc in locales}
                    ),
                    descriptions=MappingProxyType(
                        {loc: descriptions.get(loc, {}).get(name, "") for loc in locales}
                    ),
                )
            )
        return cls(roles, locales)

    @property
    def locales(self) -> tuple[str, ...]:
        return self._locales

    def list_roles(self) -> tuple[Role, ...]:
        return self._roles

    def names(self) -> tuple[str, ...]:
        return tuple(role.name for role in self._roles)

    def get(self, role: str | Enum | Role) -> Role:
        name = role_key(role)
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownRoleError(name) from None

    def label_for(self, role: str | Enum | Role, locale: str) -> str:
        return self.get(role).labels[self._check_locale(locale)]

    def description_for(self, role: str | Enum | Role, locale: str) -> str:
        return self.get(role).descriptions[self._check_locale(locale)]

    def _check_locale(self, locale: str) -> str:
        if locale not in self._locales:
            raise UnknownLocaleError(locale, self._locales)
        return locale

    def __contains__(self, role: object) -> bool:
        if not isinstance(role, (str, Enum, Role)):
            return False
        return role_key(role) in self._by_name

    def __iter__(self):
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)
