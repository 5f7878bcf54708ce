"""Permission catalog: every atomic ``<resource>.<action>`` code the system knows."""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .errors import RBACConfigurationError, UnknownLocaleError, UnknownPermissionError

SEPARATOR = "."


@dataclass(frozen=True)
class PermissionCode:
    code: str
    labels: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def resource(self) -> str:
        return self.code.split(SEPARATOR, 1)[0]

    @property
    def action(self) -> str:
        return self.code.split(SEPARATOR, 1)[1]

    def __str__(self) -> str:
        return self.code


def _code_problems(code: str) -> list[str]:
    if "*" in code:
        return [f"Wildcard permission '{code}' is forbidden; list codes explicitly"]
    resource, sep, action = code.partition(SEPARATOR)
    if not sep:
        return [f"Permission '{code}' has no '{SEPARATOR}' separator"]
    if not resource or not action:
        return [f"Permission '{code}' must be '<resource>{SEPARATOR}<action>'"]
    return []


class PermissionCatalog:
    """Immutable, ordered catalog of permission codes.

    Every code is checked when the catalog is built; a malformed code is an
    authoring mistake and raises RBACConfigurationError here rather than being
    grouped under an empty resource later.
    """

    def __init__(self, permissions: Iterable[PermissionCode], locales: Sequence[str]):
        self._locales = tuple(locales)
        ordered = tuple(permissions)
        problems: list[str] = []
        by_code: dict[str, PermissionCode] = {}

        for permission in ordered:
            code_problems = _code_problems(permission.code)
            if code_problems:
                problems.extend(code_problems)
                continue
            if permission.code in by_code:
                problems.append(f"Duplicate permission '{permission.code}'")
                continue
            by_code[permission.code] = permission
            for locale in self._locales:
                if not permission.labels.get(locale):
                    problems.append(
                        f"Permission '{permission.code}' has no '{locale}' label"
                    )

        if problems:
            raise RBACConfigurationError(problems)

        self._permissions = ordered
        self._by_code = MappingProxyType(by_code)

    @classmethod
    def from_table(
        cls,
        rows: Iterable[Sequence[str]],
        locales: Sequence[str],
        columns: Sequence[str] = ("en", "ar"),
    ) -> "PermissionCatalog":
        """Build from ``(code, *labels)`` rows.

        ``columns`` names the locale of each label column in order. Every
        locale in ``locales`` must be one of them.
        """
        permissions = []
        for code, *labels in rows:
            if len(labels) != len(columns):
                raise RBACConfigurationError(
                    [f"Permission '{code}' has {len(labels)} labels, expected {len(columns)}"]
                )
            permissions.append(
                PermissionCode(code=code, labels=MappingProxyType(dict(zip(columns, labels))))
            )
        return cls(permissions, locales)

    @property
    def locales(self) -> tuple[str, ...]:
        return self._locales

    def list_permissions(self) -> tuple[PermissionCode, ...]:
        return self._permissions

    def codes(self) -> tuple[str, ...]:
        return tuple(permission.code for permission in self._permissions)

    def get(self, code: str) -> PermissionCode:
        try:
            return self._by_code[code]
        except KeyError:
            raise UnknownPermissionError(code) from None

    def label_for(self, code: str, locale: str) -> str:
        permission = self.get(code)
        if locale not in self._locales:
            raise UnknownLocaleError(locale, self._locales)
        return permission.labels[locale]

    def group_by_resource(self) -> dict[str, tuple[PermissionCode, ...]]:
        groups: dict[str, list[PermissionCode]] = {}
        for permission in self._permissions:
            groups.setdefault(permission.resource, []).append(permission)
        return {resource: tuple(items) for resource, items in groups.items()}

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code in self._by_code

    def __iter__(self):
        return iter(self._permissions)

    def __len__(self) -> int:
        return len(self._permissions)
