"""Effective permission resolution for a principal's held roles."""
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from .bindings import AllPermissions, RolePermissionBinding
from .roles import Role


class PermissionResolver:
    """Computes the effective permission set for a collection of role names.

    Pure: the result depends only on the input names and the binding, so it
    is safe to call concurrently and never needs invalidation.
    """

    def __init__(self, binding: RolePermissionBinding):
        self._binding = binding

    def resolve(self, role_names: Iterable[str | Enum | Role]) -> frozenset[str]:
        # Look every role up first so an unknown name fails regardless of
        # whether a wildcard role appears elsewhere in the input.
        grants = [self._binding.grant_for(name) for name in set(role_names)]

        if any(isinstance(grant, AllPermissions) for grant in grants):
            return frozenset(self._binding.catalog.codes())

        effective: set[str] = set()
        for grant in grants:
            effective |= grant.codes
        return frozenset(effective)

    def has_permission(self, role_names: Iterable[str | Enum | Role], code: str) -> bool:
        self._binding.catalog.get(code)
        return code in self.resolve(role_names)

    def has_any_permission(
        self, role_names: Iterable[str | Enum | Role], codes: Iterable[str]
    ) -> bool:
        wanted = self._known(codes)
        return bool(wanted & self.resolve(role_names))

    def has_all_permissions(
        self, role_names: Iterable[str | Enum | Role], codes: Iterable[str]
    ) -> bool:
        wanted = self._known(codes)
        return wanted <= self.resolve(role_names)

    def _known(self, codes: Iterable[str]) -> frozenset[str]:
        catalog = self._binding.catalog
        return frozenset(catalog.get(code).code for code in codes)
