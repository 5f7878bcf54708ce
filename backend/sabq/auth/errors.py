"""Errors raised by the RBAC core.

Lookup errors are fatal to the calling operation. Configuration errors are
fatal to process startup.
"""
from __future__ import annotations

from collections.abc import Iterable


class RBACError(Exception):
    """Base class for every RBAC core error."""


class UnknownRoleError(RBACError, LookupError):
    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Unknown role '{role}'")


class UnknownPermissionError(RBACError, LookupError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown permission '{code}'")


class UnknownLocaleError(RBACError, LookupError):
    def __init__(self, locale: str, supported: Iterable[str] = ()):
        self.locale = locale
        self.supported = tuple(supported)
        message = f"Unsupported locale '{locale}'"
        if self.supported:
            message += f". Must be one of: {', '.join(self.supported)}"
        super().__init__(message)


class RBACConfigurationError(RBACError, RuntimeError):
    """Authored RBAC tables are inconsistent. Never a request-time error."""

    def __init__(self, problems: Iterable[str]):
        self.problems = tuple(problems)
        super().__init__(
            "RBAC contract validation failed:\n"
            + "\n".join(f"  - {problem}" for problem in self.problems)
        )
