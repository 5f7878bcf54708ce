from collections.abc import AsyncGenerator
from typing import Callable

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import rbac
from .auth.enforcement_matrix import permissions_for
from .auth.errors import UnknownLocaleError
from .auth.rbac_contract import SUPPORTED_LOCALES
from .config import settings
from .crud.user import UserRepository
from .database import get_session
from .errors import AuthError
from .models.user import User
from .security.token_inspection import ExpiredTokenError, InvalidTokenError, validate_access_token
from .services.admin.permission_service import PermissionService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_rbac() -> rbac.RBAC:
    return rbac.get_rbac()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    try:
        user_id = validate_access_token(credentials.credentials)
    except ExpiredTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired"
        ) from None
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from None

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )
    if user.status != "active":
        raise AuthError("Account is not active", code="ACCOUNT_INACTIVE")

    return user


def _locale_from_header(header: str | None) -> str | None:
    if not header:
        return None
    for part in header.split(","):
        tag = part.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in SUPPORTED_LOCALES:
            return primary
    return None


def get_locale(
    request: Request,
    lang: str | None = Query(None, min_length=2, max_length=10),
) -> str:
    """Explicit ?lang= wins and must be supported; Accept-Language is best match."""
    if lang is not None:
        locale = lang.strip().lower()
        if locale not in SUPPORTED_LOCALES:
            raise UnknownLocaleError(locale, SUPPORTED_LOCALES)
        return locale
    return _locale_from_header(request.headers.get("accept-language")) or settings.default_locale


def get_permission_service(
    db: AsyncSession = Depends(get_db),
    rbac_bundle: rbac.RBAC = Depends(get_rbac),
) -> PermissionService:
    return PermissionService(db, rbac_bundle)


def _request_context(request: Request) -> dict[str, str]:
    return {"request_method": request.method, "request_path": request.url.path}


def require_permission(code: str) -> Callable:
    """Dependency enforcing a single permission (401 if anonymous, 403 if missing)."""
    async def dependency(
        request: Request,
        user: User = Depends(get_current_user),
        permission_service: PermissionService = Depends(get_permission_service),
    ) -> User:
        await permission_service.require_permission(user, code, _request_context(request))
        return user

    return dependency


def require_any_permission(*codes: str) -> Callable:
    async def dependency(
        request: Request,
        user: User = Depends(get_current_user),
        permission_service: PermissionService = Depends(get_permission_service),
    ) -> User:
        await permission_service.require_any_permission(user, codes, _request_context(request))
        return user

    return dependency


def require_all_permissions(*codes: str) -> Callable:
    async def dependency(
        request: Request,
        user: User = Depends(get_current_user),
        permission_service: PermissionService = Depends(get_permission_service),
    ) -> User:
        await permission_service.require_all_permissions(user, codes, _request_context(request))
        return user

    return dependency


def require_role(*role_names: str) -> Callable:
    async def dependency(
        request: Request,
        user: User = Depends(get_current_user),
        permission_service: PermissionService = Depends(get_permission_service),
    ) -> User:
        if not await permission_service.has_role(user, *role_names):
            await permission_service.deny(
                user,
                [f"role:{name}" for name in role_names],
                _request_context(request),
                match="any",
            )
        return user

    return dependency


def require_enforced_permission(method: str, path: str) -> Callable:
    return require_all_permissions(*permissions_for(method, path))
