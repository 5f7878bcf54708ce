"""
Seed roles, permissions and role grants from the RBAC contract.

Safe to re-run: existing rows are refreshed, missing grants are added, and
nothing is deleted. The wildcard role is granted every catalog permission
as a snapshot for reporting; runtime checks still resolve it live.

Usage:
    python -m scripts.seed_rbac
"""
import asyncio
import os
import sys

# Add parent directory to path to import sabq modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sabq.auth.rbac import RBAC, validate_contract
from sabq.crud.permission import PermissionRepository
from sabq.crud.role import RoleRepository
from sabq.database import AsyncSessionLocal


async def seed_rbac(rbac: RBAC) -> dict[str, int]:
    counts = {"roles_created": 0, "permissions_created": 0, "grants_created": 0}

    async with AsyncSessionLocal() as session:
        async with session.begin():
            role_repo = RoleRepository(session)
            permission_repo = PermissionRepository(session)

            permission_ids = {}
            for permission in rbac.catalog.list_permissions():
                row, created = await permission_repo.upsert(
                    code=permission.code,
                    label=rbac.catalog.label_for(permission.code, "en"),
                    label_ar=rbac.catalog.label_for(permission.code, "ar"),
                    resource=permission.resource,
                    action=permission.action,
                )
                permission_ids[permission.code] = row.id
                counts["permissions_created"] += int(created)

            for role in rbac.registry.list_roles():
                row, created = await role_repo.upsert(
                    name=role.name,
                    name_ar=rbac.registry.label_for(role, "ar"),
                    display_name=rbac.registry.label_for(role, "en"),
                    description=rbac.registry.description_for(role, "en"),
                    is_system=True,
                )
                counts["roles_created"] += int(created)

                existing = await permission_repo.get_role_permission_codes(row.id)
                for code in sorted(rbac.binding.permissions_for(role) - existing):
                    await permission_repo.grant_to_role(row.id, permission_ids[code])
                    counts["grants_created"] += 1

    return counts


async def main() -> None:
    rbac = validate_contract()
    print(
        f"Seeding {len(rbac.registry)} roles and {len(rbac.catalog)} permissions "
        f"(wildcard role: {rbac.binding.wildcard_role})"
    )
    counts = await seed_rbac(rbac)
    print(
        "Done: {roles_created} roles, {permissions_created} permissions, "
        "{grants_created} grants created".format(**counts)
    )


if __name__ == "__main__":
    asyncio.run(main())
