from fastapi import APIRouter

from . import me
from .admin import roles as admin_roles

router = APIRouter(prefix="/api")

_admin_routers = [
    admin_roles.router,
]

for _router in [*_admin_routers, me.router]:
    router.include_router(_router)
