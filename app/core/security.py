from typing import Awaitable, Callable, Iterable, Optional

from fastapi import Depends, Header

from app.core.config import settings
from app.core.exceptions import ForbiddenError, NotAuthenticatedError
from app.core.logger import logger
from app.models.db_models import Requester
from app.services.db_service import db_service

ADMIN_ROLE = "admin"


class AdminPolicy:
    """
    Decides once per request whether the requester may use the admin API.

    The email whitelist is a grant-only fail-safe: a listed email is always
    admin, anyone else falls through to `profiles.role`. The whitelist never
    revokes a database admin.
    """

    def __init__(self, whitelist: Iterable[str], role_lookup: Callable[[str], Awaitable[Optional[str]]]):
        self.whitelist = {e.strip().lower() for e in whitelist if e and e.strip()}
        self.role_lookup = role_lookup

    async def is_admin(self, requester: Requester) -> bool:
        email = (requester.email or "").strip().lower()
        if email and email in self.whitelist:
            logger.info(f"🔑 Admin access granted via whitelist: {email}")
            return True

        role = await self.role_lookup(requester.id)
        return (role or "").lower() == ADMIN_ROLE


admin_policy = AdminPolicy(settings.ADMIN_EMAILS, db_service.get_profile_role)


def get_admin_policy() -> AdminPolicy:
    return admin_policy


async def get_current_requester(authorization: str = Header(None)) -> Requester:
    """
    Resolves the `Authorization: Bearer <supabase access token>` header
    to the signed-in user.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise NotAuthenticatedError("Sign in to continue.")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise NotAuthenticatedError("Sign in to continue.")
    return await db_service.get_requester(token)


async def require_admin(
    requester: Requester = Depends(get_current_requester),
    policy: AdminPolicy = Depends(get_admin_policy),
) -> Requester:
    if not await policy.is_admin(requester):
        logger.warning(f"⛔ Admin access denied for {requester.email or requester.id}")
        raise ForbiddenError("Admin access required.")
    return requester
