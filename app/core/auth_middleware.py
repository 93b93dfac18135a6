"""Authentication and role gating for FastAPI routes."""

import logging
from typing import Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import Internal, PermissionDenied, Unauthenticated
from app.core.schemas_workspace import UserProfile, UserRole
from app.db.users import get_user_profile

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(
        self,
        user_id: str,
        token: str,
        email: Optional[str] = None,
        profile: Optional[UserProfile] = None,
    ):
        self.user_id = user_id
        self.token = token
        self.email = email
        self.profile = profile

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile else None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthContext]:
    """
    Resolve the caller from a Supabase JWT (Bearer auth).

    Returns None if no valid auth is present; gates decide what that means.
    """
    if not credentials:
        return None

    token = credentials.credentials

    try:
        from app.db.supabase_client import get_supabase

        client = get_supabase()

        # Validates the JWT signature and expiration
        auth_response = client.auth.get_user(token)

        if not auth_response or not auth_response.user:
            return None

        return AuthContext(
            user_id=str(auth_response.user.id),
            token=token,
            email=auth_response.user.email,
        )

    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None


class RoleGate:
    """Dependency class that admits callers whose profile role is allowed.

    Usable as a FastAPI dependency (``Depends(require_editor)``) or directly
    via ``await require_editor.authorize(auth)``.
    """

    def __init__(self, allowed_roles: Iterable[UserRole]):
        self.allowed_roles = frozenset(allowed_roles)

    async def authorize(self, auth: Optional[AuthContext]) -> AuthContext:
        if auth is None:
            raise Unauthenticated("Must be logged in")

        try:
            profile = get_user_profile(auth.user_id)
        except Exception as e:
            logger.error(f"Failed to load profile for user {auth.user_id}: {e}")
            raise Internal(f"Failed to load user profile: {e}") from e

        if profile is None:
            raise PermissionDenied("User profile not found")
        if profile.role not in self.allowed_roles:
            logger.info(f"User {auth.user_id} with role {profile.role.value} denied")
            raise PermissionDenied("Insufficient permissions")

        auth.profile = profile
        return auth

    async def __call__(
        self,
        auth: Optional[AuthContext] = Depends(get_current_user),
    ) -> AuthContext:
        return await self.authorize(auth)


# Enrichment and every write
require_editor = RoleGate({UserRole.CPO, UserRole.TEAM})
# Read-only dashboard views
require_viewer = RoleGate({UserRole.CPO, UserRole.TEAM, UserRole.LEADERSHIP})
