"""Request identity from headers set by the upstream authenticator."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from formintake.schemas.user import CurrentUser, UserRole


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> CurrentUser:
    """Identity the request acts as; 401 when no user id header is present."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header"
        )

    role = UserRole.CLIENT
    if x_user_role:
        try:
            role = UserRole(x_user_role.strip().lower())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Unknown role: {x_user_role}"
            )

    return CurrentUser(user_id=x_user_id.strip(), role=role)


def require_role(*roles: UserRole):
    """Dependency factory that requires specific roles."""
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user
    return role_checker


require_staff = require_role(UserRole.INTERNAL_STAFF, UserRole.ADMINISTRATOR)
