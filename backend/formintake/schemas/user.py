"""Caller identity schemas."""

from enum import Enum as PyEnum

from pydantic import BaseModel


class UserRole(str, PyEnum):
    """Roles asserted by the upstream authenticator."""
    CLIENT = "client"
    BROKER = "broker"
    INTERNAL_STAFF = "internal_staff"
    ADMINISTRATOR = "administrator"


STAFF_ROLES = (UserRole.INTERNAL_STAFF, UserRole.ADMINISTRATOR)


class CurrentUser(BaseModel):
    """The identity a request acts as."""
    user_id: str
    role: UserRole = UserRole.CLIENT

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
