from enum import Enum
from typing import Optional

from pydantic import BaseModel

from storefront.core.errors import ForbiddenError, UnauthorizedError


class Role(str, Enum):
    USER = "User"
    ADMIN = "Admin"


class Capability(str, Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class Identity(BaseModel):
    user_id: int
    username: str
    email: str
    role: Role


CAPABILITIES = {
    Role.ADMIN: {Capability.AUTHENTICATED, Capability.ADMIN},
    Role.USER: {Capability.AUTHENTICATED},
}


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in CAPABILITIES.get(role, set())


def ensure_capability(identity: Optional[Identity], capability: Capability) -> Identity:
    """Gate an operation on a capability level.

    A missing identity is always 401; a known identity lacking the
    capability is 403.
    """
    if identity is None:
        raise UnauthorizedError()
    if not has_capability(identity.role, capability):
        raise ForbiddenError()
    return identity
