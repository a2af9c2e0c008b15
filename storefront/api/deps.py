from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from storefront.core.errors import UnauthorizedError
from storefront.core.permissions import Capability, Identity, Role, ensure_capability
from storefront.core.security import verify_token
from storefront.db.session import get_db
from storefront.services.users_service import get_user

oauth2 = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_identity(token: Optional[str] = Depends(oauth2), db: Session = Depends(get_db)) -> Optional[Identity]:
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        raise UnauthorizedError("Invalid authentication token")
    user = get_user(db, payload.user_id)
    if not user:
        raise UnauthorizedError("User not found")
    return Identity(user_id=user.id, username=user.username, email=user.email, role=Role(user.role))


def get_current_user(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    return ensure_capability(identity, Capability.AUTHENTICATED)


def get_admin_user(identity: Optional[Identity] = Depends(get_identity)) -> Identity:
    return ensure_capability(identity, Capability.ADMIN)
