from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from typing import Optional
from pydantic import BaseModel, ValidationError as SchemaError

from storefront.core.config import SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


class TokenData(BaseModel):
    user_id: int
    role: str


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against a stored hash; an unrecognised hash never matches."""
    try:
        return pwd_ctx.verify(plain, hashed)
    except ValueError:
        return False


def create_token(user_id: int, role: str, expires_minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(user_id), "role": role, "iat": now, "exp": expires}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Optional[TokenData]:
    """Decode a bearer token.

    Returns None for anything that is not a well-formed, unexpired token
    signed with our key.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    try:
        return TokenData(user_id=payload.get("sub"), role=payload.get("role"))
    except SchemaError:
        return None
