# campus_events/auth.py
import logging
from datetime import datetime, timedelta

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events import config, database
from campus_events.exceptions import AuthenticationError
from campus_events.models.user import User
from campus_events.permissions import Caller, Role, require_role

logger = logging.getLogger(__name__)

# --- SECURITY SETUP ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# Tokens are issued by the identity provider; this service only validates them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=config.TOKEN_URL, auto_error=False)


def hash_secret(secret: str) -> str:
    return pwd_context.hash(secret)


def verify_secret(plain_secret: str, hashed_secret: str) -> bool:
    # passlib compares digests in constant time
    return pwd_context.verify(plain_secret, hashed_secret)


def create_access_token(user_id: int, role: Role, expires_delta: timedelta = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(user_id), "role": Role(role).value, "exp": expire}
    return jwt.encode(to_encode, str(config.SECRET_KEY), algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> int:
    try:
        payload = jwt.decode(token, str(config.SECRET_KEY), algorithms=[config.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise AuthenticationError("Token is invalid or expired")
        return int(subject)
    except (JWTError, ValueError):
        raise AuthenticationError("Token is invalid or expired")


# --- AUTHENTICATION AND AUTHORIZATION DEPENDENCIES ---
async def get_current_caller(
    token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(database.get_db)
) -> Caller:
    if not token:
        raise AuthenticationError("Not authorized to access this route. Please login.")
    user_id = decode_access_token(token)

    # The role is read from the user row, not trusted from the token
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account has been deactivated")
    try:
        role = Role(user.role)
    except ValueError:
        logger.warning("User %s has unknown role %r", user.id, user.role)
        raise AuthenticationError("User not found")
    return Caller(user_id=user.id, role=role)


def require_roles(*roles: Role):
    """Builds a dependency that only lets the given roles through."""

    async def dependency(caller: Caller = Depends(get_current_caller)) -> Caller:
        require_role(caller, *roles)
        return caller

    return dependency


get_admin_caller = require_roles(Role.ADMIN)
