from datetime import datetime, timedelta, timezone
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.db import get_session
from app.core.errors import UnauthorizedError, ForbiddenError
from app.modules.users.models import Role
from app.modules.users.repository import UserRepository

http_bearer = HTTPBearer(auto_error=False)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# checked when the email is unknown so both branches cost one bcrypt verify
_DUMMY_HASH = pwd_context.hash("timing-attack-guard")

class Principal(BaseModel):
    user_id: int
    email: str
    role: Role

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        pwd_context.verify(password, _DUMMY_HASH)
        return False
    return pwd_context.verify(password, hashed)

def create_access_token(user_id: int, email: str, role: str, expires_minutes: int | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(user_id), "email": email, "role": Role(role).value, "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise UnauthorizedError("Invalid token")

async def principal_from_token(token: str, session: AsyncSession) -> Principal:
    """Verify a bearer token and resolve it to the stored user."""
    data = decode_token(token)
    try:
        user_id = int(data.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")
    user = await UserRepository(session).get(user_id)
    if not user:
        raise UnauthorizedError("User not found")
    return Principal(user_id=user.id, email=user.email, role=user.role)

async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    session: AsyncSession = Depends(get_session),
) -> Principal:
    if creds is None:
        raise UnauthorizedError("Missing token")
    return await principal_from_token(creds.credentials, session)

def require_roles(*roles: Role):
    def dep(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            raise ForbiddenError("Insufficient role")
        return principal
    return dep
