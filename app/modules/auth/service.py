from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import UnauthorizedError
from app.core.security import create_access_token, verify_password
from app.modules.auth.schemas import LoginRequest, TokenOut
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import UserOut

class AuthService:
    def __init__(self, session: AsyncSession):
        self.users = UserRepository(session)

    async def login(self, payload: LoginRequest) -> TokenOut:
        user = await self.users.get_by_email(payload.email)
        # verify even when the user is unknown so both paths take the same time
        ok = verify_password(payload.password, user.password if user else None)
        if not user or not ok:
            raise UnauthorizedError("Invalid credentials")
        token = create_access_token(user.id, user.email, user.role)
        return TokenOut(access_token=token, user=UserOut.model_validate(user))
