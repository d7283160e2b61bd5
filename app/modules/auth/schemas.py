from pydantic import BaseModel, EmailStr
from app.modules.users.schemas import UserOut

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
