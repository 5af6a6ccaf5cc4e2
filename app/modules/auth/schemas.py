from pydantic import BaseModel, EmailStr, Field
from app.modules.users.schemas import UserPublic


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    message: str
    user: UserPublic
    token: str


class ForgotPasswordResponse(BaseModel):
    status: str = "success"
    message: str


class MessageResponse(BaseModel):
    message: str
