import uuid
from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1, max_length=255)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class PasswordUpdateRequest(BaseModel):
    password: str = Field(min_length=6)


class SessionRead(BaseModel):
    user_id: uuid.UUID
    email: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
