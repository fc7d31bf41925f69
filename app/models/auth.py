from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    displayName: Optional[str] = None

class RegisterResponse(BaseModel):
    uid: str
    email: EmailStr
    displayName: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginResponse(BaseModel):
    idToken: str
    refreshToken: str
    expiresIn: int
    uid: str
    email: EmailStr
