"""
Authentication and user-related schemas.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class UserRegister(BaseModel):
    """Registration request"""
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class UserLogin(BaseModel):
    """Login request"""
    email: Optional[str] = None
    password: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class AccountDeletion(BaseModel):
    confirmationEmail: Optional[str] = None


class TokenData(BaseModel):
    """Token payload data"""
    userId: str
    email: str
    role: str


class RegisteredUser(BaseModel):
    id: UUID
    email: str
    name: str

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user: RegisteredUser


class LoginUser(RegisteredUser):
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: LoginUser


class UserResponse(BaseModel):
    """Current user"""
    id: UUID
    email: str
    name: str
    role: str
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    trial_start_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: UserResponse
