"""
Authentication schemas.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@company.com",
                "password": "securepassword123",
                "full_name": "John Doe"
            }
        }


class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "user@company.com",
                "password": "securepassword123"
            }
        }


class TokenResponse(BaseModel):
    """Token response after login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
