from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
import re

from group_polls.core.constants import AuthConfig, BusinessLimits


# Schema for signing up a new user
class SignUpRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=BusinessLimits.MIN_USERNAME_LENGTH,
        max_length=BusinessLimits.MAX_USERNAME_LENGTH,
        json_schema_extra={"example": "alice"}
    )
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=AuthConfig.MAX_PASSWORD_LENGTH)

    @field_validator('username')
    def validate_username(cls, v):
        if not re.fullmatch(r'[A-Za-z0-9_.-]+', v):
            raise ValueError('Username may only contain letters, digits, ".", "_" and "-"')
        return v


class SignInRequest(BaseModel):
    username: str
    password: str


class RefreshTokenRequest(BaseModel):
    """Username of the refresh token's owner; must match the token's subject."""
    username: str = Field(..., min_length=1)


class SignOutRequest(BaseModel):
    username: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1, description="Refresh token given when signed in")


class AuthResponse(BaseModel):
    username: str
    role: str
    group_id: Optional[int] = None
    access_token: str
    refresh_token: str
    token_type: str = AuthConfig.TOKEN_TYPE


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = AuthConfig.TOKEN_TYPE


# Schema for reading user data
class UserRead(BaseModel):
    id: int
    username: str
    email: EmailStr
    role: str
    group_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
