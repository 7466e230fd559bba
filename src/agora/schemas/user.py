"""User and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    email: str = Field(..., min_length=3, max_length=254, description="Email address")
    username: str = Field(..., min_length=1, max_length=64, description="Public username")
    password: str = Field(..., min_length=1, max_length=256)
    confirm_password: str = Field(..., description="Must repeat `password`")

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    login: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of an account."""

    id: int
    email: str
    username: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Returned after login or registration; the token itself travels in the cookie."""

    user: UserResponse
    expires_at: datetime = Field(..., description="When the session cookie stops being valid")
    message: str


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
