"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from resume_builder.domain.models import Role

OtpCode = Annotated[
    str,
    Field(min_length=6, max_length=6, pattern=r"^\d{6}$", description="6-digit one-time code"),
]


class RegisterRequest(BaseModel):
    """Request model for starting a registration."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")
    confirm_password: str | None = None


class OtpRequest(BaseModel):
    """Request model carrying only a one-time code."""

    otp: OtpCode


class EmailRequest(BaseModel):
    """Request model carrying only an email address."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request model for setting a new password with a reset code."""

    otp: OtpCode
    new_password: str = Field(..., min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class OtpIssuedResponse(BaseModel):
    """
    Response model for endpoints that send a code.

    `otp` is only populated when the server runs with
    expose_otp_in_response enabled (development without mail delivery).
    """

    message: str
    email: str
    expires_in_seconds: int
    otp: str | None = None


class MessageResponse(BaseModel):
    """Generic success response."""

    message: str


class LoginResponse(BaseModel):
    message: str
    email: str
    role: str


class TemplateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    content: str
    content_type: str = "html"


class TemplateOut(TemplateIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    modified_at: datetime


class ResumeUpdate(BaseModel):
    """Editable resume fields; the owner is fixed at creation."""

    model_config = ConfigDict(extra="forbid")

    template_id: int
    name: str = Field(..., min_length=3, max_length=100)
    content: str


class ResumeIn(ResumeUpdate):
    user_id: int


class ResumeOut(ResumeIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    modified_at: datetime


class AccountCreateRequest(BaseModel):
    """Request model for an administrator creating an account directly."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    password: str = Field(..., min_length=8)


class AccountImportEntry(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)


class RoleUpdateRequest(BaseModel):
    role: Role


class AccountOut(BaseModel):
    """Account as shown to administrators; password hashes are never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    join_date: date


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
