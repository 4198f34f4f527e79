"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field rules (length, complexity, terms) are enforced by the domain validator
so every violation is reported together, field by field.
"""

from typing import Literal

from pydantic import BaseModel, Field

from signup.domain.validation import RegistrationInput


class RegisterRequest(BaseModel):
    """Request model for account registration."""

    email: str = Field(..., description="Email address to register")
    password: str = Field(..., description="Password (12-255 characters, mixed classes)")
    password_confirmation: str = Field(..., description="Must repeat the password")
    first_name: str
    last_name: str
    agree_terms: bool = Field(False, description="Terms of use accepted")

    def to_input(self) -> RegistrationInput:
        """Map the request body onto the domain input record."""
        return RegistrationInput(
            email=self.email,
            password=self.password,
            password_confirmation=self.password_confirmation,
            first_name=self.first_name,
            last_name=self.last_name,
            agree_terms=self.agree_terms,
        )


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    email: str
    expires_in_seconds: int
    notification_sent: bool


class ViolationModel(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str


class RegistrationErrorResponse(BaseModel):
    """Error response listing every field violation."""

    detail: str
    violations: list[ViolationModel]


class ConfirmResponse(BaseModel):
    """Outcome of a confirmation link, with where the client should go next."""

    status: Literal["verified", "needs_registration", "link_invalid"]
    message: str
    redirect_to: str


class ResendRequest(BaseModel):
    """Request model for re-sending a confirmation link."""

    email: str = Field(..., max_length=180)


class ResendResponse(BaseModel):
    """Generic acknowledgement; never reveals whether the email exists."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
