"""
Pydantic Models for Authentication Endpoints.

Request and response models for user registration, login
and current-user endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from todochat.rest.api_models import CamelModel


# Request Models

class RegisterRequest( BaseModel ):
    """
    User registration request.

    Requires:
        - email: Valid email address
        - password: At least 8 characters
    """
    email: EmailStr = Field(
        ...,
        description = "User email address",
        examples    = ["user@example.com"]
    )
    password: str = Field(
        ...,
        min_length  = 8,
        description = "User password (min 8 chars)",
        examples    = ["SecurePass123!"]
    )


class LoginRequest( BaseModel ):
    """
    User login request.

    Requires:
        - email: User email address
        - password: User password
    """
    email: EmailStr = Field(
        ...,
        description = "User email address",
        examples    = ["user@example.com"]
    )
    password: str = Field(
        ...,
        min_length  = 1,
        description = "User password",
        examples    = ["SecurePass123!"]
    )


# Response Models

class AuthUser( CamelModel ):
    """Identity returned alongside a token."""
    id: str = Field( ..., description="User unique identifier (UUID)" )
    email: str = Field( ..., description="User email address" )


class AuthPayload( CamelModel ):
    """
    Successful register/login payload.

    Contains:
        - token: Bearer JWT for the Authorization header
        - user: id and email of the authenticated user
    """
    token: str = Field( ..., description="JWT access token" )
    user: AuthUser


class CurrentUserResponse( CamelModel ):
    """Profile of the authenticated user."""
    id: str
    email: str
    created_at: datetime
