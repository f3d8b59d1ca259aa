"""
Authentication Router for FastAPI.

Provides endpoints for user registration, login and current-user lookup.
"""

import logging
from typing import Dict

from fastapi import APIRouter, HTTPException, status, Depends

from todochat.rest.api_models import ApiResponse
from todochat.rest.auth_models import (
    RegisterRequest, LoginRequest,
    AuthPayload, AuthUser, CurrentUserResponse
)
from todochat.rest.user_service import create_user, authenticate_user, get_user_by_id
from todochat.rest.jwt_service import create_access_token
from todochat.rest.auth_middleware import get_current_user

logger = logging.getLogger( __name__ )

router = APIRouter(
    prefix = "/api/auth",
    tags   = ["Authentication"]
)


def _auth_payload( user_dict: Dict ) -> AuthPayload:
    """
    Issue a token for an authenticated user.

    Requires:
        - user_dict has "id" and "email"

    Returns:
        AuthPayload: token plus public user identity
    """
    token = create_access_token( user_dict["id"], user_dict["email"] )

    return AuthPayload(
        token = token,
        user  = AuthUser( id=user_dict["id"], email=user_dict["email"] )
    )


@router.post(
    "/register",
    response_model = ApiResponse[AuthPayload],
    status_code    = status.HTTP_201_CREATED,
    summary        = "Register new user"
)
async def register( request: RegisterRequest ) -> ApiResponse[AuthPayload]:
    """
    Register new user account.

    Ensures:
        - User created with hashed password
        - Returns 201 with a token and the user's id and email

    Raises:
        - HTTPException 400 if the email is already registered or the password is too short
    """
    success, message, user_dict = create_user( email=request.email, password=request.password )

    if not success:
        raise HTTPException(
            status_code = status.HTTP_400_BAD_REQUEST,
            detail      = message
        )

    return ApiResponse[AuthPayload]( data=_auth_payload( user_dict ) )


@router.post(
    "/login",
    response_model = ApiResponse[AuthPayload],
    summary        = "Log in"
)
async def login( request: LoginRequest ) -> ApiResponse[AuthPayload]:
    """
    Authenticate with email and password.

    Raises:
        - HTTPException 401 on unknown email or wrong password (same message for both)
    """
    success, message, user_dict = authenticate_user( email=request.email, password=request.password )

    if not success:
        raise HTTPException(
            status_code = status.HTTP_401_UNAUTHORIZED,
            detail      = message
        )

    return ApiResponse[AuthPayload]( data=_auth_payload( user_dict ) )


@router.get(
    "/me",
    response_model = ApiResponse[CurrentUserResponse],
    summary        = "Current user"
)
async def me( current_user: Dict = Depends( get_current_user ) ) -> ApiResponse[CurrentUserResponse]:
    """
    Get the authenticated user's profile.

    Raises:
        - HTTPException 404 if the user behind a valid token no longer exists
    """
    user_dict = get_user_by_id( current_user["id"] )

    if user_dict is None:
        raise HTTPException(
            status_code = status.HTTP_404_NOT_FOUND,
            detail      = "User not found"
        )

    return ApiResponse[CurrentUserResponse]( data=CurrentUserResponse( **user_dict ) )
