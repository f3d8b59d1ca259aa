"""
Chat Router for FastAPI.

Natural-language front-end to the todo list. Messages go through
ChatService, which asks Claude for an intent and applies the resulting action.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query

from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.api_models import ApiResponse
from todochat.rest.auth_middleware import get_current_user_id
from todochat.rest.chat_models import ChatMessageRequest, ChatMessageResponse, ChatReplyResponse
from todochat.rest.chat_service import ChatService
from todochat.rest.dependencies.config import get_chat_service

router = APIRouter(
    prefix = "/api/chat",
    tags   = ["Chat"]
)

config_mgr = ConfigurationManager()

HISTORY_DEFAULT_LIMIT = config_mgr.get( "chat history default limit", default=50, return_type="int" )


@router.post( "/message", response_model=ApiResponse[ChatReplyResponse] )
async def send_message(
    request: ChatMessageRequest,
    user_id: uuid.UUID = Depends( get_current_user_id ),
    chat_service: ChatService = Depends( get_chat_service )
) -> ApiResponse[ChatReplyResponse]:
    """
    Send a chat message.

    Ensures:
        - Reply, intent, action result and the refreshed todo list are returned
        - Model or action failures still produce a 200 with a fallback reply
    """
    reply = await chat_service.handle_message( user_id, request.message )

    return ApiResponse[ChatReplyResponse]( data=reply )


@router.get( "/history", response_model=ApiResponse[List[ChatMessageResponse]] )
async def get_history(
    limit: int = Query( HISTORY_DEFAULT_LIMIT, ge=1, le=500, description="Most recent N messages" ),
    user_id: uuid.UUID = Depends( get_current_user_id ),
    chat_service: ChatService = Depends( get_chat_service )
) -> ApiResponse[List[ChatMessageResponse]]:
    """Latest chat messages, oldest first."""
    return ApiResponse[List[ChatMessageResponse]]( data=chat_service.get_history( user_id, limit=limit ) )
