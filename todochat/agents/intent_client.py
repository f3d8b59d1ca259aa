#!/usr/bin/env python3
"""
Claude API client for chat intent extraction.

Sends the user's message, with their recent todos as context, to Claude in a
single request and turns the reply into a validated ChatIntent. Any failure
along the way (network, auth, unexpected content, unparseable reply) ends in
a CHAT intent, so callers never see an exception from here.

API key is read from the CLAUDE_API_KEY environment variable.
"""

import os
import logging
import uuid
from typing import Optional, Sequence

from anthropic import AsyncAnthropic

from todochat.agents.intent_models import ChatIntent
from todochat.agents.intent_parser import build_system_prompt, parse_intent_response
from todochat.config.configuration_manager import ConfigurationManager

logger = logging.getLogger( __name__ )

ENV_VAR_NAME = "CLAUDE_API_KEY"

ERROR_REPLY = "Sorry, I encountered an error processing your message. Please try again."


class IntentClient:
    """
    Async Anthropic client that extracts todo intents from chat messages.

    Requires:
        - CLAUDE_API_KEY environment variable, or api_key parameter

    Ensures:
        - Exactly one messages.create call per user message (no retries)
        - process_user_message always returns a ChatIntent
    """

    def __init__(
        self,
        api_key: Optional[ str ] = None,
        model: Optional[ str ] = None,
        max_tokens: Optional[ int ] = None,
        client: Optional[ AsyncAnthropic ] = None
    ):
        """
        Initialize the intent client.

        Args:
            api_key: Anthropic API key (uses CLAUDE_API_KEY if None)
            model: Claude model id (uses "llm model" config key if None)
            max_tokens: Response token cap (uses "llm max tokens" config key if None)
            client: Pre-built AsyncAnthropic client, mainly for tests
        """
        config_mgr = ConfigurationManager()

        self.api_key    = api_key or os.environ.get( ENV_VAR_NAME )
        self.model      = model or config_mgr.get( "llm model", default="claude-3-5-sonnet-20241022" )
        self.max_tokens = max_tokens or config_mgr.get( "llm max tokens", default=1024, return_type="int" )
        self._client    = client

        if not self.api_key and client is None:
            logger.warning( f"{ENV_VAR_NAME} not set; chat requests will fall back to an error reply" )

    def _get_client( self ) -> AsyncAnthropic:
        # Built on first use so a missing key surfaces as a per-request failure, not a startup crash
        if self._client is None:
            self._client = AsyncAnthropic( api_key=self.api_key )
        return self._client

    async def _call_api( self, system_prompt: str, user_message: str, max_tokens: int ) -> str:
        """
        Single Claude call, returning the concatenated text blocks.

        Raises:
            - Any anthropic error from the request
            - ValueError if the reply holds no text block
        """
        response = await self._get_client().messages.create(
            model      = self.model,
            max_tokens = max_tokens,
            system     = system_prompt,
            messages   = [ { "role": "user", "content": user_message } ]
        )

        texts = [ block.text for block in response.content if getattr( block, "type", None ) == "text" ]
        if not texts:
            raise ValueError( "Unexpected response type from Claude API" )

        usage = getattr( response, "usage", None )
        if usage is not None:
            logger.debug( f"Claude usage: {usage.input_tokens} in, {usage.output_tokens} out" )

        return "".join( texts )

    async def process_user_message( self, user_id: uuid.UUID, message: str, todos: Sequence ) -> ChatIntent:
        """
        Extract the intent behind a chat message.

        Requires:
            - message is the user's raw text
            - todos are the user's recent Todo rows (context for the model)

        Ensures:
            - Returns a validated ChatIntent
            - Returns a CHAT intent with a generic apology on any API failure

        Raises:
            - None
        """
        system_prompt = build_system_prompt( todos )

        try:
            text = await self._call_api( system_prompt, message, self.max_tokens )
        except Exception as e:
            logger.error( f"Claude API error for user {user_id}: {e}" )
            return ChatIntent.chat_fallback( ERROR_REPLY )

        intent = parse_intent_response( text )

        logger.info( f"LLM response processed for user {user_id}: intent={intent.intent.value} hasAction={intent.action is not None}" )

        return intent

    async def test_connection( self ) -> bool:
        """
        Probe the Claude API with a tiny request.

        Ensures:
            - True if the call succeeded, False otherwise
            - Never raises
        """
        try:
            await self._get_client().messages.create(
                model      = self.model,
                max_tokens = 10,
                messages   = [ { "role": "user", "content": "test" } ]
            )
            return True
        except Exception as e:
            logger.error( f"Claude API connection test failed: {e}" )
            return False

    async def close( self ):
        """Close the underlying HTTP client."""
        if self._client is not None and hasattr( self._client, "close" ):
            await self._client.close()
