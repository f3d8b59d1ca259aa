#!/usr/bin/env python3
"""
Prompt construction and reply parsing for chat intent extraction.

Functions:
    build_system_prompt: Describes the user's todos and the JSON reply contract
    extract_json_object: Regex extracts the outermost {...} span from raw model text
    parse_intent_response: Raw model text -> validated ChatIntent, never raises
"""

import json
import logging
import re
from datetime import datetime
from typing import Optional, Sequence

from pydantic import ValidationError

from todochat.agents.intent_models import ChatIntent, TodoAction
from todochat.rest.exceptions import IntentParseError
from todochat.utils.util import to_utc, utc_now

logger = logging.getLogger( __name__ )

EMPTY_REPLY_FALLBACK = "I understood your message. How can I help you with your todos?"

# Greedy on purpose: spans from the first "{" to the last "}" so nested objects stay intact
JSON_OBJECT_PATTERN = re.compile( r"\{[\s\S]*\}" )


def _format_todo_line( todo ) -> str:

    due = to_utc( todo.due_date ).isoformat() if todo.due_date else "None"
    return f"- [{todo.status.value}] {todo.title} (id: {todo.id}, Priority: {todo.priority.value}, Due: {due})"


def build_system_prompt( todos: Sequence, now: Optional[datetime]=None ) -> str:
    """
    Build the system prompt for intent extraction.

    Requires:
        - todos is a sequence of Todo rows (may be empty)

    Ensures:
        - Lists each todo with status, title, id, priority and due date
        - Says "(No todos yet)" when there are none
        - States the current UTC time so relative dates can be resolved
        - Spells out the JSON reply format and the per-intent rules
    """
    now = to_utc( now ) if now else utc_now()

    if todos:
        todo_list = "\n".join( _format_todo_line( todo ) for todo in todos )
    else:
        todo_list = "(No todos yet)"

    return f"""You are a helpful todo assistant. The current date and time is {now.isoformat()} (UTC).

The user's current todos are:

{todo_list}

Parse the user's message and determine their intent. Respond with a JSON object in this exact format:

{{
  "intent": "CREATE" | "UPDATE" | "DELETE" | "QUERY" | "CHAT",
  "action": {{
    "type": "create" | "update" | "delete" | "query",
    "todoId": "id of the todo when updating or deleting",
    "data": {{
      "title": "extracted title",
      "description": "extracted description",
      "dueDate": "ISO8601 datetime if mentioned",
      "priority": "LOW" | "MEDIUM" | "HIGH",
      "status": "PENDING" | "COMPLETED"
    }},
    "filters": {{
      "status": "PENDING" | "COMPLETED",
      "dueBefore": "ISO8601 datetime",
      "priority": "LOW" | "MEDIUM" | "HIGH"
    }}
  }},
  "reply": "Natural language response to the user"
}}

Intent types:
- CREATE: User wants to add a new todo (e.g., "add buy groceries", "remind me to call mom tomorrow")
- UPDATE: User wants to modify an existing todo (e.g., "mark buy groceries as done", "change priority to high")
- DELETE: User wants to remove a todo (e.g., "delete the groceries task", "remove my first todo")
- QUERY: User wants to see filtered todos (e.g., "show completed tasks", "what's due today?")
- CHAT: General conversation, no todo action needed

For CREATE intent:
- Extract title (required)
- Extract description if provided
- Parse due dates from natural language (e.g., "tomorrow" = tomorrow's date, "next week" = 7 days from now)
- Infer priority from keywords (urgent/important = HIGH, normal = MEDIUM, later/someday = LOW)

For UPDATE intent:
- Identify which todo by matching title or position (e.g., "first todo", "groceries task") and use its id as todoId
- Extract what to update (status, title, priority, due date)

For DELETE intent:
- Identify which todo to delete and use its id as todoId

For QUERY intent:
- Extract filters (status, due date range, priority)

For CHAT intent:
- Respond conversationally and omit "action"

Always include a friendly, natural reply to the user. Be concise and helpful."""


def extract_json_object( text: str ) -> str:
    """
    Extract the outermost JSON object span from model text.

    Ensures:
        - Returns the substring from the first "{" to the last "}"
        - Surrounding prose and markdown fences are discarded

    Raises:
        - IntentParseError if the text holds no braces at all
    """
    match = JSON_OBJECT_PATTERN.search( text or "" )
    if not match:
        raise IntentParseError( "No JSON found in response", raw_text=text )

    return match.group( 0 )


def _parse_or_raise( text: str ) -> ChatIntent:
    """
    Strict parse: JSON object -> validated ChatIntent.

    Ensures:
        - intent and reply are validated; action is validated separately so a bad
          action only loses the action, not the reply
        - An action that doesn't match the intent (or rides on CHAT) is dropped

    Raises:
        - IntentParseError if there is no JSON object, or intent/reply are missing or invalid
    """
    try:
        payload = json.loads( extract_json_object( text ) )
    except json.JSONDecodeError as e:
        raise IntentParseError( f"Malformed JSON in response: {e}", raw_text=text )

    if not isinstance( payload, dict ):
        raise IntentParseError( "Response JSON is not an object", raw_text=text )

    raw_action = payload.pop( "action", None )

    try:
        intent = ChatIntent.model_validate( payload )
    except ValidationError as e:
        raise IntentParseError( f"Missing or invalid required fields in response: {e.errors()[0]['msg']}", raw_text=text )

    if not raw_action:
        return intent

    try:
        action = TodoAction.model_validate( raw_action )
    except ValidationError as e:
        logger.warning( f"Dropping invalid action from model response: {e.errors()[0]['msg']}" )
        return intent

    if not intent.action_matches_intent( action ):
        logger.warning( f"Dropping action [{action.type}] inconsistent with intent [{intent.intent.value}]" )
        return intent

    return intent.model_copy( update={ "action": action } )


def parse_intent_response( text: str ) -> ChatIntent:
    """
    Parse raw model text into a ChatIntent, falling back to CHAT.

    Ensures:
        - Valid replies come back as validated ChatIntent
        - Anything unusable becomes a CHAT intent whose reply is the raw text,
          or a generic prompt when the text is empty
        - Never raises
    """
    try:
        return _parse_or_raise( text )
    except IntentParseError as e:
        logger.warning( f"Failed to parse model response, using fallback: {e.message}" )
        return ChatIntent.chat_fallback( text if text and text.strip() else EMPTY_REPLY_FALLBACK )


def quick_smoke_test():
    """Module-level smoke test."""

    print( "Testing intent_parser module..." )

    prompt = build_system_prompt( [] )
    assert "(No todos yet)" in prompt
    print( "  ✓ build_system_prompt: handles empty todo list" )

    intent = parse_intent_response( 'Sure! {"intent": "CREATE", "action": {"type": "create", "data": {"title": "Buy milk"}}, "reply": "Added."}' )
    assert intent.intent.value == "CREATE" and intent.action.data.title == "Buy milk"
    print( "  ✓ parse_intent_response: extracts JSON from surrounding prose" )

    intent = parse_intent_response( "Hello there" )
    assert intent.intent.value == "CHAT" and intent.reply == "Hello there"
    print( "  ✓ parse_intent_response: falls back to CHAT" )

    print( "✓ intent_parser module smoke test PASSED" )


if __name__ == "__main__":
    quick_smoke_test()
