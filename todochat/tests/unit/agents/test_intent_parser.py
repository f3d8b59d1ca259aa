#!/usr/bin/env python3
"""
Unit tests for intent prompt construction and reply parsing.

Run with: pytest -v todochat/tests/unit/agents/
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from todochat.agents.intent_models import ChatIntent, IntentType, TodoAction
from todochat.agents.intent_parser import (
    EMPTY_REPLY_FALLBACK,
    build_system_prompt,
    extract_json_object,
    parse_intent_response,
)
from todochat.rest.exceptions import IntentParseError
from todochat.rest.postgres_models import TodoStatus, TodoPriority


def _todo( title, status=TodoStatus.PENDING, priority=TodoPriority.MEDIUM, due_date=None ):
    return SimpleNamespace( id=uuid.uuid4(), title=title, status=status, priority=priority, due_date=due_date )


class TestBuildSystemPrompt:

    def test_empty_todo_list( self ):
        prompt = build_system_prompt( [] )
        assert "(No todos yet)" in prompt

    def test_lists_todos_with_ids( self ):
        due  = datetime( 2030, 1, 10, 9, 0, tzinfo=timezone.utc )
        milk = _todo( "Buy milk", priority=TodoPriority.HIGH, due_date=due )
        call = _todo( "Call mom", status=TodoStatus.COMPLETED )

        prompt = build_system_prompt( [ milk, call ] )

        assert f"- [PENDING] Buy milk (id: {milk.id}, Priority: HIGH, Due: 2030-01-10T09:00:00+00:00)" in prompt
        assert f"- [COMPLETED] Call mom (id: {call.id}, Priority: MEDIUM, Due: None)" in prompt
        assert "(No todos yet)" not in prompt

    def test_naive_due_dates_are_treated_as_utc( self ):
        todo = _todo( "Pay rent", due_date=datetime( 2030, 2, 1, 0, 0 ) )
        assert "Due: 2030-02-01T00:00:00+00:00" in build_system_prompt( [ todo ] )

    def test_includes_current_date_and_contract( self ):
        now = datetime( 2031, 5, 4, 12, 30, tzinfo=timezone.utc )
        prompt = build_system_prompt( [], now=now )

        assert "2031-05-04T12:30:00+00:00" in prompt
        for keyword in ( '"intent"', '"action"', '"reply"', '"todoId"', '"dueBefore"', "CREATE", "QUERY", "CHAT" ):
            assert keyword in prompt


class TestExtractJsonObject:

    def test_strips_surrounding_prose( self ):
        assert extract_json_object( 'Sure thing! {"a": 1} Hope that helps.' ) == '{"a": 1}'

    def test_greedy_keeps_nested_objects( self ):
        text = '```json\n{"intent": "CREATE", "action": {"data": {"title": "x"}}, "reply": "ok"}\n```'
        assert extract_json_object( text ) == '{"intent": "CREATE", "action": {"data": {"title": "x"}}, "reply": "ok"}'

    def test_no_braces_raises( self ):
        with pytest.raises( IntentParseError ):
            extract_json_object( "no json here" )


class TestParseIntentResponse:

    def test_create_intent( self ):
        intent = parse_intent_response(
            '{"intent": "CREATE", "action": {"type": "create", "data": {"title": "Buy milk", "dueDate": "2030-01-10T09:00:00Z", "priority": "high"}}, "reply": "Added!"}'
        )

        assert intent.intent == IntentType.CREATE
        assert intent.reply == "Added!"
        assert intent.action.type == "create"
        assert intent.action.data.title == "Buy milk"
        assert intent.action.data.priority == TodoPriority.HIGH
        assert intent.action.data.due_date == datetime( 2030, 1, 10, 9, 0, tzinfo=timezone.utc )

    def test_intent_and_action_type_case_insensitive( self ):
        intent = parse_intent_response( '{"intent": "query", "action": {"type": "QUERY", "filters": {"status": "completed"}}, "reply": "Here."}' )

        assert intent.intent == IntentType.QUERY
        assert intent.action.filters.status == TodoStatus.COMPLETED

    def test_chat_intent_without_action( self ):
        intent = parse_intent_response( '{"intent": "CHAT", "reply": "Hi!"}' )

        assert intent.intent == IntentType.CHAT
        assert intent.action is None

    def test_null_action_is_ignored( self ):
        intent = parse_intent_response( '{"intent": "CHAT", "action": null, "reply": "Hi!"}' )
        assert intent.action is None

    def test_no_json_falls_back_to_raw_text( self ):
        intent = parse_intent_response( "I'm not sure what you mean." )

        assert intent.intent == IntentType.CHAT
        assert intent.reply == "I'm not sure what you mean."
        assert intent.action is None

    def test_empty_text_uses_generic_reply( self ):
        assert parse_intent_response( "" ).reply == EMPTY_REPLY_FALLBACK
        assert parse_intent_response( "   " ).reply == EMPTY_REPLY_FALLBACK
        assert parse_intent_response( None ).reply == EMPTY_REPLY_FALLBACK

    def test_malformed_json_falls_back( self ):
        text = '{"intent": "CREATE", "reply": }'
        intent = parse_intent_response( text )

        assert intent.intent == IntentType.CHAT
        assert intent.reply == text

    def test_missing_reply_falls_back( self ):
        intent = parse_intent_response( '{"intent": "CREATE"}' )
        assert intent.intent == IntentType.CHAT

    def test_missing_intent_falls_back( self ):
        intent = parse_intent_response( '{"reply": "Hello"}' )
        assert intent.intent == IntentType.CHAT

    def test_unknown_intent_falls_back( self ):
        text = '{"intent": "ARCHIVE", "reply": "Archived"}'
        intent = parse_intent_response( text )

        assert intent.intent == IntentType.CHAT
        assert intent.reply == text

    def test_json_array_falls_back( self ):
        assert parse_intent_response( 'Result: [{"intent": "CHAT"}]' ).intent == IntentType.CHAT

    def test_invalid_action_is_dropped_but_reply_kept( self ):
        intent = parse_intent_response( '{"intent": "CREATE", "action": {"type": "archive"}, "reply": "Done"}' )

        assert intent.intent == IntentType.CREATE
        assert intent.reply == "Done"
        assert intent.action is None

    def test_action_with_bad_field_values_is_dropped( self ):
        intent = parse_intent_response( '{"intent": "UPDATE", "action": {"type": "update", "todoId": "x", "data": {"priority": "URGENT"}}, "reply": "Ok"}' )
        assert intent.action is None

    def test_mismatched_action_is_dropped( self ):
        intent = parse_intent_response( '{"intent": "CREATE", "action": {"type": "delete", "todoId": "abc"}, "reply": "Deleted"}' )

        assert intent.intent == IntentType.CREATE
        assert intent.action is None

    def test_action_on_chat_intent_is_dropped( self ):
        intent = parse_intent_response( '{"intent": "CHAT", "action": {"type": "query"}, "reply": "Sure"}' )

        assert intent.intent == IntentType.CHAT
        assert intent.action is None

    def test_blank_todo_id_becomes_none( self ):
        intent = parse_intent_response( '{"intent": "DELETE", "action": {"type": "delete", "todoId": ""}, "reply": "Ok"}' )
        assert intent.action.todo_id is None


class TestChatIntentModel:

    def test_chat_fallback( self ):
        intent = ChatIntent.chat_fallback( "Hello" )

        assert intent.intent == IntentType.CHAT
        assert intent.action is None
        assert intent.reply == "Hello"

    def test_action_matches_intent( self ):
        intent = ChatIntent( intent="UPDATE", reply="ok" )

        assert intent.action_matches_intent( TodoAction( type="update" ) )
        assert not intent.action_matches_intent( TodoAction( type="create" ) )
        assert intent.action_matches_intent( None )

    def test_empty_reply_rejected( self ):
        with pytest.raises( ValueError ):
            ChatIntent( intent="CHAT", reply="" )
