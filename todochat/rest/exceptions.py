"""
todochat custom exceptions.

Exception Hierarchy:
    TodoChatError (base)
    ├── TodoNotFoundError (todo missing, or owned by another user)
    ├── InvalidActionError (chat action lacks the fields its type needs)
    └── IntentParseError (model reply carries no usable intent object)

The HTTP layer maps these to status codes in todochat.rest.main; services
raise them and never build HTTP responses themselves.
"""


class TodoChatError( Exception ):
    """
    Base exception for all todochat errors.

    Attributes:
        message (str): Human-readable error message
        context (dict): Optional context information
    """

    def __init__( self, message, context=None ):
        super().__init__( message )
        self.message = message
        self.context = context or {}

    def __str__( self ):
        if self.context:
            context_str = ", ".join( f"{k}={v}" for k, v in self.context.items() )
            return f"{self.message} (Context: {context_str})"
        return self.message


class TodoNotFoundError( TodoChatError ):
    """
    Raised when a todo doesn't exist or doesn't belong to the requesting user.

    The two cases share one message so callers can't probe for other users' ids.
    """

    def __init__( self, todo_id, user_id=None ):
        super().__init__(
            "Todo not found or access denied",
            context = { "todo_id": todo_id, "user_id": user_id }
        )
        self.todo_id = todo_id


class InvalidActionError( TodoChatError ):
    """Raised when a todo action can't be executed as given."""

    def __init__( self, message, action_type=None ):
        super().__init__( message, context={ "action_type": action_type } if action_type else None )
        self.action_type = action_type


class IntentParseError( TodoChatError ):
    """Raised when no valid intent object can be extracted from a model reply."""

    def __init__( self, message, raw_text=None ):
        super().__init__( message )
        self.raw_text = raw_text
