"""
Shared Pydantic building blocks for request and response models.

Every JSON body exchanged with the client uses camelCase keys; Python code
uses snake_case attribute names. Responses are wrapped in ApiResponse:

    {"success": true, "data": {...}}
    {"success": true, "message": "Todo deleted successfully"}
    {"success": false, "error": "Todo not found or access denied"}
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataType = TypeVar( "DataType" )


class CamelModel( BaseModel ):
    """Base model: camelCase on the wire, snake_case in Python, readable from ORM rows."""

    model_config = ConfigDict(
        alias_generator  = to_camel,
        populate_by_name = True,
        from_attributes  = True
    )


class ApiResponse( BaseModel, Generic[DataType] ):
    """
    Response envelope used by every endpoint.

    Contains:
        - success: False only on errors
        - data: Endpoint payload (optional)
        - message: Human-readable confirmation (optional)
        - error: Error description (only on failure)
    """
    success: bool = True
    data: Optional[DataType] = None
    message: Optional[str] = None
    error: Optional[str] = None
