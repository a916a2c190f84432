"""Slack Transport Layer - Module Exports"""

from .parse import REQUIRED_FIELDS, ParseError, parse_request, parse_timestamp
from .schemas import HelloResponse, InboundRequest
from .webhook import format_greeting, handle_hello, router

__all__ = [
    # Schemas
    "InboundRequest",
    "HelloResponse",
    # Parsing
    "REQUIRED_FIELDS",
    "parse_request",
    "parse_timestamp",
    "ParseError",
    # Handler
    "format_greeting",
    "handle_hello",
    "router",
]
