"""
Slack Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Contract between the outgoing-webhook form body and the hello responder.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class InboundRequest(BaseModel):
    """
    One outgoing-webhook notification, fully parsed.

    Only ever built complete by the parser; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., description="Integration token sent by Slack")
    timestamp_raw: str = Field(..., description="Raw 'seconds.fraction' text")
    timestamp: datetime = Field(..., description="Message instant, UTC")
    team_id: str
    team_domain: str
    channel_id: str
    channel_name: str
    user_id: str = Field(..., description="Triggering user id, e.g. U123")
    user_name: str
    trigger_word: str = Field(..., description="Configured trigger that fired")
    text: str = Field(..., description="Full message text")


class HelloResponse(BaseModel):
    """Body of the 200 reply posted back into the channel."""

    text: str
