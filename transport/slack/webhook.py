"""
Slack Outgoing-Webhook Receiver

FastAPI router for POST /hello. Parses the form body and answers with a
greeting that mentions the triggering user. Stateless, no retries.
"""

import logging
from typing import Mapping

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from infra.config import DEFAULT_GREETING

from .parse import ParseError, parse_request
from .schemas import HelloResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Slack Transport"])

HELLO_RESPONSE_FORMAT = "{prefix}, <@{user_id}|{user_name}> :sunglasses:"


def format_greeting(prefix: str, user_id: str, user_name: str) -> str:
    """Greeting text using Slack mention syntax. Values are not escaped."""
    return HELLO_RESPONSE_FORMAT.format(
        prefix=prefix, user_id=user_id, user_name=user_name
    )


def handle_hello(
    form_fields: Mapping[str, str],
    greeting_prefix: str = DEFAULT_GREETING,
) -> Response:
    """
    Answer one outgoing-webhook notification.

    Args:
        form_fields: Decoded form body
        greeting_prefix: "Hey", "Hello", ...

    Returns:
        400 with empty body if parsing fails, else 200 JSON {"text": ...}
    """

    try:
        slack_request = parse_request(form_fields)
    except ParseError as e:
        # Field detail stays in the logs, never in the response
        logger.warning(
            f"Unable to parse request: {e}",
            extra={"field": e.field},
        )
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    body = HelloResponse(
        text=format_greeting(
            greeting_prefix, slack_request.user_id, slack_request.user_name
        )
    )
    logger.info(
        "Hello request handled",
        extra={
            "team_id": slack_request.team_id,
            "channel_id": slack_request.channel_id,
            "user_id": slack_request.user_id,
        },
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())


@router.post("/hello")
async def hello_webhook(request: Request) -> Response:
    """
    Receive an outgoing-webhook notification.

    Expected body (application/x-www-form-urlencoded):
        token, timestamp, team_id, team_domain, channel_id, channel_name,
        user_id, user_name, trigger_word, text

    Returns:
        200 {"text": "<prefix>, <@USER_ID|USER_NAME> :sunglasses:"}
        400 with empty body on any missing or malformed field
    """

    logger.debug("Handling hello request")
    try:
        form = await request.form()
    except Exception as e:
        logger.warning(f"Failed to read form body: {e}")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    greeting_prefix = getattr(request.app.state, "greeting_prefix", DEFAULT_GREETING)
    return handle_hello(form, greeting_prefix)
