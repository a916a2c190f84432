"""
Slack Outgoing-Webhook Parsing

PURE CONVERSION - NO I/O

Turns the decoded form fields of an outgoing-webhook POST into an
InboundRequest. Fails on the first missing field; a partially built
request never leaves this module.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Mapping

from .schemas import InboundRequest


# Lookup order is also the order in which missing fields are reported.
REQUIRED_FIELDS = (
    "token",
    "timestamp",
    "team_id",
    "team_domain",
    "channel_id",
    "channel_name",
    "user_id",
    "user_name",
    "trigger_word",
    "text",
)

_TIMESTAMP_RE = re.compile(r"(\d+)(?:\.(\d{0,9}))?", re.ASCII)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ParseError(Exception):
    """Form body is missing a field or holds a malformed value."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


def parse_timestamp(raw: str) -> datetime:
    """
    Parse Unix 'seconds[.fraction]' text into an aware UTC datetime.

    The fraction may hold 0-9 digits; it is padded to nanoseconds and
    truncated to microseconds.

    Raises:
        ParseError: Not of the form digits[.digits], or out of range
    """

    match = _TIMESTAMP_RE.fullmatch(raw)
    if match is None:
        raise ParseError("timestamp", f"malformed timestamp {raw[:40]!r}")

    try:
        seconds = int(match.group(1))
        nanos = int((match.group(2) or "").ljust(9, "0"))
        return _EPOCH + timedelta(seconds=seconds, microseconds=nanos // 1000)
    except (OverflowError, ValueError):
        # ValueError: int() digit limit on very long input
        raise ParseError("timestamp", f"timestamp out of range {raw[:40]!r}")


def _require(form_fields: Mapping[str, str], field: str) -> str:
    value = form_fields.get(field)
    if value is None:
        raise ParseError(field, "required request field is missing")
    if not isinstance(value, str):
        # multipart file upload in place of a plain field
        raise ParseError(field, "expected a text value")
    return value


def parse_request(form_fields: Mapping[str, str]) -> InboundRequest:
    """
    Build an InboundRequest from decoded form fields.

    Args:
        form_fields: Field name -> value, e.g. Starlette FormData

    Returns:
        Fully populated InboundRequest

    Raises:
        ParseError: First missing field, or malformed timestamp
    """

    values = {}
    for field in REQUIRED_FIELDS:
        values[field] = _require(form_fields, field)
        if field == "timestamp":
            timestamp = parse_timestamp(values[field])

    return InboundRequest(
        token=values["token"],
        timestamp_raw=values["timestamp"],
        timestamp=timestamp,
        team_id=values["team_id"],
        team_domain=values["team_domain"],
        channel_id=values["channel_id"],
        channel_name=values["channel_name"],
        user_id=values["user_id"],
        user_name=values["user_name"],
        trigger_word=values["trigger_word"],
        text=values["text"],
    )
