"""Wire messages exchanged between a client broker and the backend.

A call travels client → backend as ``{id, action, payload}``; the answer
travels back as ``{id, status, data, message}``. Both cross a message port
as plain dicts; these models validate them at each end.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class Action(StrEnum):
    """Actions the backend recognizes. Anything else is a liveness ping."""

    SEED_DATA = "SEED_DATA"
    QUERY_COUNTS = "QUERY_COUNTS"


class ReplyStatus(StrEnum):
    """Reply status codes."""

    SUCCESS = "success"
    ERROR = "error"
    CONNECTED = "connected"


READY_MESSAGE = "Ready"


class CallMessage(BaseModel):
    """One outgoing call. ``id`` correlates the reply."""

    model_config = {"frozen": True}

    id: str | None = None
    action: str | None = None
    payload: Any = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ReplyMessage(BaseModel):
    """Backend answer to a call, or an unsolicited greeting.

    ``connected`` is the liveness path: sent without an id on connect, and
    with the caller's id in answer to an unrecognized action.
    """

    model_config = {"frozen": True}

    id: str | None = None
    status: ReplyStatus
    data: Any = None
    message: str | None = None

    @classmethod
    def success(cls, request_id: str | None, data: Any) -> ReplyMessage:
        return cls(id=request_id, status=ReplyStatus.SUCCESS, data=data)

    @classmethod
    def error(cls, request_id: str | None, message: str) -> ReplyMessage:
        return cls(id=request_id, status=ReplyStatus.ERROR, message=message)

    @classmethod
    def ready(cls, request_id: str | None = None) -> ReplyMessage:
        return cls(id=request_id, status=ReplyStatus.CONNECTED, message=READY_MESSAGE)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
