"""Response envelope models.

Every API response is wrapped in one envelope with fixed top-level keys:
{ success, status, message, data, errors, timestamp, metadata }

Success and error envelopes are separate models, so ``data`` and ``errors``
can never both be populated. Both keys are always serialized, one as null.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, Field

T = TypeVar("T")
E = TypeVar("E")


class EnvelopeStatus(str, Enum):
    """Coarse-grained outcome tag used by the frontend for branching."""

    SUCCESS = "success"
    ERROR = "error"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    TOO_MANY_REQUESTS = "too_many_requests"
    SERVER_ERROR = "server_error"
    ASYNC_STARTED = "async_started"
    JOB_STATUS = "job_status"
    NO_CONTENT = "no_content"


class SuccessEnvelope(BaseModel, Generic[T]):
    """Envelope for 2xx outcomes."""

    success: Literal[True] = True
    status: EnvelopeStatus = EnvelopeStatus.SUCCESS
    message: str
    data: T | None = None
    errors: None = None
    timestamp: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel, Generic[E]):
    """Envelope for 4xx/5xx outcomes."""

    success: Literal[False] = False
    status: EnvelopeStatus = EnvelopeStatus.ERROR
    message: str
    data: None = None
    errors: E | None = None
    timestamp: str
    metadata: dict[str, Any] = Field(default_factory=dict)


Envelope = Union[SuccessEnvelope[Any], ErrorEnvelope[Any]]

ENVELOPE_KEYS: tuple[str, ...] = (
    "success",
    "status",
    "message",
    "data",
    "errors",
    "timestamp",
    "metadata",
)
