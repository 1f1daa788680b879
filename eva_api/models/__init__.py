"""Public models for the EVA API response layer."""

from eva_api.models.context import ANONYMOUS, Principal, RequestContext, isoformat, utc_now
from eva_api.models.envelope import (
    ENVELOPE_KEYS,
    Envelope,
    EnvelopeStatus,
    ErrorEnvelope,
    SuccessEnvelope,
)
from eva_api.models.pagination import ListPaginator, PaginationParams, Paginator

__all__ = [
    "ANONYMOUS",
    "ENVELOPE_KEYS",
    "Envelope",
    "EnvelopeStatus",
    "ErrorEnvelope",
    "ListPaginator",
    "PaginationParams",
    "Paginator",
    "Principal",
    "RequestContext",
    "SuccessEnvelope",
    "isoformat",
    "utc_now",
]
