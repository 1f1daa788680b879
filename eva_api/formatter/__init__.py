"""Envelope builder, metadata resolver, variants and the response log sink."""

from eva_api.formatter.builder import ResponseFormatter, status_for_code
from eva_api.formatter.helpers import (
    format_file_size,
    format_validation_errors,
    pagination_payload,
    summarize_batch,
)
from eva_api.formatter.log_sink import (
    CONTROLLER_ESCALATION,
    FORMATTER_ESCALATION,
    ResponseLogSink,
)
from eva_api.formatter.metadata import MetadataResolver
from eva_api.formatter.variants import ReactViewFormatter

__all__ = [
    "CONTROLLER_ESCALATION",
    "FORMATTER_ESCALATION",
    "MetadataResolver",
    "ReactViewFormatter",
    "ResponseFormatter",
    "ResponseLogSink",
    "format_file_size",
    "format_validation_errors",
    "pagination_payload",
    "summarize_batch",
    "status_for_code",
]
