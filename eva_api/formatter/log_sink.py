"""One log entry per outgoing envelope.

Two thresholds are in use: the formatter escalates anything >= 400, the
controller-level sink used by the exception handlers only escalates >= 500.
Escalated entries are logged at ERROR for 5xx and WARNING otherwise.
"""

from __future__ import annotations

import logging

from eva_api.models.context import ANONYMOUS, RequestContext

FORMATTER_ESCALATION = 400
CONTROLLER_ESCALATION = 500


class ResponseLogSink:
    """Writes response summaries to a logger with severity escalation."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        escalate_at: int = FORMATTER_ESCALATION,
    ) -> None:
        self._logger = logger or logging.getLogger("eva_api.responses")
        self._escalate_at = escalate_at

    @property
    def escalate_at(self) -> int:
        return self._escalate_at

    def level_for(self, status_code: int) -> int:
        if status_code < self._escalate_at:
            return logging.INFO
        if status_code >= 500:
            return logging.ERROR
        return logging.WARNING

    def record(
        self,
        response_type: str,
        message: str,
        status_code: int,
        ctx: RequestContext | None = None,
    ) -> None:
        ctx = ctx or ANONYMOUS
        self._logger.log(
            self.level_for(status_code),
            "API response %s: %s",
            response_type,
            message,
            extra={
                "response_type": response_type,
                "status_code": status_code,
                "user_id": ctx.user_id,
                "ip": ctx.ip,
                "user_agent": ctx.user_agent,
                "endpoint": ctx.endpoint,
                "method": ctx.method,
                "request_id": ctx.request_id,
            },
        )
