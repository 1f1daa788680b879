"""Envelope variants for React views.

Each method normalises a view-specific sub-object (columns, form fields,
modal config, ...) and hands it to the generic success/error builder.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from fastapi.responses import JSONResponse

from eva_api.formatter.builder import ResponseFormatter
from eva_api.formatter.helpers import (
    format_file_size,
    normalize_columns,
    normalize_form_fields,
    normalize_options,
    notification_payload,
    pagination_payload,
    summarize_batch,
)
from eva_api.formatter.log_sink import ResponseLogSink
from eva_api.formatter.metadata import MetadataResolver
from eva_api.models.context import Clock, RequestContext, isoformat, utc_now
from eva_api.models.envelope import EnvelopeStatus
from eva_api.models.pagination import Paginator

Meta = Mapping[str, Any] | None


class ReactViewFormatter(ResponseFormatter):
    """ResponseFormatter with table/form/modal/... variants."""

    def __init__(
        self,
        metadata: MetadataResolver,
        sink: ResponseLogSink | None = None,
        clock: Clock = utc_now,
        *,
        auto_dismiss_ms: int = 5000,
    ) -> None:
        super().__init__(metadata, sink, clock)
        self._auto_dismiss_ms = auto_dismiss_ms

    def paginated(
        self,
        paginator: Paginator,
        message: str = "Data retrieved successfully",
        *,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        return self.success(
            pagination_payload(paginator),
            message,
            metadata=metadata,
            ctx=ctx,
            response_type="paginated",
        )

    def search(
        self,
        results: Paginator | Sequence[Any],
        query: str | None,
        filters: Mapping[str, Any] | None = None,
        message: str = "Search completed",
        *,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data: dict[str, Any] = {"query": query, "filters": dict(filters or {})}
        if isinstance(results, Paginator):
            page = pagination_payload(results)
            data.update(
                results=page["items"],
                count=results.total,
                pagination=page["pagination"],
                summary=page["summary"],
                empty=page["empty"],
            )
        else:
            data.update(results=list(results), count=len(results), empty=not results)
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="search")

    def table(
        self,
        rows: Paginator | Sequence[Mapping[str, Any]],
        columns: Sequence[str | Mapping[str, Any]],
        message: str = "Table data retrieved",
        *,
        actions: Sequence[Any] | None = None,
        filters: Mapping[str, Any] | None = None,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        pagination = None
        if isinstance(rows, Paginator):
            page = pagination_payload(rows)
            items, pagination = page["items"], page["pagination"]
        else:
            items = list(rows)
        data = {
            "rows": items,
            "columns": normalize_columns(columns),
            "actions": list(actions or []),
            "filters": dict(filters or {}),
            "pagination": pagination,
            "empty": not items,
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="table")

    def form(
        self,
        fields: Sequence[str | Mapping[str, Any]],
        values: Mapping[str, Any] | None = None,
        message: str = "Form configuration retrieved",
        *,
        submit_url: str | None = None,
        method: str = "POST",
        mode: str = "create",
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "form_fields": normalize_form_fields(fields),
            "initial_values": dict(values or {}),
            "submit_url": submit_url,
            "method": method.upper(),
            "mode": mode,
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="form")

    def modal(
        self,
        content: Any,
        title: str = "",
        message: str = "Modal data retrieved",
        *,
        size: str = "md",
        closable: bool = True,
        backdrop: bool = True,
        actions: Sequence[Any] | None = None,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "modal_config": {
                "title": title,
                "size": size,
                "closable": closable,
                "backdrop": backdrop,
                "actions": list(actions or []),
            },
            "content": content,
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="modal")

    def dropdown(
        self,
        options: Sequence[Any],
        message: str = "Options retrieved",
        *,
        searchable: bool = True,
        multiple: bool = False,
        clearable: bool = True,
        placeholder: str = "Seleccione...",
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "options": normalize_options(options),
            "config": {
                "searchable": searchable,
                "multiple": multiple,
                "clearable": clearable,
                "placeholder": placeholder,
            },
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="dropdown")

    def batch(
        self,
        results: Sequence[Any],
        operation: str,
        message: str | None = None,
        *,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        summary = summarize_batch(results)
        if message is None:
            message = f"Batch operation '{operation}' completed"
            if summary["failed"]:
                message += f" with {summary['failed']} failures"
        data = {"operation": operation, "results": list(results), "summary": summary}
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="batch")

    def file(
        self,
        name: str,
        size_bytes: int,
        message: str = "File processed",
        *,
        mime_type: str | None = None,
        url: str | None = None,
        status_code: int = 200,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "file": {
                "name": name,
                "size": size_bytes,
                "size_human": format_file_size(size_bytes),
                "mime_type": mime_type,
                "url": url,
            }
        }
        return self.success(
            data, message, status_code, metadata=metadata, ctx=ctx, response_type="file"
        )

    def notification(
        self,
        text: str,
        *,
        type: str = "info",
        title: str | None = None,
        persistent: bool = False,
        actions: Sequence[Mapping[str, Any]] | None = None,
        message: str = "Notification created",
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        payload = notification_payload(
            text,
            type=type,
            title=title,
            persistent=persistent,
            auto_dismiss_ms=self._auto_dismiss_ms,
            actions=actions,
        )
        payload["created_at"] = isoformat(self._clock())
        return self.success(
            {"notification": payload},
            message,
            metadata=metadata,
            ctx=ctx,
            response_type="notification",
        )

    def dashboard(
        self,
        widgets: Sequence[Any] | None = None,
        stats: Mapping[str, Any] | None = None,
        charts: Mapping[str, Any] | None = None,
        message: str = "Dashboard data retrieved",
        *,
        refresh_interval: int | None = None,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "widgets": list(widgets or []),
            "stats": dict(stats or {}),
            "charts": dict(charts or {}),
            "refresh_interval": refresh_interval,
            "last_updated": isoformat(self._clock()),
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="dashboard")

    def async_job(
        self,
        job_id: str,
        message: str = "Processing started",
        *,
        status_url: str | None = None,
        estimated_seconds: int | None = None,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "job_id": job_id,
            "status_url": status_url,
            "estimated_seconds": estimated_seconds,
        }
        return self.accepted(data, message, metadata=metadata, ctx=ctx)

    def job_status(
        self,
        job_id: str,
        state: str,
        progress: float = 0,
        result: Any = None,
        message: str = "Job status retrieved",
        *,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "job_id": job_id,
            "state": state,
            "progress": max(0, min(100, progress)),
            "result": result,
        }
        return self.success(
            data,
            message,
            metadata=metadata,
            ctx=ctx,
            status=EnvelopeStatus.JOB_STATUS,
            response_type="job_status",
        )

    def export(
        self,
        filename: str,
        format: str,
        records_count: int,
        message: str = "Export generated",
        *,
        url: str | None = None,
        metadata: Meta = None,
        ctx: RequestContext | None = None,
    ) -> JSONResponse:
        data = {
            "filename": filename,
            "format": format,
            "records_count": records_count,
            "url": url,
            "generated_at": isoformat(self._clock()),
        }
        return self.success(data, message, metadata=metadata, ctx=ctx, response_type="export")
