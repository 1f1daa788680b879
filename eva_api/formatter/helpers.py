"""Pure normalisation helpers shared by the envelope variants.

Nothing here touches the request, the clock or the logger, so every
function can be tested with plain values.
"""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping, Sequence

from eva_api.models.pagination import Paginator

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

# Query sources FastAPI prefixes onto error locations
_LOCATION_SOURCES = {"body", "query", "path", "header", "cookie"}


def _trim_number(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_file_size(size_bytes: float) -> str:
    """Human-readable size: ``0 -> "0 B"``, ``1536 -> "1.5 KB"``."""
    if size_bytes <= 0:
        return "0 B"

    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{_trim_number(round(value, 2))} {_SIZE_UNITS[unit]}"


def _item_succeeded(item: Any) -> bool:
    if isinstance(item, Mapping):
        return item.get("success") is True
    return getattr(item, "success", False) is True


def summarize_batch(results: Sequence[Any]) -> dict[str, Any]:
    """Partition batch results by their ``success`` flag."""
    total = len(results)
    successful = sum(1 for item in results if _item_succeeded(item))
    return {
        "total": total,
        "successful": successful,
        "failed": total - successful,
        "success_rate": round(successful / total * 100, 2) if total else 0,
    }


def pagination_payload(paginator: Paginator) -> dict[str, Any]:
    """Items plus navigation block, summary line and ``empty`` flag."""
    page = paginator.current_page
    first = paginator.first_item
    last = paginator.last_item
    return {
        "items": list(paginator.items),
        "pagination": {
            "current_page": page,
            "last_page": paginator.last_page,
            "per_page": paginator.per_page,
            "total": paginator.total,
            "from": first,
            "to": last,
            "has_more_pages": paginator.has_more_pages,
            "first_page_url": paginator.url(1),
            "last_page_url": paginator.url(paginator.last_page),
            "next_page_url": paginator.url(page + 1) if paginator.has_more_pages else None,
            "prev_page_url": paginator.url(page - 1) if page > 1 else None,
        },
        "summary": f"Showing {first or 0}–{last or 0} of {paginator.total}",
        "empty": paginator.total == 0,
    }


def _error_field(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in _LOCATION_SOURCES:
        parts = parts[1:]
    return ".".join(parts) or "__root__"


def format_validation_errors(errors: Any) -> dict[str, dict[str, Any]]:
    """Normalise validation errors to ``{field: {message, all_messages, field, type}}``.

    Accepts a ``{field: message | [messages]}`` mapping or a pydantic-style
    list of ``{"loc", "msg", "type"}`` dicts. Anything else is returned
    under the ``__root__`` key.
    """
    if errors is None:
        return {}

    grouped: dict[str, tuple[list[str], str]] = {}

    if isinstance(errors, Mapping):
        for field, messages in errors.items():
            if isinstance(messages, (list, tuple)):
                texts = [str(m) for m in messages]
            else:
                texts = [str(messages)]
            grouped[str(field)] = (texts, "validation")
    elif isinstance(errors, (list, tuple)):
        for err in errors:
            if not isinstance(err, Mapping):
                grouped.setdefault("__root__", ([], "validation"))[0].append(str(err))
                continue
            field = _error_field(err.get("loc", ()))
            texts, _ = grouped.setdefault(field, ([], str(err.get("type", "validation"))))
            texts.append(str(err.get("msg", "Invalid value")))
    else:
        grouped["__root__"] = ([str(errors)], "validation")

    return {
        field: {
            "message": texts[0] if texts else "",
            "all_messages": texts,
            "field": field,
            "type": kind,
        }
        for field, (texts, kind) in grouped.items()
    }


def field_type(key: str) -> str:
    """Guess a display type from a column or field name."""
    name = key.lower()
    if "fecha" in name or "date" in name:
        return "date"
    if "precio" in name or "costo" in name or "amount" in name:
        return "number"
    if "activo" in name or "status" in name or "enabled" in name:
        return "boolean"
    return "text"


def field_label(key: str) -> str:
    """``fecha_ingreso`` -> ``Fecha Ingreso``."""
    return " ".join(word.capitalize() for word in key.replace("_", " ").split())


def normalize_columns(columns: Iterable[str | Mapping[str, Any]]) -> list[dict[str, Any]]:
    normalized = []
    for column in columns:
        spec = {"key": column} if isinstance(column, str) else dict(column)
        key = str(spec.get("key") or spec.get("field") or "")
        normalized.append({
            "label": field_label(key),
            "type": field_type(key),
            "sortable": True,
            "filterable": False,
            **spec,
            "key": key,
        })
    return normalized


def normalize_form_fields(fields: Iterable[str | Mapping[str, Any]]) -> list[dict[str, Any]]:
    normalized = []
    for form_field in fields:
        spec = {"name": form_field} if isinstance(form_field, str) else dict(form_field)
        name = str(spec.get("name", ""))
        normalized.append({
            "label": field_label(name),
            "type": "text",
            "required": False,
            "placeholder": "",
            "options": [],
            **spec,
            "name": name,
        })
    return normalized


def normalize_options(options: Iterable[Any]) -> list[dict[str, Any]]:
    """Coerce mappings, pairs and scalars into ``{value, label}`` options."""
    normalized = []
    for option in options:
        if isinstance(option, Mapping):
            value = option.get("value", option.get("id"))
            label = option.get("label", option.get("name", value))
            extra = {k: v for k, v in option.items() if k not in ("value", "label", "id", "name")}
            normalized.append({"value": value, "label": str(label), **extra})
        elif isinstance(option, (list, tuple)) and len(option) == 2:
            normalized.append({"value": option[0], "label": str(option[1])})
        else:
            normalized.append({"value": option, "label": str(option)})
    return normalized


def notification_payload(
    message: str,
    *,
    type: str = "info",
    title: str | None = None,
    persistent: bool = False,
    auto_dismiss_ms: int = 5000,
    actions: Sequence[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Errors and persistent notifications never auto-dismiss."""
    dismiss = None if persistent or type == "error" else auto_dismiss_ms
    return {
        "id": str(uuid.uuid4()),
        "type": type,
        "title": title or type.capitalize(),
        "message": message,
        "persistent": persistent,
        "auto_dismiss": dismiss,
        "actions": list(actions or []),
    }
