"""JSON-lines events shared by the facade and the HTTP requestor."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel


# Keys every event carries; caller fields never overwrite them.
ENVELOPE_KEYS = ("event_type", "level", "timestamp", "call_id")


def build_event(
    event_type: str,
    call_id: str | None,
    level: str,
    fields: dict[str, Any],
) -> dict[str, Any]:
    event = {key: value for key, value in fields.items() if key not in ENVELOPE_KEYS}
    event.update(
        event_type=event_type,
        level=level,
        call_id=call_id,
        timestamp=datetime.now(UTC).isoformat(),
    )
    return event


def emit_json_event(
    event_type: str,
    *,
    call_id: str | None,
    level: str = "info",
    **fields: Any,
) -> str:
    """Print one event as a sorted JSON line and return the line."""
    line = json.dumps(
        build_event(event_type, call_id, level, fields),
        ensure_ascii=True,
        sort_keys=True,
        default=str,
    )
    print(line)
    return line


def emit_model_event(event_type: str, record: BaseModel, *, level: str = "info") -> str:
    """Emit a pydantic record; its ``call_id`` field, if any, becomes the envelope's."""
    fields = record.model_dump(mode="json")
    return emit_json_event(event_type, call_id=fields.pop("call_id", None), level=level, **fields)
