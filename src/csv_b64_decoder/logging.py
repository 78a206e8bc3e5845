"""
csv_b64_decoder/logging.py

Run-scoped structured logging for the decoder (stdlib logging + Pydantic v2).

Each log entry is a structured event:

    {
        "event_id": "<uuid4 hex>",
        "run_id": "<uuid4 hex>",
        "timestamp": "<RFC3339 UTC>",
        "level": "info" | "debug" | "warning" | "error" | "critical",
        "event": "<namespaced.event.name>",
        "message": "<human-readable message>",
        "data": { ... optional structured payload ... },
        "error": {"type": ..., "message": ..., "stack_trace": ...}
    }

Events listed in ``EVENT_SCHEMAS`` have their payload validated strictly;
other events pass through as-is.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, ValidationError

NAMESPACE = "decoder"
DEFAULT_EVENT = "log"  # fallback event for plain log lines
VALID_LOG_FORMATS = {"text", "ndjson", "json"}  # "json" is an alias for ndjson

EventData: TypeAlias = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Event payload schemas
# ---------------------------------------------------------------------------


class StrictPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RunStartedPayload(StrictPayload):
    input_file: str
    column_names: list[str]
    encoding: str


class StageStartedPayload(StrictPayload):
    stage: str


class ColumnsResolvedPayload(StrictPayload):
    columns: dict[str, int]


class ColumnsMissingPayload(StrictPayload):
    column: str


class CellDecodeFailedPayload(StrictPayload):
    row: int
    column: str
    reason: str


class RunCompletedPayload(StrictPayload):
    output_file: str
    processed_columns: list[str]
    processed_rows: int
    decoded_cells: int
    warnings: int


class RunFailedPayload(StrictPayload):
    input_file: str
    stage: str | None
    error: str


EVENT_SCHEMAS: dict[str, type[BaseModel]] = {
    f"{NAMESPACE}.run.started": RunStartedPayload,
    f"{NAMESPACE}.stage.started": StageStartedPayload,
    f"{NAMESPACE}.columns.resolved": ColumnsResolvedPayload,
    f"{NAMESPACE}.columns.missing": ColumnsMissingPayload,
    f"{NAMESPACE}.cell.decode_failed": CellDecodeFailedPayload,
    f"{NAMESPACE}.run.completed": RunCompletedPayload,
    f"{NAMESPACE}.run.failed": RunFailedPayload,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _rfc3339_utc(created: float) -> str:
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _truncate(value: Any, *, max_len: int = 120) -> str:
    text = str(value)
    return text if len(text) <= max_len else (text[: max_len - 1] + "…")


def qualify_event_name(event_name: str, namespace: str) -> str:
    """Prefix ``event_name`` with ``namespace`` unless it already carries it."""

    name = (event_name or "").strip().strip(".")
    ns = (namespace or "").strip().strip(".")
    if not ns:
        return name or "invalid_event"
    if not name:
        return f"{ns}.invalid_event"
    if name == ns or name.startswith(f"{ns}."):
        return name
    return f"{ns}.{name}"


def _validate_payload(full_event: str, payload: dict[str, Any]) -> dict[str, Any]:
    schema = EVENT_SCHEMAS.get(full_event)
    if schema is None:
        return payload
    try:
        model = schema.model_validate(payload, strict=True)
    except ValidationError as e:
        raise ValueError(f"Invalid payload for event '{full_event}': {e}") from e
    return model.model_dump(mode="python")


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class _StructuredFormatter(logging.Formatter):
    def _to_event_record(self, record: logging.LogRecord) -> dict[str, Any]:
        # Injected by RunLogger.process; fallbacks keep formatters safe for foreign records.
        out: dict[str, Any] = {
            "event_id": str(getattr(record, "event_id", None) or uuid.uuid4().hex),
            "run_id": str(getattr(record, "run_id", None) or ""),
            "timestamp": _rfc3339_utc(record.created),
            "level": record.levelname.lower(),
            "event": str(getattr(record, "event", None) or DEFAULT_EVENT),
            "message": record.getMessage(),
        }

        data = getattr(record, "data", None)
        if isinstance(data, Mapping) and data:
            out["data"] = dict(data)

        if record.exc_info:
            exc_type, exc, _tb = record.exc_info
            out["error"] = {
                "type": getattr(exc_type, "__name__", str(exc_type)),
                "message": "" if exc is None else str(exc),
                "stack_trace": self.formatException(record.exc_info),
            }

        return out


class NdjsonFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = self._to_event_record(record)
        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = self._to_event_record(record)
        head = f"[{payload['timestamp']}] {payload['level'].upper()} {payload['event']}"
        msg = payload["message"]
        if msg and msg != payload["event"]:
            head += f": {msg}"

        data = payload.get("data")
        if data:
            items = [f"{key}={_truncate(data[key])}" for key in sorted(data, key=str)[:8]]
            if len(data) > 8:
                items.append("…")
            head += " (" + ", ".join(items) + ")"

        err = payload.get("error")
        if err and err.get("stack_trace"):
            head += "\n" + str(err["stack_trace"]).rstrip("\n")

        return head


# ---------------------------------------------------------------------------
# Logger adapter
# ---------------------------------------------------------------------------


class RunLogger(logging.LoggerAdapter):
    """
    LoggerAdapter that:
    - stamps each record with run_id + event_id
    - adds a default event for plain log lines
    - provides .event() for domain events
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        namespace: str = NAMESPACE,
        run_id: str | None = None,
    ) -> None:
        self._namespace = namespace
        self._run_id = run_id or uuid.uuid4().hex
        super().__init__(logger, {"namespace": namespace, "run_id": self._run_id})

    @property
    def run_id(self) -> str:
        return self._run_id

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        caller_extra = kwargs.pop("extra", None)
        extra = dict(self.extra or {})
        if caller_extra is not None:
            if not isinstance(caller_extra, Mapping):
                raise TypeError("logging 'extra' must be a mapping")
            extra.update(caller_extra)

        extra["run_id"] = self._run_id
        extra["event_id"] = str(extra.get("event_id") or uuid.uuid4().hex)
        extra.setdefault("event", qualify_event_name(DEFAULT_EVENT, self._namespace))

        data = extra.get("data")
        if data is not None and not isinstance(data, Mapping):
            extra["data"] = {"value": data}

        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: EventData | None = None,
        exc: BaseException | None = None,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        full_name = qualify_event_name(name, self._namespace)
        payload: dict[str, Any] = {}
        if data:
            payload.update(dict(data))
        payload = _validate_payload(full_name, payload)

        extra: dict[str, Any] = {"event": full_name}
        if payload:
            extra["data"] = payload

        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        self.log(level, message or full_name, extra=extra, exc_info=exc_info)


class NullLogger(RunLogger):
    """A RunLogger that discards all output."""

    def __init__(self, *, run_id: str = "null") -> None:
        base_logger = logging.Logger("csv_b64_decoder.null")
        base_logger.addHandler(logging.NullHandler())
        base_logger.propagate = False
        base_logger.disabled = True
        super().__init__(base_logger, run_id=run_id)


# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------


@dataclass
class RunLogContext:
    logger: RunLogger
    _base_logger: logging.Logger
    _handlers: list[logging.Handler]

    def close(self) -> None:
        for h in list(self._handlers):
            self._base_logger.removeHandler(h)
            h.close()

    def __enter__(self) -> "RunLogContext":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


def create_run_logger_context(
    *,
    log_format: str = "text",
    log_level: int = logging.INFO,
) -> RunLogContext:
    """Attach a stderr handler to a fresh run-scoped logger."""

    fmt = (log_format or "text").strip().lower()
    if fmt not in VALID_LOG_FORMATS:
        raise ValueError("log_format must be 'text' or 'ndjson' (or 'json')")

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(TextFormatter() if fmt == "text" else NdjsonFormatter())

    run_id = uuid.uuid4().hex
    base_logger = logging.getLogger(f"csv_b64_decoder.run.{run_id}")
    base_logger.setLevel(log_level)
    base_logger.handlers.clear()
    base_logger.propagate = False
    base_logger.addHandler(handler)

    logger = RunLogger(base_logger, run_id=run_id)
    return RunLogContext(logger=logger, _base_logger=base_logger, _handlers=[handler])


__all__ = [
    "EVENT_SCHEMAS",
    "NAMESPACE",
    "NdjsonFormatter",
    "NullLogger",
    "RunLogContext",
    "RunLogger",
    "TextFormatter",
    "create_run_logger_context",
    "qualify_event_name",
]
