"""The get_event_log tool: reading the 1C event log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from onec_tools.common import (
    Handler,
    Tool,
    ToolError,
    ToolResult,
    _arguments,
    _int_arg,
    _mapping,
    _string_arg,
    _text,
    clamp_limit,
    text_result,
)

DEFAULT_EVENT_LOG_LIMIT = 50
MAX_EVENT_LOG_LIMIT = 500


@dataclass
class EventLogEntry:
    """One event log record."""

    date: str = ""
    level: str = ""
    event: str = ""
    user: str = ""
    computer: str = ""
    metadata: str = ""
    data: str = ""
    comment: str = ""
    transaction: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "EventLogEntry":
        data = _mapping(data)
        return cls(
            date=_text(data, "date"),
            level=_text(data, "level"),
            event=_text(data, "event"),
            user=_text(data, "user"),
            computer=_text(data, "computer"),
            metadata=_text(data, "metadata"),
            data=_text(data, "data"),
            comment=_text(data, "comment"),
            transaction=_text(data, "transaction"),
        )


@dataclass
class EventLogResult:
    """Event log records returned by 1C."""

    events: list[EventLogEntry] = field(default_factory=list)
    total: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "EventLogResult":
        data = _mapping(data)
        return cls(
            events=[EventLogEntry.from_dict(item) for item in data.get("events") or []],
            total=int(data.get("total") or 0),
        )


def event_log_tool() -> Tool:
    """Describe the get_event_log tool."""
    return Tool(
        name="get_event_log",
        title="Журнал регистрации",
        description=(
            "Прочитать журнал регистрации 1С — лог ошибок, действий пользователей и системных событий. "
            "Фильтрация по дате, уровню важности (Ошибка/Предупреждение/Информация) и пользователю."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "start_date": {
                    "type": "string",
                    "description": "Начало периода в формате ISO 8601 (например 2026-03-01T00:00:00)",
                },
                "end_date": {
                    "type": "string",
                    "description": "Конец периода в формате ISO 8601",
                },
                "level": {
                    "type": "string",
                    "description": "Уровень важности: Ошибка, Предупреждение, Информация, Примечание",
                    "enum": ["Ошибка", "Предупреждение", "Информация", "Примечание"],
                },
                "user": {
                    "type": "string",
                    "description": "Имя пользователя 1С для фильтрации",
                },
                "limit": {
                    "type": "integer",
                    "description": "Максимальное количество записей (по умолчанию 50, максимум 500)",
                },
            },
        },
        read_only=True,
    )


def new_event_log_handler(client) -> Handler:
    """Build a handler that reads the 1C event log."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        body = {
            "start_date": _string_arg(args, "start_date"),
            "end_date": _string_arg(args, "end_date"),
            "level": _string_arg(args, "level"),
            "user": _string_arg(args, "user"),
            "limit": clamp_limit(_int_arg(args, "limit"), DEFAULT_EVENT_LOG_LIMIT, MAX_EVENT_LOG_LIMIT),
        }
        try:
            result = EventLogResult.from_dict(client.post("/eventlog", body))
        except ToolError as exc:
            raise ToolError(f"reading event log from 1C: {exc}") from exc
        return text_result(format_event_log(result))

    return handler


def _format_entry(entry: EventLogEntry) -> str:
    lines = [
        f"**{entry.date}** | {entry.level} | {entry.event}",
        f"- Пользователь: {entry.user}",
    ]
    optional = [
        ("Компьютер", entry.computer),
        ("Метаданные", entry.metadata),
        ("Данные", entry.data),
        ("Комментарий", entry.comment),
        ("Транзакция", entry.transaction),
    ]
    lines.extend(f"- {label}: {value}" for label, value in optional if value)
    return "\n".join(lines) + "\n"


def format_event_log(result: EventLogResult) -> str:
    """Render event log records as markdown."""
    header = "## Журнал регистрации\n\n"
    if not result.events:
        return header + "Записей не найдено.\n"
    body = "\n---\n\n".join(_format_entry(entry) for entry in result.events)
    return f"{header}{body}\nВсего: {result.total}\n"