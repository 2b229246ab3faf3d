"""The execute_query tool: running read-only 1C queries."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
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
    clamp_limit,
    text_result,
)

DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 1000

_READ_ONLY_PREFIXES = ("ВЫБРАТЬ", "SELECT")


@dataclass
class QueryResult:
    """Rows returned by a query."""

    columns: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)
    total: int = 0
    truncated: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "QueryResult":
        data = _mapping(data)
        return cls(
            columns=[str(column) for column in data.get("columns") or []],
            rows=[list(row or []) for row in data.get("rows") or []],
            total=int(data.get("total") or 0),
            truncated=bool(data.get("truncated")),
        )


def query_tool() -> Tool:
    """Describe the execute_query tool."""
    return Tool(
        name="execute_query",
        title="Выполнить запрос к данным",
        description=(
            "Выполнить запрос на языке 1С (ВЫБРАТЬ/SELECT) и получить данные из базы: "
            "список элементов справочника, документы за период, остатки, обороты, сведения из регистров. "
            "Используй когда нужно найти, посчитать или вывести конкретные данные. "
            "Поддерживает параметры через &Имя. "
            "Имена таблиц: Справочник.X, Документ.X, РегистрНакопления.X, РегистрСведений.X "
            "(единственное число, НЕ Справочники/Документы). "
            "Перечисления НЕ являются таблицами: используй ЗНАЧЕНИЕ(Перечисление.Имя.Значение) в WHERE/CASE. "
            "Виртуальные таблицы регистров: РегистрНакопления.X.Остатки(&Период), "
            ".Обороты(&НачалоПериода, &КонецПериода), "
            "РегистрСведений.X.СрезПоследних(&Период). "
            "Перед выполнением вызови validate_query для проверки синтаксиса. "
            "Имена полей бери из get_object_structure."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        "Текст запроса на языке запросов 1С. Только ВЫБРАТЬ/SELECT. "
                        "Параметры указывай через &ИмяПараметра."
                    ),
                },
                "limit": {
                    "type": "integer",
                    "description": "Максимальное количество строк результата (по умолчанию 100, максимум 1000)",
                },
                "parameters": {
                    "type": "object",
                    "description": (
                        "Параметры запроса в виде пар ключ-значение. Ключ — имя параметра без амперсанда. "
                        'Пример: {"Контрагент": "ООО Ромашка", "ДатаНачала": "2026-01-01"}'
                    ),
                },
            },
            "required": ["query"],
        },
        read_only=True,
    )


def _is_read_only(query: str) -> bool:
    return query.strip()[:30].upper().startswith(_READ_ONLY_PREFIXES)


def new_query_handler(client) -> Handler:
    """Build a handler that runs a read-only query in 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        query = _string_arg(args, "query")
        limit = _int_arg(args, "limit")
        parameters = args.get("parameters")
        if parameters is not None and not isinstance(parameters, Mapping):
            raise ToolError("parsing input: 'parameters' must be an object")
        if not query:
            raise ToolError("query is required")

        # Client-side hint only; the 1C side enforces read-only execution itself.
        if not _is_read_only(query):
            raise ToolError("только SELECT/ВЫБРАТЬ запросы разрешены")

        body: dict[str, Any] = {
            "query": query,
            "limit": clamp_limit(limit, DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT),
        }
        if parameters:
            body["parameters"] = dict(parameters)
        try:
            result = QueryResult.from_dict(client.post("/query", body))
        except ToolError as exc:
            raise ToolError(f"executing query in 1C: {exc}") from exc
        return text_result(format_query_result(result))

    return handler


def _escape(text: str) -> str:
    return text.replace("|", "\\|")


def format_query_result(result: QueryResult) -> str:
    """Render a query result as a markdown table."""
    parts = [f"## Результат запроса ({result.total} записей)\n\n"]

    if not result.columns or not result.rows:
        parts.append("Нет данных.\n")
        return "".join(parts)

    parts.append("| " + " | ".join(_escape(column) for column in result.columns) + " |\n")
    parts.append("|" + "---|" * len(result.columns) + "\n")
    parts.extend("| " + " | ".join(format_cell(cell) for cell in row) + " |\n" for row in result.rows)

    if result.truncated:
        parts.append(
            "\n> Результат усечён. Показаны первые записи. "
            "Используйте параметр `limit` для увеличения.\n"
        )
    return "".join(parts)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 2**63:
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _sprint(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, Mapping):
        items = " ".join(f"{key}:{_sprint(value[key])}" for key in sorted(value, key=str))
        return f"map[{items}]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_sprint(item) for item in value) + "]"
    return str(value)


def format_cell(value: Any) -> str:
    """Turn a decoded JSON cell into table text, escaping pipe characters."""
    if value is None:
        return ""
    if isinstance(value, str):
        text = value
    else:
        text = _sprint(value)
    return _escape(text)