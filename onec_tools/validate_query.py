"""The validate_query tool: syntax check of a 1C query without running it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from onec_tools.common import (
    Handler,
    Tool,
    ToolError,
    ToolResult,
    _arguments,
    _mapping,
    _string_arg,
    text_result,
)


@dataclass
class ValidateQueryResult:
    """Outcome of a query syntax check."""

    valid: bool = False
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ValidateQueryResult":
        data = _mapping(data)
        return cls(
            valid=bool(data.get("valid")),
            errors=[str(message) for message in data.get("errors") or []],
        )


def validate_query_tool() -> Tool:
    """Describe the validate_query tool."""
    return Tool(
        name="validate_query",
        title="Проверка синтаксиса запроса",
        description=(
            "Проверить синтаксис запроса 1С без выполнения, найдёт ошибки в ВЫБРАТЬ/SELECT. "
            "Используй перед execute_query чтобы валидировать запрос. "
            "Всегда вызывай перед execute_query для проверки синтаксиса."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Текст запроса на языке запросов 1С для проверки",
                }
            },
            "required": ["query"],
        },
        read_only=True,
    )


def new_validate_query_handler(client) -> Handler:
    """Build a handler that asks 1C to check a query's syntax."""

    def handler(arguments: Any = None) -> ToolResult:
        query = _string_arg(_arguments(arguments), "query")
        if not query:
            raise ToolError("query is required")
        try:
            result = ValidateQueryResult.from_dict(client.post("/validate-query", {"query": query}))
        except ToolError as exc:
            raise ToolError(f"validating query in 1C: {exc}") from exc
        return text_result(format_validate_result(result))

    return handler


def format_validate_result(result: ValidateQueryResult) -> str:
    """Render the outcome of a syntax check as markdown."""
    header = "## Результат проверки\n\n"
    if result.valid:
        return header + "✅ Запрос корректен.\n"
    lines = "".join(f"- {message}\n" for message in result.errors)
    return header + "❌ Запрос содержит ошибки:\n\n" + lines