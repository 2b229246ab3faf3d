"""Tools for reading and creating counterparties in the 1C catalog."""

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

DEFAULT_COUNTERPARTIES_LIMIT = 50
MAX_COUNTERPARTIES_LIMIT = 500


@dataclass
class Counterparty:
    """One counterparty catalog item."""

    ref: str = ""
    code: str = ""
    name: str = ""
    inn: str = ""
    kpp: str = ""
    counterparty_type: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Counterparty":
        data = _mapping(data)
        return cls(
            ref=_text(data, "ref"),
            code=_text(data, "code"),
            name=_text(data, "name"),
            inn=_text(data, "inn"),
            kpp=_text(data, "kpp"),
            counterparty_type=_text(data, "counterparty_type"),
        )


@dataclass
class ReadCounterpartiesResult:
    """Counterparties returned by a read request."""

    counterparties: list[Counterparty] = field(default_factory=list)
    total: int = 0
    truncated: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "ReadCounterpartiesResult":
        data = _mapping(data)
        return cls(
            counterparties=[Counterparty.from_dict(item) for item in data.get("counterparties") or []],
            total=int(data.get("total") or 0),
            truncated=bool(data.get("truncated")),
        )


@dataclass
class CreateCounterpartyResult:
    """Outcome of creating a counterparty."""

    success: bool = False
    counterparty: Counterparty = field(default_factory=Counterparty)

    @classmethod
    def from_dict(cls, data: Any) -> "CreateCounterpartyResult":
        data = _mapping(data)
        return cls(
            success=bool(data.get("success")),
            counterparty=Counterparty.from_dict(data.get("counterparty")),
        )


def read_counterparties_tool() -> Tool:
    """Describe the read_counterparties tool."""
    return Tool(
        name="read_counterparties",
        title="Чтение контрагентов",
        description=(
            "Получить контрагентов из справочника: список с поиском по наименованию/ИНН "
            "или один элемент по code/ref."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "search": {"type": "string", "description": "Поиск по наименованию или ИНН"},
                "limit": {
                    "type": "integer",
                    "description": "Максимум строк (по умолчанию 50, максимум 500)",
                },
                "code": {"type": "string", "description": "Код контрагента для точечного чтения"},
                "ref": {
                    "type": "string",
                    "description": "Ссылка контрагента (строковый UUID) для точечного чтения",
                },
                "inn": {"type": "string", "description": "ИНН для точечного чтения (в паре с kpp)"},
                "kpp": {"type": "string", "description": "КПП для точечного чтения (в паре с inn)"},
            },
        },
        read_only=True,
    )


def new_read_counterparties_handler(client) -> Handler:
    """Build a handler that reads counterparties from 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments, required=False)
        body = {
            "search": _string_arg(args, "search").strip(),
            "limit": clamp_limit(
                _int_arg(args, "limit"), DEFAULT_COUNTERPARTIES_LIMIT, MAX_COUNTERPARTIES_LIMIT
            ),
            "code": _string_arg(args, "code").strip(),
            "ref": _string_arg(args, "ref").strip(),
            "inn": _string_arg(args, "inn").strip(),
            "kpp": _string_arg(args, "kpp").strip(),
        }
        try:
            result = ReadCounterpartiesResult.from_dict(client.post("/counterparties", body))
        except ToolError as exc:
            raise ToolError(f"reading counterparties from 1C: {exc}") from exc
        return text_result(format_counterparties_read_result(result))

    return handler


def create_counterparty_tool() -> Tool:
    """Describe the create_counterparty tool."""
    return Tool(
        name="create_counterparty",
        title="Создание контрагента",
        description=(
            "Создать контрагента с обязательными полями: Наименование, ИНН, КПП, Вид контрагента. "
            "counterparty_type: legal|individual."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Наименование"},
                "inn": {"type": "string", "description": "ИНН"},
                "kpp": {"type": "string", "description": "КПП"},
                "counterparty_type": {"type": "string", "description": "Вид: legal или individual"},
            },
            "required": ["name", "inn", "kpp", "counterparty_type"],
        },
    )


def new_create_counterparty_handler(client) -> Handler:
    """Build a handler that creates a counterparty in 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        body = {
            key: _string_arg(args, key).strip()
            for key in ("name", "inn", "kpp", "counterparty_type")
        }
        if not all(body.values()):
            raise ToolError("name, inn, kpp, counterparty_type are required")
        try:
            result = CreateCounterpartyResult.from_dict(client.post("/counterparty", body))
        except ToolError as exc:
            raise ToolError(f"creating counterparty in 1C: {exc}") from exc
        if not result.success:
            raise ToolError("1C returned unsuccessful create result")
        return text_result(format_create_counterparty_result(result))

    return handler


def format_counterparties_read_result(result: ReadCounterpartiesResult) -> str:
    """Render read counterparties as a markdown table."""
    lines = ["# Контрагенты", ""]
    if not result.counterparties:
        lines.append("Ничего не найдено.")
        return "\n".join(lines) + "\n"

    lines.append("| Ref | Code | Name | INN | KPP | Type |")
    lines.append("|---|---|---|---|---|---|")
    lines.extend(
        f"| {cp.ref} | {cp.code} | {cp.name} | {cp.inn} | {cp.kpp} | {cp.counterparty_type} |"
        for cp in result.counterparties
    )
    if result.truncated:
        lines.append("")
        lines.append("> Показаны не все записи. Увеличьте limit.")
    return "\n".join(lines) + "\n"


def format_create_counterparty_result(result: CreateCounterpartyResult) -> str:
    """Render the created counterparty as a markdown list."""
    cp = result.counterparty
    lines = [
        "# Контрагент создан",
        "",
        f"- Ref: {cp.ref}",
        f"- Code: {cp.code}",
        f"- Name: {cp.name}",
        f"- INN: {cp.inn}",
        f"- KPP: {cp.kpp}",
    ]
    if cp.counterparty_type:
        lines.append(f"- Type: {cp.counterparty_type}")
    return "\n".join(lines) + "\n"