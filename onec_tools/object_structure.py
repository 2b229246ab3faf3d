"""The get_object_structure tool: attributes, dimensions, resources and tabular parts of an object."""

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
    _text,
    text_result,
)


@dataclass
class Attribute:
    """A field of a metadata object: attribute, dimension or resource."""

    name: str = ""
    synonym: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Attribute":
        data = _mapping(data)
        return cls(
            name=_text(data, "name"),
            synonym=_text(data, "synonym"),
            type=_text(data, "type"),
        )


@dataclass
class TabularPart:
    """A tabular part of a metadata object with its columns."""

    name: str = ""
    attributes: list[Attribute] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "TabularPart":
        data = _mapping(data)
        return cls(
            name=_text(data, "name"),
            attributes=_attributes(data, "attributes"),
        )


@dataclass
class ObjectStructure:
    """Composition of a metadata object."""

    name: str = ""
    synonym: str = ""
    attributes: list[Attribute] = field(default_factory=list)
    dimensions: list[Attribute] = field(default_factory=list)
    resources: list[Attribute] = field(default_factory=list)
    tabular_parts: list[TabularPart] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ObjectStructure":
        data = _mapping(data)
        return cls(
            name=_text(data, "name"),
            synonym=_text(data, "synonym"),
            attributes=_attributes(data, "attributes"),
            dimensions=_attributes(data, "dimensions"),
            resources=_attributes(data, "resources"),
            tabular_parts=[TabularPart.from_dict(item) for item in data.get("tabularParts") or []],
        )


def _attributes(data: Any, key: str) -> list[Attribute]:
    return [Attribute.from_dict(item) for item in data.get(key) or []]


def object_structure_tool() -> Tool:
    """Describe the get_object_structure tool."""
    return Tool(
        name="get_object_structure",
        title="Реквизиты и структура объекта",
        description=(
            "Получить реквизиты, табличные части, измерения, ресурсы и типы полей объекта метаданных 1С. "
            "Покажет из чего состоит справочник, документ, регистр: какие поля, колонки, свойства. "
            "Используй когда спрашивают про реквизиты, состав или структуру конкретного объекта "
            "(например «какие реквизиты у справочника Валюты»). "
            "Результат содержит точные имена реквизитов и табличных частей для запросов и кода. "
            "Вызывай перед написанием запросов или кода, работающего с объектом."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "object_type": {
                    "type": "string",
                    "description": (
                        "Тип объекта метаданных: Document, Catalog, InformationRegister, "
                        "AccumulationRegister, AccountingRegister"
                    ),
                },
                "object_name": {
                    "type": "string",
                    "description": "Имя объекта метаданных, например РеализацияТоваровУслуг",
                },
            },
            "required": ["object_type", "object_name"],
        },
        read_only=True,
    )


def new_object_structure_handler(client) -> Handler:
    """Build a handler that fetches an object's structure from 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        object_type = _string_arg(args, "object_type")
        object_name = _string_arg(args, "object_name")
        if not object_type or not object_name:
            raise ToolError("object_type and object_name are required")
        try:
            obj = ObjectStructure.from_dict(client.get(f"/object/{object_type}/{object_name}"))
        except ToolError as exc:
            raise ToolError(f"fetching object structure from 1C: {exc}") from exc
        return text_result(format_object_structure(obj))

    return handler


def _attribute_line(attr: Attribute) -> str:
    return f"- **{attr.name}** ({attr.synonym}) — {attr.type}\n"


def format_object_structure(obj: ObjectStructure) -> str:
    """Render an object's structure as markdown."""
    parts = [f"# {obj.name} ({obj.synonym})\n\n"]

    sections = [
        ("Измерения", obj.dimensions),
        ("Ресурсы", obj.resources),
        ("Реквизиты", obj.attributes),
    ]
    for title, items in sections:
        if not items:
            continue
        parts.append(f"## {title}\n")
        parts.extend(_attribute_line(attr) for attr in items)
        parts.append("\n")

    if obj.tabular_parts:
        parts.append("## Табличные части\n")
        for part in obj.tabular_parts:
            parts.append(f"\n### {part.name}\n")
            parts.extend(_attribute_line(attr) for attr in part.attributes)

    return "".join(parts)