"""The get_metadata_tree tool: objects of the configuration grouped by category."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from onec_tools.common import (
    Handler,
    Tool,
    ToolError,
    ToolResult,
    _arguments,
    _mapping,
    text_result,
)

# JSON key from 1C and its display title, in display order.
METADATA_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Справочники", "Справочники"),
    ("Документы", "Документы"),
    ("Перечисления", "Перечисления"),
    ("Обработки", "Обработки"),
    ("Отчеты", "Отчёты"),
    ("РегистрыСведений", "Регистры сведений"),
    ("РегистрыНакопления", "Регистры накопления"),
    ("РегистрыБухгалтерии", "Регистры бухгалтерии"),
    ("РегистрыРасчета", "Регистры расчёта"),
    ("ПланыСчетов", "Планы счетов"),
    ("ПланыВидовХарактеристик", "Планы видов характеристик"),
    ("ПланыВидовРасчета", "Планы видов расчёта"),
    ("ПланыОбмена", "Планы обмена"),
    ("БизнесПроцессы", "Бизнес-процессы"),
    ("Задачи", "Задачи"),
    ("ЖурналыДокументов", "Журналы документов"),
    ("Константы", "Константы"),
    ("ОбщиеМодули", "Общие модули"),
    ("ОбщиеФормы", "Общие формы"),
    ("ОбщиеКоманды", "Общие команды"),
    ("ОбщиеМакеты", "Общие макеты"),
    ("Роли", "Роли"),
    ("Подсистемы", "Подсистемы"),
    ("РегулярныеЗадания", "Регулярные задания"),
    ("ВебСервисы", "Веб-сервисы"),
    ("HTTPСервисы", "HTTP-сервисы"),
)

_KNOWN_KEYS = frozenset(key for key, _ in METADATA_CATEGORIES)

# Suffixes of auto-generated objects that only add noise to the listing.
NOISE_SUFFIXES = ("ПрисоединенныеФайлы", "ПрисоединённыеФайлы")


def metadata_tool() -> Tool:
    """Describe the get_metadata_tree tool."""
    return Tool(
        name="get_metadata_tree",
        title="Дерево метаданных конфигурации",
        description=(
            "Список всех объектов конфигурации 1С по категориям: справочники, документы, регистры, "
            "перечисления, обработки и т.д. "
            "Без фильтра: сводка (категории и количество), с filter: полный перечень объектов категории. "
            "Используй когда нужно узнать какие объекты есть в базе. "
            "Вызывай первым при работе с незнакомой конфигурацией. "
            "Имена объектов из результата используются в get_object_structure и в запросах."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "filter": {
                    "type": "string",
                    "description": (
                        "Категория метаданных для фильтрации: Справочники, Документы, Перечисления, "
                        "Обработки, Отчеты, РегистрыСведений, РегистрыНакопления, ОбщиеМодули и др. "
                        "Если не указан — возвращаются все категории."
                    ),
                }
            },
        },
        read_only=True,
    )


def is_noise(name: str) -> bool:
    """Tell whether an object name belongs to an auto-generated object."""
    return name.endswith(NOISE_SUFFIXES)


def filter_noise(tree: Mapping[str, list[str]]) -> dict[str, list[str]]:
    """Return the tree without auto-generated objects."""
    return {key: [name for name in items if not is_noise(name)] for key, items in tree.items()}


def _decode_tree(data: Any) -> dict[str, list[str]]:
    tree: dict[str, list[str]] = {}
    for key, items in _mapping(data).items():
        if items is None:
            tree[key] = []
        elif isinstance(items, list):
            tree[key] = [str(item) for item in items]
        else:
            raise ToolError(f"decoding 1C response: category {key!r} is not a list")
    return tree


def _requested_filter(arguments: Any) -> str:
    # Malformed arguments are ignored: the tool then simply returns the summary.
    try:
        args = _arguments(arguments, required=False)
    except ToolError:
        return ""
    value = args.get("filter")
    return value if isinstance(value, str) else ""


def new_metadata_handler(client) -> Handler:
    """Build a handler that fetches the metadata tree from 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        category = _requested_filter(arguments)
        try:
            tree = _decode_tree(client.get("/metadata"))
        except ToolError as exc:
            raise ToolError(f"fetching metadata from 1C: {exc}") from exc

        tree = filter_noise(tree)

        if category:
            filtered = {category: tree[category]} if category in tree else {}
            return text_result(format_metadata_tree(filtered))
        return text_result(format_metadata_summary(tree))

    return handler


def _section(title: str, items: list[str]) -> str:
    return f"## {title}\n" + "".join(f"- {name}\n" for name in items) + "\n"


def _unknown_keys(tree: Mapping[str, list[str]]) -> list[str]:
    return sorted(key for key, items in tree.items() if key not in _KNOWN_KEYS and items)


def format_metadata_tree(tree: Mapping[str, list[str]]) -> str:
    """Render the tree as markdown: known categories in fixed order, then unknown ones sorted."""
    parts = ["# Метаданные конфигурации 1С\n\n"]
    parts.extend(_section(title, tree[key]) for key, title in METADATA_CATEGORIES if tree.get(key))
    parts.extend(_section(key, tree[key]) for key in _unknown_keys(tree))
    return "".join(parts)


def _summary_line(title: str, count: int, key: str) -> str:
    return f"- **{title}** ({count}) — filter={json.dumps(key, ensure_ascii=False)}\n"


def format_metadata_summary(tree: Mapping[str, list[str]]) -> str:
    """Render category names with their object counts."""
    parts = [
        "# Метаданные конфигурации 1С (сводка)\n\n",
        "Для получения списка объектов вызови get_metadata_tree с параметром filter.\n\n",
    ]
    parts.extend(
        _summary_line(title, len(tree[key]), key) for key, title in METADATA_CATEGORIES if tree.get(key)
    )
    parts.extend(_summary_line(key, len(tree[key]), key) for key in _unknown_keys(tree))
    return "".join(parts)