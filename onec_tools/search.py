"""The search_code tool: searching module code in a local configuration dump."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from onec_tools.common import (
    Handler,
    Tool,
    ToolError,
    ToolResult,
    _arguments,
    _int_arg,
    _string_arg,
    clamp_limit,
    text_result,
)

DEFAULT_SEARCH_LIMIT = 50
MAX_SEARCH_LIMIT = 500


class SearchMode(Enum):
    """How the query text is matched against module code."""

    SMART = "smart"
    REGEX = "regex"
    EXACT = "exact"


@dataclass(frozen=True)
class Match:
    """A place in a module that matched the query."""

    module: str
    line: int
    context: str
    score: float = 0.0


@dataclass(frozen=True)
class MatchDisplay:
    """How a module name is shown, with an optional prefix."""

    prefix: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class SearchParams:
    """A search request passed to the code index."""

    query: str
    category: str = ""
    module: str = ""
    mode: SearchMode = SearchMode.SMART
    limit: int = DEFAULT_SEARCH_LIMIT


@runtime_checkable
class CodeIndex(Protocol):
    """An index of module code that can be searched."""

    def search(self, params: SearchParams) -> tuple[Sequence[Match], int]:
        """Return up to params.limit matches and the total number of matches."""

    def module_count(self) -> int:
        """Return the number of indexed modules."""


MatchDisplayFunc = Callable[[str], MatchDisplay]

_MODES = {
    "": SearchMode.SMART,
    "smart": SearchMode.SMART,
    "regex": SearchMode.REGEX,
    "exact": SearchMode.EXACT,
}

EMPTY_INDEX_MESSAGE = (
    "Индекс пуст: в директории --dump не найдено .bsl файлов. "
    "Проверьте путь к выгрузке конфигурации."
)


def search_code_tool() -> Tool:
    """Describe the search_code tool."""
    return Tool(
        name="search_code",
        title="Поиск по коду модулей",
        description=(
            "Полнотекстовый поиск по коду всех модулей конфигурации 1С. "
            "Поддерживает три режима: smart (полнотекстовый с ранжированием BM25, "
            "по умолчанию), regex (регулярные выражения), exact (точная подстрока). "
            "Фильтрация по типу метаданных (category) и типу модуля (module). "
            "BSL-синонимы: поиск по английским именам находит русские и наоборот "
            "(StrFind -> СтрНайти, Procedure -> Процедура). "
            "Работает по локальной выгрузке конфигурации (DumpConfigToFiles). "
            "Режим smart (по умолчанию) для поиска по смыслу, regex для точных паттернов. "
            "Фильтруй по category и module для сужения результатов."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        "Поисковый запрос. В режиме smart — слова для полнотекстового поиска. "
                        "В режиме regex — регулярное выражение. "
                        "В режиме exact — точная подстрока (регистронезависимо)."
                    ),
                },
                "limit": {
                    "type": "integer",
                    "description": "Максимальное количество результатов (по умолчанию 50, максимум 500)",
                },
                "category": {
                    "type": "string",
                    "description": (
                        "Фильтр по типу метаданных: Документ, Справочник, ОбщийМодуль, Обработка, Отчет, "
                        "РегистрСведений, РегистрНакопления и т.д. Значение чувствительно к регистру "
                        "(например, 'Документ', не 'документ')."
                    ),
                },
                "module": {
                    "type": "string",
                    "description": (
                        "Фильтр по типу модуля: МодульОбъекта, МодульМенеджера, МодульФормы, "
                        "МодульНабораЗаписей, МодульКоманды, Модуль. Значение чувствительно к регистру "
                        "(например, 'МодульОбъекта', не 'модульобъекта')."
                    ),
                },
                "mode": {
                    "type": "string",
                    "enum": ["smart", "regex", "exact"],
                    "description": (
                        "Режим поиска. smart — полнотекстовый с BM25-ранжированием и поддержкой "
                        "BSL-синонимов (по умолчанию). regex — регулярное выражение. exact — точная подстрока."
                    ),
                },
            },
            "required": ["query"],
        },
        read_only=True,
    )


def new_search_code_handler(index: CodeIndex) -> Handler:
    """Build a handler that searches module code in the given index."""

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        query = _string_arg(args, "query")
        limit = _int_arg(args, "limit")
        category = _string_arg(args, "category")
        module = _string_arg(args, "module")
        mode_name = _string_arg(args, "mode")
        if not query:
            raise ToolError("query is required")

        mode = _MODES.get(mode_name)
        if mode is None:
            quoted = json.dumps(mode_name, ensure_ascii=False)
            raise ToolError(f"unknown mode: {quoted} (allowed: smart, regex, exact)")

        params = SearchParams(
            query=query,
            category=category,
            module=module,
            mode=mode,
            limit=clamp_limit(limit, DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT),
        )
        try:
            matches, total = index.search(params)
        except (ToolError, ValueError) as exc:
            raise ToolError(f"search: {exc}") from exc

        if total == 0 and index.module_count() == 0:
            return text_result(EMPTY_INDEX_MESSAGE)
        return text_result(format_search_result(matches, total, query, mode, None))

    return handler


def format_search_result(
    matches: Sequence[Match],
    total: int,
    query: str,
    mode: SearchMode,
    display_fn: Optional[MatchDisplayFunc] = None,
) -> str:
    """Render search matches as markdown.

    display_fn may decorate module names; without it the module name is shown as is.
    """
    parts = [f'## Результаты поиска "{query}" ({total} совпадений)\n\n']

    if not matches:
        parts.append("Ничего не найдено.\n")
        return "".join(parts)

    for match in matches:
        display = display_fn(match.module) if display_fn else MatchDisplay("", match.module)
        name = f"{display.prefix}{display.display_name}"
        if mode is SearchMode.SMART and match.score > 0:
            parts.append(f"### {name} (строка {match.line}, score: {match.score:.3f})\n")
        else:
            parts.append(f"### {name} (строка {match.line})\n")
        parts.append(f"```bsl\n{match.context}\n```\n\n")

    if total > len(matches):
        parts.append(
            f"> Показано {len(matches)} из {total} совпадений. Уточните поиск или увеличьте limit.\n"
        )
    return "".join(parts)