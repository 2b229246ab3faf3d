"""The get_configuration_info tool: general information about the 1C configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from onec_tools.common import (
    Handler,
    Tool,
    ToolError,
    ToolResult,
    _mapping,
    _text,
    text_result,
)

_MODE_TITLES = {
    "file": "Файловый",
    "server": "Клиент-серверный",
}


@dataclass
class ConfigurationInfo:
    """General information about a configuration."""

    name: str = ""
    version: str = ""
    vendor: str = ""
    platform_version: str = ""
    mode: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ConfigurationInfo":
        data = _mapping(data)
        return cls(
            name=_text(data, "name"),
            version=_text(data, "version"),
            vendor=_text(data, "vendor"),
            platform_version=_text(data, "platform_version"),
            mode=_text(data, "mode"),
        )


def configuration_info_tool() -> Tool:
    """Describe the get_configuration_info tool."""
    return Tool(
        name="get_configuration_info",
        title="Информация о конфигурации",
        description=(
            "Получить общую информацию о базе 1С: название конфигурации, версия, поставщик, "
            "платформа, режим работы. "
            "Используй первым делом чтобы понять с какой конфигурацией работаешь."
        ),
        input_schema={"type": "object"},
        read_only=True,
    )


def new_configuration_info_handler(client) -> Handler:
    """Build a handler that fetches configuration info from 1C."""

    def handler(arguments: Any = None) -> ToolResult:
        try:
            info = ConfigurationInfo.from_dict(client.get("/configuration"))
        except ToolError as exc:
            raise ToolError(f"fetching configuration info from 1C: {exc}") from exc
        return text_result(format_configuration_info(info))

    return handler


def format_configuration_info(info: ConfigurationInfo) -> str:
    """Render configuration info as a markdown table, skipping empty values."""
    lines = [
        "# Информация о конфигурации 1С",
        "",
        "| Параметр | Значение |",
        "|----------|----------|",
    ]
    rows = [
        ("Конфигурация", info.name),
        ("Версия", info.version),
        ("Поставщик", info.vendor),
        ("Платформа", info.platform_version),
        ("Режим работы", _MODE_TITLES.get(info.mode, info.mode)),
    ]
    lines.extend(f"| {key} | {value} |" for key, value in rows if value)
    return "\n".join(lines) + "\n"