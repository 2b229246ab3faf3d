"""The get_form_structure tool: elements, commands and event handlers of a managed form."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

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
class FormElement:
    """An interface element of a form."""

    name: str = ""
    type: str = ""
    title: str = ""
    data_path: str = ""


@dataclass
class FormCommand:
    """A form command and the action it runs."""

    name: str = ""
    action: str = ""


@dataclass
class FormHandler:
    """A form event and the procedure that handles it."""

    event: str = ""
    handler: str = ""


@dataclass
class FormStructure:
    """Composition of a managed form."""

    name: str = ""
    title: str = ""
    elements: list[FormElement] = field(default_factory=list)
    commands: list[FormCommand] = field(default_factory=list)
    handlers: list[FormHandler] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "FormStructure":
        data = _mapping(data)
        return cls(
            name=_text(data, "name"),
            title=_text(data, "title"),
            elements=[_element(item) for item in data.get("elements") or []],
            commands=[_command(item) for item in data.get("commands") or []],
            handlers=[_event_handler(item) for item in data.get("handlers") or []],
        )


def _element(data: Any) -> FormElement:
    data = _mapping(data)
    return FormElement(
        name=_text(data, "name"),
        type=_text(data, "type"),
        title=_text(data, "title"),
        data_path=_text(data, "dataPath"),
    )


def _command(data: Any) -> FormCommand:
    data = _mapping(data)
    return FormCommand(name=_text(data, "name"), action=_text(data, "action"))


def _event_handler(data: Any) -> FormHandler:
    data = _mapping(data)
    return FormHandler(event=_text(data, "event"), handler=_text(data, "handler"))


# Loads a form from a configuration dump: (object_type, object_name, form_name) -> form.
# An empty form_name means "the first form"; failures are reported by raising.
DumpLoader = Callable[[str, str, str], Optional[FormStructure]]

_LOADER_ERRORS = (ToolError, OSError, ValueError, LookupError)


def form_structure_tool() -> Tool:
    """Describe the get_form_structure tool."""
    return Tool(
        name="get_form_structure",
        title="Структура формы объекта",
        description=(
            "Получить структуру управляемой формы объекта 1С: элементы интерфейса, команды, "
            "кнопки и обработчики событий. "
            "Используй когда нужно понять как выглядит форма документа, справочника или обработки."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "object_type": {
                    "type": "string",
                    "description": "Тип объекта: Document, Catalog, DataProcessor, Report и т.д.",
                },
                "object_name": {
                    "type": "string",
                    "description": "Имя объекта метаданных",
                },
                "form_name": {
                    "type": "string",
                    "description": "Имя формы (если не указано — возвращается первая найденная форма)",
                },
            },
            "required": ["object_type", "object_name"],
        },
        read_only=True,
    )


def new_form_structure_handler(client, dump_loader: Optional[DumpLoader] = None) -> Handler:
    """Build a handler that fetches a form structure from 1C.

    When a dump loader is given, the form read from the configuration dump fills
    the sections the HTTP service left empty, or replaces the answer entirely
    when the HTTP request fails.
    """

    def handler(arguments: Any = None) -> ToolResult:
        args = _arguments(arguments)
        object_type = _string_arg(args, "object_type")
        object_name = _string_arg(args, "object_name")
        form_name = _string_arg(args, "form_name")
        if not object_type or not object_name:
            raise ToolError("object_type and object_name are required")

        form: Optional[FormStructure] = None
        http_error: Optional[ToolError] = None
        try:
            form = FormStructure.from_dict(client.get(f"/form/{object_type}/{object_name}"))
        except ToolError as exc:
            http_error = exc

        if dump_loader is not None:
            dump_form: Optional[FormStructure] = None
            dump_error: Optional[BaseException] = None
            try:
                dump_form = dump_loader(object_type, object_name, form_name)
            except _LOADER_ERRORS as exc:
                dump_error = exc
            if dump_form is not None:
                if http_error is not None or form is None:
                    form = dump_form
                else:
                    form = enrich_form_from_dump(form, dump_form)
            elif http_error is not None:
                reason = dump_error or f"no forms found in dump for {object_type}.{object_name}"
                raise ToolError(
                    f"fetching form structure from 1C: {http_error} (dump fallback: {reason})"
                ) from http_error
        elif http_error is not None:
            raise ToolError(f"fetching form structure from 1C: {http_error}") from http_error

        return text_result(format_form_structure(form))

    return handler


def enrich_form_from_dump(form: FormStructure, dump_form: FormStructure) -> FormStructure:
    """Return the form with its empty sections and title taken from the dump."""
    return replace(
        form,
        elements=form.elements or list(dump_form.elements),
        commands=form.commands or list(dump_form.commands),
        handlers=form.handlers or list(dump_form.handlers),
        title=form.title or dump_form.title,
    )


def escape_pipe(text: str) -> str:
    """Escape pipe characters so they do not break markdown tables."""
    return text.replace("|", "\\|")


def format_form_structure(form: FormStructure) -> str:
    """Render a form structure as markdown."""
    parts = [f"# Форма: {form.name}\n"]
    if form.title:
        parts.append(f"**Заголовок:** {form.title}\n")
    parts.append("\n")

    if form.elements:
        parts.append("## Элементы формы\n\n")
        parts.append("| Имя | Тип | Заголовок | Путь к данным |\n")
        parts.append("|-----|-----|-----------|---------------|\n")
        parts.extend(
            "| "
            + " | ".join(escape_pipe(value) for value in (e.name, e.type, e.title, e.data_path))
            + " |\n"
            for e in form.elements
        )
        parts.append("\n")

    if form.commands:
        parts.append("## Команды формы\n\n")
        parts.extend(f"- **{c.name}** → {c.action}\n" for c in form.commands)
        parts.append("\n")

    if form.handlers:
        parts.append("## Обработчики событий\n\n")
        parts.extend(f"- **{h.event}** → {h.handler}()\n" for h in form.handlers)
        parts.append("\n")

    return "".join(parts)