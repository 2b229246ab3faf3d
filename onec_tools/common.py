"""Shared building blocks for the 1C tool handlers: tool descriptions, results and the HTTP client."""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from urllib import error, parse, request


class ToolError(Exception):
    """Raised when a tool call cannot be completed."""


@dataclass(frozen=True)
class Tool:
    """Description of a tool exposed to clients."""

    name: str
    title: str
    description: str
    input_schema: Mapping[str, Any] = field(default_factory=lambda: {"type": "object"})
    read_only: bool = False


@dataclass(frozen=True)
class ToolResult:
    """Text produced by a tool call."""

    text: str


Handler = Callable[..., ToolResult]


def text_result(text: str) -> ToolResult:
    """Wrap a text into a tool result."""
    return ToolResult(text=text)


def clamp_limit(value: int, default: int, maximum: int) -> int:
    """Normalise a user-supplied limit: non-positive gives the default, large values are capped."""
    if value <= 0:
        return default
    if value > maximum:
        return maximum
    return value


class OneCClient:
    """JSON client for the HTTP service published by the 1C infobase."""

    def __init__(
        self,
        base_url: str,
        user: str = "",
        password: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user = user
        self.password = password or ""
        self.timeout = timeout

    def get(self, path: str) -> Any:
        """Send a GET request and return the decoded JSON response."""
        return self._request("GET", path, None)

    def post(self, path: str, body: Any) -> Any:
        """Send a JSON body with POST and return the decoded JSON response."""
        return self._request("POST", path, body)

    def _request(self, method: str, path: str, body: Any) -> Any:
        url = self.base_url + parse.quote(path, safe="/")
        headers = {"Accept": "application/json"}
        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json; charset=utf-8"
        if self.user:
            credentials = f"{self.user}:{self.password}".encode("utf-8")
            headers["Authorization"] = "Basic " + base64.b64encode(credentials).decode("ascii")

        req = request.Request(url, data=data, headers=headers, method=method)
        try:
            with request.urlopen(req, timeout=self.timeout) as response:
                payload = response.read()
        except error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace").strip()
            raise ToolError(f"1C returned HTTP {exc.code}: {detail}") from exc
        except (error.URLError, OSError) as exc:
            raise ToolError(f"{method} {path}: {exc}") from exc

        try:
            return json.loads(payload.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ToolError(f"decoding 1C response for {path}: {exc}") from exc


def _arguments(arguments: Any, *, required: bool = True) -> dict[str, Any]:
    """Turn tool call arguments (mapping or raw JSON) into a dictionary."""
    if arguments is None:
        if required:
            raise ToolError("parsing input: arguments are missing")
        return {}
    if isinstance(arguments, (bytes, bytearray)):
        arguments = arguments.decode("utf-8")
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as exc:
            raise ToolError(f"parsing input: {exc}") from exc
    if not isinstance(arguments, Mapping):
        raise ToolError("parsing input: arguments must be a JSON object")
    return dict(arguments)


def _string_arg(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ToolError(f"parsing input: {key!r} must be a string")
    return value


def _int_arg(args: Mapping[str, Any], key: str) -> int:
    value = args.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ToolError(f"parsing input: {key!r} must be an integer")
    return value


def _mapping(data: Any) -> Mapping[str, Any]:
    """Return a decoded JSON object, treating null as empty."""
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ToolError("decoding 1C response: expected a JSON object")
    return data


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)