# onec-tools

A toolkit for exposing a 1C:Enterprise infobase as a set of named tools.
Each tool has a description (`onec_tools.common.Tool`: name, title,
description, JSON input schema, read-only flag) and a handler that talks to
the 1C HTTP service and returns a `ToolResult` whose `text` is Markdown ready
to be shown to a reader.

The package uses only the standard library.

## Tools

Developer tools:

| Tool | Module | What it does |
|------|--------|--------------|
| `get_metadata_tree` | `onec_tools.metadata` | Without `filter`: categories with object counts. With `filter`: the objects of that category. Auto-generated `…ПрисоединенныеФайлы` objects are left out |
| `get_object_structure` | `onec_tools.object_structure` | Dimensions, resources, attributes and tabular parts of an object (`GET /object/<type>/<name>`) |
| `execute_query` | `onec_tools.query` | Runs a `ВЫБРАТЬ`/`SELECT` query with optional `parameters` (`POST /query`) and renders a table |
| `validate_query` | `onec_tools.validate_query` | Checks query syntax without running it (`POST /validate-query`) |
| `get_form_structure` | `onec_tools.form` | Elements, commands and event handlers of a managed form (`GET /form/<type>/<name>`) |
| `get_event_log` | `onec_tools.eventlog` | Reads the event log filtered by period, level and user (`POST /eventlog`) |
| `get_configuration_info` | `onec_tools.configuration_info` | Name, version, vendor, platform and run mode (`GET /configuration`) |
| `search_code` | `onec_tools.search` | Searches module code in a code index, in `smart`, `regex` or `exact` mode |

Business tools, available for the profiles `buh_3_0` and `generic`:

| Tool | Module | What it does |
|------|--------|--------------|
| `read_counterparties` | `onec_tools.counterparties` | Lists counterparties or reads one by code, ref or INN/KPP (`POST /counterparties`) |
| `create_counterparty` | `onec_tools.counterparties` | Creates a counterparty from name, INN, KPP and type (`POST /counterparty`) |

Limits are clamped, not rejected: a missing or non-positive `limit` becomes
the tool's default and a value above the maximum becomes the maximum
(`clamp_limit` in `onec_tools.common`). The defaults and maximums are 100/1000
for `execute_query` and 50/500 for `get_event_log`, `read_counterparties` and
`search_code`.

## The client

`OneCClient(base_url, user="", password=None, timeout=30.0)` sends JSON
requests to the service. `get(path)` and `post(path, body)` return the decoded
JSON response. When `user` is set, requests carry HTTP Basic credentials. An
HTTP error status, a network failure or a response that is not JSON raises
`ToolError`.

## Building a server

`onec_tools.server.new_server(version, client, dump_index, options, form_dump_loader)`
returns a `Server` with the tools of the chosen toolset:

- `Toolset.DEVELOPER`: developer tools only;
- `Toolset.BUSINESS`: business tools only, and none at all when the profile
  is not supported (`is_business_tool_supported`);
- `Toolset.ALL` (the default): both.

`Options` holds `toolset` and `profile` (default `generic`).
`parse_toolset` accepts `developer`, `business`, `all` or an empty string
(meaning `all`), ignoring case and surrounding spaces; anything else raises
`ValueError`.

```python
from onec_tools.common import OneCClient
from onec_tools.server import Options, new_server, parse_toolset

client = OneCClient("http://localhost/hs/mcp-1c")
options = Options(toolset=parse_toolset("developer"), profile="generic")

server = new_server("0.1.0", client, None, options, None)

for tool in server.list_tools():
    print(tool.name)

result = server.call_tool("get_configuration_info", {})
print(result.text)
```

`Server.list_tools()` returns tools in registration order;
`Server.call_tool(name, arguments)` runs a handler and raises `ToolError` for
an unknown name. Arguments may be a mapping, a JSON string or JSON bytes.

### Code search

`search_code` is registered only when a code index is passed as
`dump_index`. Any object with these two methods will do (the `CodeIndex`
protocol in `onec_tools.search`):

```python
from onec_tools.search import Match, SearchParams

class MemoryIndex:
    def __init__(self, modules):
        self.modules = modules  # module name -> source text

    def search(self, params: SearchParams):
        found = [
            Match(module=name, line=number, context=line)
            for name, text in self.modules.items()
            for number, line in enumerate(text.splitlines(), start=1)
            if params.query.lower() in line.lower()
        ]
        return found[: params.limit], len(found)

    def module_count(self):
        return len(self.modules)
```

When the index holds no modules and nothing is found, the tool says that the
index is empty. `format_search_result` shows scores only in `smart` mode, and
accepts an optional function that turns a module name into a `MatchDisplay`
(prefix and display name).

### Forms from a configuration dump

`form_dump_loader` is a callable `(object_type, object_name, form_name)`
returning a `FormStructure` or `None`; an empty `form_name` asks for the first
form. When given, the loaded form fills the sections the HTTP answer left
empty (`enrich_form_from_dump`), or replaces the answer when the HTTP request
fails. A loader raising `ToolError`, `OSError`, `ValueError` or `LookupError`
counts as a failed load.

## Errors

Handlers raise `onec_tools.common.ToolError` when required input is missing,
when a query does not start with `ВЫБРАТЬ`/`SELECT`, when an unknown search
mode is given, when creating a counterparty reports no success, or when the
1C service answers with an error. `get_metadata_tree` ignores malformed
arguments and returns the summary.

## Formatting on its own

Every result type has `from_dict` and a formatter that works without a server:

```python
from onec_tools.validate_query import ValidateQueryResult, format_validate_result

result = ValidateQueryResult.from_dict({"valid": False, "errors": ["Ожидается ключевое слово ИЗ"]})
print(format_validate_result(result))
```

## What the package does not do

- It has no command-line program and no protocol transport: `Server` is an
  in-process registry of tools, to be wired to whatever transport you use.
- It does not build a code index from a configuration dump; `search_code`
  needs an index supplied by the caller.
- It does not read `Form.xml` files itself; form data from a dump comes only
  through a supplied `form_dump_loader`.
- It has no built-in reference of BSL language functions.