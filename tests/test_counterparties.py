import pytest

from onec_tools.common import ToolError
from onec_tools.counterparties import (
    Counterparty,
    CreateCounterpartyResult,
    ReadCounterpartiesResult,
    create_counterparty_tool,
    format_counterparties_read_result,
    format_create_counterparty_result,
    new_create_counterparty_handler,
    new_read_counterparties_handler,
    read_counterparties_tool,
)


class FakeClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, path):
        self.calls.append(("GET", path, None))
        return self._reply()

    def post(self, path, body):
        self.calls.append(("POST", path, body))
        return self._reply()

    def _reply(self):
        if self.error is not None:
            raise self.error
        return self.response


READ_RESPONSE = {
    "counterparties": [
        {
            "ref": "ref-1",
            "code": "0001",
            "name": "ООО Ромашка",
            "inn": "7701000001",
            "kpp": "770101001",
            "counterparty_type": "ЮридическоеЛицо",
        }
    ],
    "total": 1,
    "truncated": False,
}

CREATE_RESPONSE = {
    "success": True,
    "counterparty": {
        "ref": "ref-1",
        "code": "0001",
        "name": "ООО Ромашка",
        "inn": "7701000001",
        "kpp": "770101001",
        "counterparty_type": "ЮридическоеЛицо",
    },
}


def test_read_counterparties_tool():
    tool = read_counterparties_tool()
    assert tool.name == "read_counterparties"
    assert tool.read_only is True


def test_create_counterparty_tool():
    tool = create_counterparty_tool()
    assert tool.name == "create_counterparty"
    assert tool.input_schema["required"] == ["name", "inn", "kpp", "counterparty_type"]


def test_read_counterparties_handler():
    client = FakeClient(READ_RESPONSE)
    handler = new_read_counterparties_handler(client)
    result = handler(
        '{"search":"Ромашка","limit":10,"inn":"7701000001","kpp":"770101001"}'
    )
    assert "ООО Ромашка" in result.text
    method, path, body = client.calls[0]
    assert (method, path) == ("POST", "/counterparties")
    assert body["search"] == "Ромашка"
    assert body["limit"] == 10
    assert body["inn"] == "7701000001"


def test_read_without_arguments_uses_default_limit():
    client = FakeClient(READ_RESPONSE)
    new_read_counterparties_handler(client)(None)
    assert client.calls[0][2]["limit"] == 50


def test_read_caps_limit_and_trims_fields():
    client = FakeClient(READ_RESPONSE)
    new_read_counterparties_handler(client)({"limit": 9000, "code": "  0001  "})
    body = client.calls[0][2]
    assert body["limit"] == 500
    assert body["code"] == "0001"


def test_read_rejects_bad_limit_type():
    handler = new_read_counterparties_handler(FakeClient(READ_RESPONSE))
    with pytest.raises(ToolError, match="parsing input"):
        handler({"limit": "many"})


def test_read_wraps_client_error():
    handler = new_read_counterparties_handler(FakeClient(error=ToolError("1C returned HTTP 500: x")))
    with pytest.raises(ToolError, match="reading counterparties from 1C"):
        handler({})


def test_create_counterparty_handler():
    client = FakeClient(CREATE_RESPONSE)
    handler = new_create_counterparty_handler(client)
    result = handler(
        {"name": "ООО Ромашка", "inn": "7701000001", "kpp": "770101001", "counterparty_type": "legal"}
    )
    assert "Контрагент создан" in result.text
    assert "- Type: ЮридическоеЛицо" in result.text
    assert client.calls[0][1] == "/counterparty"
    assert client.calls[0][2]["counterparty_type"] == "legal"


def test_create_requires_all_fields():
    client = FakeClient(CREATE_RESPONSE)
    handler = new_create_counterparty_handler(client)
    with pytest.raises(ToolError, match="required"):
        handler({"name": "ООО Ромашка", "inn": " ", "kpp": "770101001", "counterparty_type": "legal"})
    assert client.calls == []


def test_create_unsuccessful_result_raises():
    handler = new_create_counterparty_handler(FakeClient({"success": False}))
    with pytest.raises(ToolError, match="unsuccessful"):
        handler({"name": "A", "inn": "1", "kpp": "2", "counterparty_type": "legal"})


def test_format_read_empty():
    text = format_counterparties_read_result(ReadCounterpartiesResult())
    assert "Ничего не найдено." in text
    assert "| Ref |" not in text


def test_format_read_truncated():
    result = ReadCounterpartiesResult.from_dict({**READ_RESPONSE, "truncated": True})
    text = format_counterparties_read_result(result)
    assert "| ref-1 | 0001 | ООО Ромашка | 7701000001 | 770101001 | ЮридическоеЛицо |" in text
    assert "Увеличьте limit" in text


def test_format_create_without_type():
    result = CreateCounterpartyResult(success=True, counterparty=Counterparty(name="ООО Ромашка"))
    text = format_create_counterparty_result(result)
    assert "- Name: ООО Ромашка" in text
    assert "- Type:" not in text