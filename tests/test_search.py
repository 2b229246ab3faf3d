import pytest

from onec_tools.common import ToolError
from onec_tools.search import (
    Match,
    MatchDisplay,
    SearchMode,
    SearchParams,
    format_search_result,
    new_search_code_handler,
    search_code_tool,
)


class FakeIndex:
    def __init__(self, matches=(), total=None, modules=1, error=None):
        self.matches = list(matches)
        self.total = len(self.matches) if total is None else total
        self.modules = modules
        self.error = error
        self.params = []

    def search(self, params):
        self.params.append(params)
        if self.error is not None:
            raise self.error
        return self.matches, self.total

    def module_count(self):
        return self.modules


def test_search_code_tool_schema():
    tool = search_code_tool()
    assert tool.name == "search_code"
    assert tool.description
    props = tool.input_schema["properties"]
    for name in ["query", "limit", "category", "module", "mode"]:
        assert name in props
    assert props["mode"]["enum"] == ["smart", "regex", "exact"]


def test_format_search_result():
    matches = [
        Match("Справочник.Контрагенты.МодульОбъекта", 42,
              "Процедура ПередЗаписью(Отказ)\n    // проверка заполнения\nКонецПроцедуры", 0.847),
        Match("Документ.РеализацияТоваров.МодульОбъекта", 15,
              "Функция ПолучитьКонтрагента()\n    Возврат Контрагент;\nКонецФункции", 0.512),
    ]
    text = format_search_result(matches, 2, "Контрагент", SearchMode.SMART, None)
    for want in [
        "Результаты поиска", "Контрагент", "2 совпадений",
        "Справочник.Контрагенты.МодульОбъекта", "строка 42", "score: 0.847", "```bsl",
        "ПередЗаписью", "Документ.РеализацияТоваров.МодульОбъекта", "строка 15",
        "score: 0.512", "ПолучитьКонтрагента",
    ]:
        assert want in text


def test_format_search_result_exact_mode_has_no_score():
    text = format_search_result([Match("Модуль.Тест", 1, "Тест")], 1, "Тест", SearchMode.EXACT)
    assert "score:" not in text
    assert "### Модуль.Тест (строка 1)\n```bsl\nТест\n```\n\n" in text


def test_format_search_result_empty():
    text = format_search_result([], 0, "НесуществующаяФункция", SearchMode.SMART)
    assert "Ничего не найдено" in text
    assert "0 совпадений" in text


def test_format_search_result_truncated():
    text = format_search_result([Match("Модуль.Тест", 1, "Тест")], 150, "Тест", SearchMode.SMART)
    assert "Показано 1 из 150 совпадений" in text
    assert "увеличьте limit" in text


def test_format_search_result_display_fn():
    text = format_search_result(
        [Match("Документ.А.МодульОбъекта", 3, "x")], 1, "x", SearchMode.EXACT,
        lambda name: MatchDisplay("[Расш] ", name.upper()),
    )
    assert "### [Расш] ДОКУМЕНТ.А.МОДУЛЬОБЪЕКТА (строка 3)" in text


def test_handler_returns_matches():
    index = FakeIndex([Match("Справочник.Номенклатура.МодульОбъекта", 3, "Процедура ОбновитьЦены()", 1.2)])
    text = new_search_code_handler(index)({"query": "ОбновитьЦены"}).text
    assert "Справочник.Номенклатура.МодульОбъекта" in text
    assert "ОбновитьЦены" in text
    assert index.params == [SearchParams(query="ОбновитьЦены", mode=SearchMode.SMART, limit=50)]


def test_handler_passes_filters():
    index = FakeIndex([Match("Справочник.Тест.МодульОбъекта", 1, "Процедура ОбщаяЛогика()")])
    text = new_search_code_handler(index)(
        {"query": "ОбщаяЛогика", "category": "Справочник", "mode": "exact"}
    ).text
    assert "1 совпадений" in text
    assert "Справочник" in text
    params = index.params[0]
    assert params.category == "Справочник"
    assert params.mode is SearchMode.EXACT


@pytest.mark.parametrize("limit, expected", [(0, 50), (-5, 50), (10, 10), (10000, 500)])
def test_handler_clamps_limit(limit, expected):
    index = FakeIndex()
    new_search_code_handler(index)({"query": "x", "limit": limit})
    assert index.params[0].limit == expected


def test_handler_regex_mode():
    index = FakeIndex()
    new_search_code_handler(index)({"query": "Про.*", "mode": "regex"})
    assert index.params[0].mode is SearchMode.REGEX


def test_handler_unknown_mode():
    with pytest.raises(ToolError, match="unknown mode"):
        new_search_code_handler(FakeIndex())({"query": "x", "mode": "fuzzy"})


def test_handler_requires_query():
    with pytest.raises(ToolError, match="query is required"):
        new_search_code_handler(FakeIndex())({"query": ""})


def test_handler_empty_index_message():
    text = new_search_code_handler(FakeIndex(modules=0))({"query": "x"}).text
    assert text.startswith("Индекс пуст")


def test_handler_no_results_with_modules():
    text = new_search_code_handler(FakeIndex(modules=3))({"query": "x"}).text
    assert "Ничего не найдено" in text


def test_handler_wraps_index_errors():
    index = FakeIndex(error=ValueError("bad pattern"))
    with pytest.raises(ToolError, match="search: bad pattern"):
        new_search_code_handler(index)({"query": "(", "mode": "regex"})