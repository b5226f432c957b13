"""questionary-backed prompts: select/search loop, checkbox defaults, dates, text entry."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

import click
import pytest
import questionary
from questionary import Separator

from jiracon.exceptions import NoAvailableValuesError, PromptCancelledError
from jiracon.input.fields import FieldValueResolver, coerce_number, validate_number
from jiracon.input.prompts import QuestionaryPrompts, validate_date


@dataclass
class Row:
    title: str
    value: Any
    checked: bool


@dataclass
class Asked:
    kind: str
    message: str
    kwargs: dict = field(default_factory=dict)

    @property
    def rows(self) -> list[Row]:
        rows = []
        for choice in self.kwargs.get("choices", []):
            if isinstance(choice, Separator):
                continue
            title = choice.title
            if isinstance(title, list):
                title = "".join(text for _style, text in title)
            rows.append(Row(title, choice.value, bool(choice.checked)))
        return rows

    def titles(self) -> list[str]:
        return [row.title for row in self.rows]


class _Question:
    def __init__(self, asked: Asked, answer: Any):
        self._asked = asked
        self._answer = answer

    async def unsafe_ask_async(self):
        if isinstance(self._answer, BaseException):
            raise self._answer
        if callable(self._answer):
            return self._answer(self._asked)
        return self._answer


class ScriptedQuestionary:
    """Replaces questionary's question builders with scripted answers.

    A scripted answer is a value, an exception instance, or a callable
    that receives the ``Asked`` record (rows, kwargs) and returns the answer.
    """

    def __init__(self):
        self.asked: list[Asked] = []
        self._answers: list = []

    def script(self, *answers) -> "ScriptedQuestionary":
        self._answers.extend(answers)
        return self

    def builder(self, kind: str):
        def build(message, **kwargs):
            asked = Asked(kind, message, kwargs)
            self.asked.append(asked)
            if not self._answers:
                raise AssertionError(f"No scripted answer left for {kind}({message!r})")
            return _Question(asked, self._answers.pop(0))
        return build

    def of_kind(self, kind: str) -> list[Asked]:
        return [asked for asked in self.asked if asked.kind == kind]


@pytest.fixture
def scripted(monkeypatch):
    fake = ScriptedQuestionary()
    for kind in ("select", "checkbox", "text", "confirm"):
        monkeypatch.setattr(questionary, kind, fake.builder(kind))
    return fake


@pytest.fixture
def prompts():
    return QuestionaryPrompts(page_size=10, score_cutoff=90)


def tick(*titles):
    return lambda asked: [row.value for row in asked.rows if row.title in titles]


def choose(title):
    return lambda asked: next(row.value for row in asked.rows if row.title == title)


def search():
    return lambda asked: [row.value for row in asked.rows if row.checked or row.title.startswith("Search…")]


def accept(asked: Asked):
    return asked.kwargs.get("default", "")


FRUITS = [{"name": name} for name in (
    "apple", "banana", "cherry", "date", "elderberry", "fig",
    "grape", "honeydew", "kiwi", "lemon", "mango", "nectarine",
)]


# ── Multiple selection with a carried-over default ────────────────────────────

@pytest.mark.asyncio
async def test_carried_over_value_is_ticked_and_can_be_unticked(fake_gateway, scripted, prompts):
    tags = {
        "name": "Tags",
        "operations": ["set"],
        "schema": {"type": "array", "items": "string"},
        "allowedValues": [{"value": "a"}, {"value": "b"}],
    }
    scripted.script(tick("b"))
    resolver = FieldValueResolver(fake_gateway, prompts)

    value = await resolver.resolve(tags, default=["a"])

    rows = scripted.of_kind("checkbox")[0].rows
    assert [(row.title, row.checked) for row in rows] == [("a", True), ("b", False)]
    assert value == ["b"]


@pytest.mark.asyncio
async def test_default_matching_no_item_is_listed_ticked(scripted, prompts):
    scripted.script(tick())

    picked = await prompts.select_item([{"value": "a"}], "Tags", multiple=True, default=["gone"])

    rows = scripted.of_kind("checkbox")[0].rows
    assert [(row.title, row.checked) for row in rows] == [("gone", True), ("a", False)]
    assert picked == []


@pytest.mark.asyncio
async def test_labels_suggestions_keep_titles_after_scalar_default(fake_gateway, scripted, prompts):
    labels = {
        "name": "Labels",
        "operations": ["add", "set", "remove"],
        "schema": {"type": "array", "items": "string", "system": "labels"},
        "autoCompleteUrl": "https://jira.example.com/rest/api/1.0/labels/suggest?query=",
    }
    fake_gateway.routes[("GET", "/rest/api/1.0/labels/suggest")] = {
        "suggestions": [{"label": "backend"}, {"label": "ui"}],
    }
    scripted.script(tick("urgent", "ui"))
    resolver = FieldValueResolver(fake_gateway, prompts)

    value = await resolver.resolve(labels, default=["urgent"])

    asked = scripted.of_kind("checkbox")[0]
    assert asked.titles() == ["urgent", "backend", "ui", "Search…"]
    assert [row.checked for row in asked.rows][:3] == [True, False, False]
    assert value == ["urgent", "ui"]


@pytest.mark.asyncio
async def test_selection_hidden_by_search_is_kept(scripted, prompts):
    scripted.script(
        tick("apple", "Search…"),
        "mango",
        lambda asked: [row.value for row in asked.rows if row.checked or row.title == "mango"],
    )

    picked = await prompts.select_item(FRUITS, "Fruit", multiple=True)

    first, second = scripted.of_kind("checkbox")
    assert "Search…" in first.titles()
    assert "apple" not in second.titles()
    assert "Search… (current: mango)" in second.titles()
    assert sorted(item["name"] for item in picked) == ["apple", "mango"]


@pytest.mark.asyncio
async def test_at_least_one_item_required(scripted, prompts):
    verdicts = []

    def answer(asked: Asked):
        validate = asked.kwargs["validate"]
        verdicts.extend([validate([]), validate([0])])
        return [0]

    scripted.script(answer)

    picked = await prompts.select_item([{"name": "High"}, {"name": "Low"}], "Priority", multiple=True, allow_empty=False)

    assert verdicts == ["Select at least one item", True]
    assert picked == [{"name": "High"}]


@pytest.mark.asyncio
async def test_empty_lists(scripted, prompts):
    assert await prompts.select_item([], "Versions", multiple=True) == []
    with pytest.raises(NoAvailableValuesError):
        await prompts.select_item([], "Versions", multiple=True, allow_empty=False)
    with pytest.raises(NoAvailableValuesError):
        await prompts.select_item([], "Version")
    assert scripted.asked == []


# ── Single selection ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_default_leads_the_first_render_only(scripted, prompts):
    queries = []

    async def source(query):
        queries.append(query)
        return [{"name": "Low"}, {"name": "High"}]

    scripted.script(choose("Search…"), "", choose("High"))

    picked = await prompts.select_item(source, "Priority", default={"name": "High"})

    first, second = scripted.of_kind("select")
    assert first.titles() == ["High", "Low", "Search…"]
    assert second.titles() == ["Low", "High", "Search…"]
    assert queries == ["", ""]
    assert picked == {"name": "High"}


@pytest.mark.asyncio
async def test_search_refilters_long_static_lists(scripted, prompts):
    scripted.script(choose("Search…"), "kiwi", choose("kiwi"))

    picked = await prompts.select_item(FRUITS, "Fruit")

    first, second = scripted.of_kind("select")
    assert len(first.rows) == len(FRUITS) + 1
    assert second.titles() == ["kiwi", "Search… (current: kiwi)"]
    assert scripted.of_kind("text")[0].kwargs["default"] == ""
    assert picked == {"name": "kiwi"}


@pytest.mark.asyncio
async def test_short_static_list_has_no_search_entry(scripted, prompts):
    scripted.script(choose("b"))
    assert await prompts.select_item(["a", "b"], "Letter") == "b"
    assert scripted.of_kind("select")[0].titles() == ["a", "b"]


@pytest.mark.asyncio
async def test_summary_keys_render_after_title(scripted, prompts):
    scripted.script(choose("DEV-1 1001"))
    issues = [{"key": "DEV-1", "id": "1001"}]
    assert await prompts.select_item(issues, "Issue", ["key"], ["id"]) == issues[0]


# ── Scalars ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_select_date_defaults_to_today_and_normalises(scripted, prompts):
    scripted.script(" 2024-3-1 ")

    answer = await prompts.select_date("Start Date")

    asked = scripted.of_kind("text")[0]
    assert asked.kwargs["default"] == date.today().strftime("%Y-%m-%d")
    assert asked.kwargs["validate"] is validate_date
    assert answer == "2024-03-01"


@pytest.mark.asyncio
async def test_enter_text_converts_answer(scripted, prompts):
    scripted.script("5")

    value = await prompts.enter_text("Story Points", 3, validate=validate_number, convert=coerce_number)

    asked = scripted.of_kind("text")[0]
    assert asked.kwargs["default"] == "3"
    assert asked.kwargs["validate"] is validate_number
    assert value == 5


@pytest.mark.asyncio
async def test_enter_strings_title_cases_keys(scripted, prompts):
    scripted.script("1.2", accept)

    answers = await prompts.enter_strings(["name", "description"], ["1.1"])

    assert [asked.message for asked in scripted.asked] == ["Name", "Description"]
    assert answers == {"name": "1.2", "description": ""}


@pytest.mark.asyncio
async def test_ctrl_c_cancels(scripted, prompts):
    scripted.script(KeyboardInterrupt())
    with pytest.raises(PromptCancelledError):
        await prompts.confirm("Do you want to continue")


@pytest.mark.asyncio
async def test_edit_keeps_content_when_editor_is_closed_unsaved(monkeypatch, prompts):
    answers: list[Optional[str]] = [None, "edited: true\n"]
    monkeypatch.setattr(click, "edit", lambda content, **kwargs: answers.pop(0))

    assert await prompts.edit("config.yml", "a: 1\n") == "a: 1\n"
    assert await prompts.edit("config.yml", "a: 1\n") == "edited: true\n"
