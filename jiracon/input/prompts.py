"""Prompt provider: the interactive questions jiracon asks.

``Prompts`` is the protocol the workflows depend on; ``QuestionaryPrompts``
implements it on top of questionary. Tests substitute a scripted object
with the same methods.
"""

from __future__ import annotations

import inspect
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence, Union, runtime_checkable

import click
import questionary
from questionary import Choice, Separator

from jiracon.exceptions import NoAvailableValuesError, PromptCancelledError
from jiracon.input.listing import (
    ListChoice, build_choices, detect_title_keys, matches, promote_default, title_case,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

ItemSource = Union[Sequence[Any], Callable[[str], Union[Awaitable[Sequence[Any]], Sequence[Any]]]]
KeysSpec = Union[Sequence[str], Callable[[Sequence[Any]], Sequence[str]], None]
Validator = Callable[[str], Union[bool, str]]

_SEARCH = -1


@runtime_checkable
class Prompts(Protocol):
    """Questions the workflows can ask. Every method raises
    PromptCancelledError when the user aborts."""

    async def select_item(
        self,
        source: ItemSource,
        message: str,
        title_keys: KeysSpec = None,
        summary_keys: KeysSpec = None,
        multiple: bool = False,
        default: Any = None,
        allow_empty: bool = True,
    ) -> Any:
        """Pick one item (or a list when ``multiple``) from a list or a search function."""
        ...

    async def select_date(self, message: str, default: Optional[str] = None) -> str:
        """A date as YYYY-MM-DD; defaults to today."""
        ...

    async def enter_text(
        self,
        message: str,
        default: Any = None,
        validate: Optional[Validator] = None,
        convert: Optional[Callable[[str], Any]] = None,
    ) -> Any:
        ...

    async def enter_strings(self, keys: Sequence[str], defaults: Optional[Sequence[str]] = None) -> dict[str, str]:
        ...

    async def confirm(self, message: str, default: bool = True) -> bool:
        ...

    async def edit(self, message: str, content: str = "") -> str:
        """Open the user's editor on ``content`` and return the saved text."""
        ...


def validate_date(text: str) -> Union[bool, str]:
    try:
        datetime.strptime(text.strip(), DATE_FORMAT)
    except ValueError:
        return "Enter a date as YYYY-MM-DD"
    return True


def resolve_keys(spec: KeysSpec, items: Sequence[Any], auto: bool) -> list[str]:
    if callable(spec):
        return [k for k in spec(items) if k]
    if spec is None:
        return detect_title_keys(items) if auto else []
    return list(spec)


class QuestionaryPrompts:
    """questionary-backed prompts.

    Args:
        page_size:    Lists longer than this (and every search-backed list)
                      get a "Search…" entry that refilters the choices.
        score_cutoff: rapidfuzz score a row needs to survive a search.
    """

    def __init__(self, page_size: int = 10, score_cutoff: float = 50.0):
        self.page_size = page_size
        self.score_cutoff = score_cutoff

    async def _ask(self, question) -> Any:
        try:
            return await question.unsafe_ask_async()
        except KeyboardInterrupt as exc:
            raise PromptCancelledError("Cancelled by user") from exc

    # ── Lists ────────────────────────────────────────────────────────────────

    @staticmethod
    def _render(choice: ListChoice):
        if choice.summary:
            return [("", choice.title), ("fg:ansibrightblack", f" {choice.summary}")]
        return choice.title

    async def select_item(
        self,
        source: ItemSource,
        message: str,
        title_keys: KeysSpec = None,
        summary_keys: KeysSpec = None,
        multiple: bool = False,
        default: Any = None,
        allow_empty: bool = True,
    ) -> Any:
        dynamic = callable(source)
        query = ""
        pending_default = None if multiple else default
        if multiple:
            selected = list(default) if isinstance(default, (list, tuple)) else ([] if default is None else [default])
        else:
            selected = []

        while True:
            if dynamic:
                items = source(query)
                if inspect.isawaitable(items):
                    items = await items
            else:
                items = source
            items = list(items or [])

            # The default leads the list once, on the first render
            if pending_default is not None:
                items = promote_default(items, pending_default)
                pending_default = None

            titles = resolve_keys(title_keys, items, auto=True)
            summaries = resolve_keys(summary_keys, items, auto=False)
            if multiple and not query:
                # Selections no row stands for stay visible, ticked, so they can be unticked
                items = [s for s in selected if not any(matches(item, s) for item in items)] + items
            choices = build_choices(items, query, titles, summaries, selected, self.score_cutoff)
            searchable = dynamic or len(items) > self.page_size

            if not choices and not searchable:
                if multiple and allow_empty:
                    return []
                raise NoAvailableValuesError(f"Nothing to select for {message}", field_name=message)

            rows: list = [
                Choice(title=self._render(c), value=index, checked=c.checked)
                for index, c in enumerate(choices)
            ]
            if searchable:
                label = f"Search… (current: {query})" if query else "Search…"
                rows += [Separator(), Choice(title=label, value=_SEARCH)]

            if multiple:
                # Only selections filtered out by the current search are carried unseen
                hidden = [s for s in selected if not any(matches(c.value, s) for c in choices)]

                def _validate(picked: list) -> Union[bool, str]:
                    if allow_empty or _SEARCH in picked or picked or hidden:
                        return True
                    return "Select at least one item"

                answer = await self._ask(questionary.checkbox(message, choices=rows, validate=_validate))
                picked = [choices[i].value for i in answer if i != _SEARCH]
                if _SEARCH in answer:
                    selected = hidden + picked
                    query = await self._ask(questionary.text("Search", default=query))
                    continue
                return hidden + picked

            answer = await self._ask(questionary.select(message, choices=rows))
            if answer == _SEARCH:
                query = await self._ask(questionary.text("Search", default=query))
                continue
            return choices[answer].value

    # ── Scalars ──────────────────────────────────────────────────────────────

    async def select_date(self, message: str, default: Optional[str] = None) -> str:
        initial = str(default) if default else date.today().strftime(DATE_FORMAT)
        answer = await self._ask(questionary.text(message, default=initial, validate=validate_date))
        return datetime.strptime(answer.strip(), DATE_FORMAT).strftime(DATE_FORMAT)

    async def enter_text(
        self,
        message: str,
        default: Any = None,
        validate: Optional[Validator] = None,
        convert: Optional[Callable[[str], Any]] = None,
    ) -> Any:
        kwargs: dict[str, Any] = {"default": "" if default is None else str(default)}
        if validate is not None:
            kwargs["validate"] = validate
        answer = await self._ask(questionary.text(message, **kwargs))
        return convert(answer) if convert is not None else answer

    async def enter_strings(self, keys: Sequence[str], defaults: Optional[Sequence[str]] = None) -> dict[str, str]:
        defaults = list(defaults or [])
        answers: dict[str, str] = {}
        for index, key in enumerate(keys):
            default = defaults[index] if index < len(defaults) else None
            answers[key] = await self.enter_text(title_case(key), default)
        return answers

    async def confirm(self, message: str, default: bool = True) -> bool:
        return bool(await self._ask(questionary.confirm(message, default=default)))

    async def edit(self, message: str, content: str = "") -> str:
        logger.debug("Opening editor: %s", message)
        edited = click.edit(content, extension=".yml", require_save=False)
        return content if edited is None else edited
