"""List helpers for select prompts: titles, key detection, fuzzy filtering.

Items may be dicts, pydantic models, dataclasses, or plain scalars. Everything here is
pure so the interactive prompt and the tests share one implementation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import BaseModel
from rapidfuzz import fuzz, process, utils

# Probed in priority order
TITLE_KEY_CANDIDATES = ("title", "name", "label", "value", "key", "id")
SUMMARY_KEY_CANDIDATES = ("id", "key")
VALUE_KEY_CANDIDATES = ("value", "name", "title", "label", "key", "id")

TITLE_SEPARATOR = " - "


def as_mapping(item: Any) -> Optional[Mapping[str, Any]]:
    """Dict view of an item, or None for scalars."""
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json")
    if is_dataclass(item) and not isinstance(item, type):
        return {f.name: getattr(item, f.name) for f in fields(item)}
    if isinstance(item, Mapping):
        return item
    return None


def _first_present(item: Any, candidates: Sequence[str]) -> Optional[str]:
    mapping = as_mapping(item)
    if mapping is None:
        return None
    return next((key for key in candidates if key in mapping), None)


def recognize_title_key(item: Any) -> Optional[str]:
    """First of title, name, label, value, key, id present on the item."""
    return _first_present(item, TITLE_KEY_CANDIDATES)


def recognize_summary_key(item: Any) -> Optional[str]:
    """First of id, key present on the item."""
    return _first_present(item, SUMMARY_KEY_CANDIDATES)


def _first_record(items: Sequence[Any]) -> Any:
    return next((item for item in items if as_mapping(item) is not None), None)


def detect_title_keys(items: Sequence[Any]) -> list[str]:
    """Title keys for a whole list, judged on its first record.

    Scalars mixed into the list (e.g. carried-over defaults) are skipped.
    """
    key = recognize_title_key(_first_record(items))
    return [key] if key else []


def detect_summary_keys(items: Sequence[Any]) -> list[str]:
    key = recognize_summary_key(_first_record(items))
    return [key] if key else []


def record_value(item: Any) -> Any:
    """Scalar a record stands for: its value, name, title, label, key or id
    (first present), else its first property. Scalars are returned unchanged.
    """
    mapping = as_mapping(item)
    if mapping is None:
        return item
    key = _first_present(mapping, VALUE_KEY_CANDIDATES)
    if key is not None:
        return mapping[key]
    return next(iter(mapping.values()), None)


def matches(item: Any, selection: Any) -> bool:
    """True when ``selection`` is ``item``, or a scalar standing for it."""
    if item == selection:
        return True
    if selection is None or as_mapping(selection) is not None or as_mapping(item) is None:
        return False
    return str(record_value(item)) == str(selection)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, tuple, dict)) and len(value) == 0)


def title_format(keys: Iterable[str], item: Any) -> str:
    """Join the non-empty values of ``keys`` on the item with " - ".

    Scalars (strings, numbers) are their own title.
    """
    mapping = as_mapping(item)
    if mapping is None:
        return "" if item is None else str(item)
    values = [mapping.get(key) for key in keys if key in mapping]
    return TITLE_SEPARATOR.join(str(v) for v in values if not _is_blank(v))


def title_case(key: str) -> str:
    """``fixVersions`` → ``Fix Versions``, ``release_date`` → ``Release Date``."""
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", key).replace("_", " ").replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def fuzzy_filter(
    query: str,
    items: Sequence[Any],
    extract: Callable[[Any], str],
    score_cutoff: float = 50.0,
) -> list[Any]:
    """Items whose extracted text matches ``query``, best match first.

    An empty query keeps every item in its original order. Exact substring
    matches always survive the cutoff.
    """
    query = (query or "").strip()
    if not query:
        return list(items)

    texts = [extract(item) for item in items]
    scored = process.extract(
        query,
        texts,
        scorer=fuzz.WRatio,
        processor=utils.default_process,
        limit=None,
    )
    needle = query.lower()
    kept = [
        (score + (100 if needle in texts[index].lower() else 0), index)
        for _text, score, index in scored
        if score >= score_cutoff or needle in texts[index].lower()
    ]
    kept.sort(key=lambda pair: (-pair[0], pair[1]))
    return [items[index] for _score, index in kept]


def promote_default(items: Sequence[Any], default: Any) -> list[Any]:
    """Move items matching ``default`` to the top, keeping the rest in order."""
    if default is None:
        return list(items)
    head = [item for item in items if matches(item, default)]
    tail = [item for item in items if not matches(item, default)]
    return head + tail


@dataclass
class ListChoice:
    """One rendered row of a select prompt."""
    title: str
    summary: str
    value: Any
    checked: bool = False


def build_choices(
    items: Sequence[Any],
    query: str = "",
    title_keys: Sequence[str] = (),
    summary_keys: Sequence[str] = (),
    selected: Optional[Sequence[Any]] = None,
    score_cutoff: float = 50.0,
) -> list[ListChoice]:
    """Filter items against ``query`` and render title/summary for each."""
    selected = list(selected or [])
    matched = fuzzy_filter(query, items, lambda item: title_format(title_keys, item), score_cutoff)
    return [
        ListChoice(
            title=title_format(title_keys, item),
            summary=title_format(summary_keys, item) if summary_keys else "",
            value=item,
            checked=any(matches(item, s) for s in selected),
        )
        for item in matched
    ]
