"""
Result types, errors and JSON serialization for DLE lookups.

A lookup produces exactly one of three outcomes: the word was found and
its entries were parsed, the word is not in the dictionary, or the site
suggested a related word instead.
"""

import json
from typing import NamedTuple, Union

# A leaf value inside an entry: a single string or an ordered list of strings.
Value = Union[str, list[str]]

# An entry node: a mapping of values, a bare "Véase" string, or the
# top-level list of submission URLs.
EntryNode = Union[dict[str, Value], str, list[str]]


class DLEError(Exception):
    """Base class for errors raised while reading DLE result pages."""


class MarkupError(DLEError):
    """The result page no longer matches the markup the parser expects."""


class SelectorError(DLEError):
    """A CSS selector used by the parser is malformed."""


class Found(NamedTuple):
    """The word exists; ``entries`` maps entry numbers to parsed entries."""
    entries: dict[str, EntryNode]


class NotFound(NamedTuple):
    """The word is not in the dictionary."""


class Ambiguous(NamedTuple):
    """The word is not in the dictionary but a related entry was offered."""
    word: str


Outcome = Union[Found, NotFound, Ambiguous]


def sort_entries(entries: dict[str, EntryNode]) -> dict[str, EntryNode]:
    """Return a copy of ``entries`` with keys in lexicographic order at both levels.

    "10" sorts before "2"; this is the order the result is serialized in.
    """
    ordered: dict[str, EntryNode] = {}
    for key in sorted(entries):
        node = entries[key]
        if isinstance(node, dict):
            ordered[key] = {k: node[k] for k in sorted(node)}
        else:
            ordered[key] = node
    return ordered


def dump_entries(entries: dict[str, EntryNode], indent: int | None = 2) -> str:
    """Serialize a parsed result to JSON text."""
    return json.dumps(sort_entries(entries), ensure_ascii=False, indent=indent)


def load_entries(text: str) -> dict[str, EntryNode]:
    """Parse JSON produced by dump_entries, preserving key order."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def outcome_to_dict(outcome: Outcome) -> dict:
    """Tag an outcome for structured output."""
    if isinstance(outcome, Found):
        return {"status": "found", "entries": sort_entries(outcome.entries)}
    if isinstance(outcome, Ambiguous):
        return {"status": "ambiguous", "word": outcome.word}
    if isinstance(outcome, NotFound):
        return {"status": "not_found"}
    raise TypeError(f"Unknown outcome: {outcome!r}")
