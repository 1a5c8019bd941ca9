#!/usr/bin/env python3
"""
Parses DLE (Diccionario de la lengua española) result pages.

Turns the ``div#resultados`` container of a dle.rae.es result page into
numbered entries holding senses, compound forms with their meanings, and
cross-references, in a shape that serializes directly to JSON.
"""

import json
import sys
from enum import Enum
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from rae_dle.model import (
    Ambiguous,
    EntryNode,
    Found,
    MarkupError,
    NotFound,
    Outcome,
    SelectorError,
    Value,
    outcome_to_dict,
    sort_entries,
)

BASE_URL = "https://dle.rae.es"

RESULTS_SELECTOR = "div#resultados"
ENTRY_SELECTOR = "article"
PARAGRAPH_SELECTOR = "p"
LINK_SELECTOR = "a"
SUPERSCRIPT_SELECTOR = "sup"

# Text markers the site uses instead of a proper status
AMBIGUOUS_SENTINEL = " La entrada que se muestra a continuación podría estar relacionada:"
NOT_FOUND_SENTINEL = "Aviso: "

SEE_ALSO_KEY = "Véase también"
SUBMISSIONS_KEY = "Envíos"

# Paragraph style codes
SENSE_MARKER = "j"
COMPOUND_FORM_STYLES = {"k5", "k6"}
COMPOUND_MEANING_STYLE = "m"
SEE_LINK_STYLE = "l2"
SUBMISSION_MARKER = "l"

# Tracking for ignored paragraph styles with examples: style -> (source_file, html_snippet)
unhandled_styles: dict[str, tuple[str, str]] = {}

# Current source file being processed (for tracking)
_current_source_file: str = ""


class Role(Enum):
    """What a paragraph contributes to an entry, decided by its style code."""
    SENSE = "sense"
    COMPOUND_FORM = "compound_form"
    COMPOUND_MEANING = "compound_meaning"
    SEE_LINK = "see_link"
    SUBMISSION_LINK = "submission_link"
    IGNORED = "ignored"


def parse_document(html: str) -> BeautifulSoup:
    """Parse a result page, keeping ``class`` attributes as raw strings."""
    return BeautifulSoup(html, "html.parser", multi_valued_attributes=None)


def select(elem: Tag, selector: str) -> list[Tag]:
    """All descendants of ``elem`` matching ``selector``, in document order."""
    try:
        return elem.select(selector)
    except SelectorSyntaxError as e:
        raise SelectorError(f"Invalid selector {selector!r}: {e}") from e


def select_one(elem: Tag, selector: str) -> Tag | None:
    """First descendant of ``elem`` matching ``selector``."""
    try:
        return elem.select_one(selector)
    except SelectorSyntaxError as e:
        raise SelectorError(f"Invalid selector {selector!r}: {e}") from e


def snippet(elem: Tag) -> str:
    """Markup of ``elem`` truncated for error messages and reports."""
    return str(elem)[:300]


def get_text(elem: Tag) -> str:
    """All descendant text joined without separators, unstripped."""
    return elem.get_text()


def get_style(paragraph: Tag) -> str:
    """Raw class attribute of a paragraph."""
    style = paragraph.get("class")
    if style is None:
        raise MarkupError(f"Paragraph without a class attribute: {snippet(paragraph)}")
    if isinstance(style, list):
        # Soups parsed elsewhere split class into a list
        return " ".join(style)
    return style


def find_results(soup: BeautifulSoup) -> Tag:
    """Return the results container of the page."""
    results = select_one(soup, RESULTS_SELECTOR)
    if results is None:
        raise MarkupError(f"No element matches {RESULTS_SELECTOR!r}")
    return results


def classify_paragraph(style: str) -> Role:
    """Map a paragraph style code to its role.

    The checks run in a fixed order and the first match wins, so "jl"
    is a sense and "l2" never reaches the generic link rule.
    """
    if SENSE_MARKER in style:
        return Role.SENSE
    if style in COMPOUND_FORM_STYLES:
        return Role.COMPOUND_FORM
    if style == COMPOUND_MEANING_STYLE:
        return Role.COMPOUND_MEANING
    if style == SEE_LINK_STYLE:
        return Role.SEE_LINK
    if SUBMISSION_MARKER in style:
        return Role.SUBMISSION_LINK
    return Role.IGNORED


def track_style(style: str, paragraph: Tag, unhandled: dict[str, tuple[str, str]] | None) -> None:
    """Record the first paragraph seen for a style the classifier ignores."""
    if unhandled is None or style in unhandled:
        return
    unhandled[style] = (_current_source_file, snippet(paragraph))


def absolute_url(href: str, base_url: str = BASE_URL) -> str:
    """Resolve a site-relative href."""
    return f"{base_url}{href}"


def format_see(text: str, url: str) -> str:
    return f"Véase '{text}' ({url})"


def format_compound_see(text: str, url: str) -> str:
    # The space before the closing parenthesis is part of the output format
    return f"Véase '{text}' ({url} )"


def format_see_also(text: str, url: str) -> str:
    return f"'{text}' ({url})"


def first_link(paragraph: Tag) -> Tag:
    link = select_one(paragraph, LINK_SELECTOR)
    if link is None:
        raise MarkupError(f"Link paragraph without an anchor: {snippet(paragraph)}")
    return link


def link_href(link: Tag) -> str:
    href = link.get("href")
    if href is None:
        raise MarkupError(f"Anchor without an href: {snippet(link)}")
    return href


def link_text(link: Tag) -> str:
    text = get_text(link)
    if not text:
        raise MarkupError(f"Anchor without text: {snippet(link)}")
    return text


def read_link(paragraph: Tag, base_url: str = BASE_URL) -> tuple[Tag, str, str]:
    """Return the first anchor of a paragraph with its text and absolute URL."""
    link = first_link(paragraph)
    return link, link_text(link), absolute_url(link_href(link), base_url)


def strip_superscript(link: Tag, text: str) -> str:
    """Drop the superscript text of ``link`` from ``text``.

    Only an empty superscript is removed, which leaves ``text`` as it was;
    homograph numbers such as the "2" in ``papa<sup>2</sup>`` stay in.
    """
    superscript = select_one(link, SUPERSCRIPT_SELECTOR)
    superscript_text = get_text(superscript) if superscript is not None else ""
    # TODO: check live pages to see whether non-empty superscripts were meant to go instead.
    if superscript_text == "":
        text = text.replace(superscript_text, "")
    return text


def extract_suggestion(results: Tag) -> str:
    """Return the related word offered for a missing one.

    Only the first text node of the link counts, so a homograph number in
    ``papa<sup>1</sup>`` is left out, and qualifiers after a comma
    ("cojo, ja") are dropped.
    """
    link = select_one(results, LINK_SELECTOR)
    if link is None:
        raise MarkupError("Related entry announced but no link to it was found")
    word = next(link.strings, "").split(",", 1)[0]
    if not word:
        raise MarkupError(f"Related entry link without a word: {snippet(link)}")
    return word


def resolve(results: Tag) -> Ambiguous | NotFound | None:
    """Decide whether the page is a redirect, a miss, or a list of entries.

    Returns None when entries should be parsed. The ambiguity check runs
    first since those pages carry the "Aviso: " text as well.
    """
    text = get_text(results)
    if AMBIGUOUS_SENTINEL in text:
        return Ambiguous(extract_suggestion(results))
    if NOT_FOUND_SENTINEL in text:
        return NotFound()
    return None


def add_sense(entry: dict[str, Value], text: str) -> None:
    """Add a numbered sense ("1. m. Sumo pontífice...") to an entry."""
    number, separator, definition = text.partition(".")
    if not separator:
        raise MarkupError(f"Sense without a number separator: {text!r}")
    entry[number] = definition.lstrip()


def add_compound_form(entry: dict[str, Value], text: str) -> str:
    """Open a compound form and return it as the new cursor."""
    entry[text] = []
    return text


def add_compound_meaning(entry: dict[str, Value], compound_form: str | None, text: str) -> None:
    if compound_form is None:
        raise MarkupError(f"Compound-form meaning with no compound form before it: {text!r}")
    meanings = entry.get(compound_form)
    if not isinstance(meanings, list):
        raise MarkupError(f"Compound form {compound_form!r} no longer holds a list of meanings")
    meanings.append(text)


def first_empty_compound_form(entry: dict[str, Value]) -> str | None:
    """First key, in lexicographic order, whose value is an empty list."""
    for key in sorted(entry):
        value = entry[key]
        if isinstance(value, list) and not value:
            return key
    return None


def attach_see_also(entries: dict[str, EntryNode], key: str, text: str, url: str) -> None:
    """Store an entry-level "also see" reference under entry ``key``.

    An entry that was never opened becomes a bare ``Véase`` string.
    """
    node = entries.get(key)
    if node is None:
        entries[key] = format_see(text, url)
    elif isinstance(node, dict):
        node[SEE_ALSO_KEY] = format_see_also(text, url)
    else:
        raise MarkupError(f"Entry {key} cannot hold a cross-reference: {node!r}")


def add_see_link(entries: dict[str, EntryNode], key: str, paragraph: Tag, base_url: str = BASE_URL) -> None:
    """Route an ``l2`` link to the compound form waiting for one, or to the entry itself."""
    link, text, url = read_link(paragraph, base_url)
    entry = entries.get(key)
    # build_entries opens every entry before reading its paragraphs
    if not isinstance(entry, dict):
        raise MarkupError(f"Entry {key} was not opened before its links")

    compound_form = first_empty_compound_form(entry)
    if compound_form is not None:
        entry[compound_form].append(format_compound_see(text, url))
        return

    attach_see_also(entries, key, strip_superscript(link, text), url)


def add_submission(entries: dict[str, EntryNode], paragraph: Tag, base_url: str = BASE_URL) -> None:
    """Collect a cross-reference URL in the list shared by all entries."""
    url = absolute_url(link_href(first_link(paragraph)), base_url)
    entries.setdefault(SUBMISSIONS_KEY, []).append(url)


def build_entries(
    results: Tag,
    unhandled: dict[str, tuple[str, str]] | None = None,
    base_url: str = BASE_URL,
) -> dict[str, EntryNode]:
    """Build the entry tree from the ``article`` blocks of a results container.

    Blocks are numbered from 1 in document order. A block whose first
    child is an element rather than text is skipped, and its number is
    left out instead of being reused.
    """
    entries: dict[str, EntryNode] = {}

    for number, block in enumerate(select(results, ENTRY_SELECTOR), start=1):
        if not block.contents:
            raise MarkupError(f"Entry block {number} is empty")
        if isinstance(block.contents[0], Tag):
            continue

        key = str(number)
        entry: dict[str, Value] = {}
        entries[key] = entry
        compound_form: str | None = None

        for paragraph in select(block, PARAGRAPH_SELECTOR):
            style = get_style(paragraph)
            role = classify_paragraph(style)

            if role is Role.SENSE:
                add_sense(entry, get_text(paragraph))
            elif role is Role.COMPOUND_FORM:
                compound_form = add_compound_form(entry, get_text(paragraph))
            elif role is Role.COMPOUND_MEANING:
                add_compound_meaning(entry, compound_form, get_text(paragraph))
            elif role is Role.SEE_LINK:
                add_see_link(entries, key, paragraph, base_url)
            elif role is Role.SUBMISSION_LINK:
                add_submission(entries, paragraph, base_url)
            else:
                track_style(style, paragraph, unhandled)

    return sort_entries(entries)


def search(
    document: str | BeautifulSoup,
    unhandled: dict[str, tuple[str, str]] | None = None,
    base_url: str = BASE_URL,
) -> Outcome:
    """Read a result page and return what it says about the searched word."""
    soup = parse_document(document) if isinstance(document, str) else document
    results = find_results(soup)

    outcome = resolve(results)
    if outcome is not None:
        return outcome
    return Found(build_entries(results, unhandled, base_url))


def process_file(html_path: Path) -> Path:
    """Parse a saved result page and write the outcome next to it as JSON."""
    global _current_source_file
    _current_source_file = html_path.name

    content = html_path.read_text(encoding="utf-8")
    outcome = search(content, unhandled=unhandled_styles)

    json_path = html_path.with_suffix(".json")
    json_path.write_text(
        json.dumps(outcome_to_dict(outcome), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )

    return json_path


def process_directory(dir_path: Path) -> int:
    """Process all HTML files in directory. Returns count of files processed."""
    html_files = sorted(dir_path.glob("*.html"))
    count = 0

    for html_path in html_files:
        try:
            json_path = process_file(html_path)
            print(f"Created: {json_path.name}")
            count += 1
        except MarkupError as e:
            print(f"Error parsing {html_path.name}: {e}", file=sys.stderr)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading {html_path.name}: {e}", file=sys.stderr)

    return count


def report_unhandled() -> str:
    """Generate brief summary of ignored paragraph styles."""
    if unhandled_styles:
        return f"Unhandled styles ({len(unhandled_styles)}): {sorted(unhandled_styles.keys())}"
    return "All styles handled."


def save_unhandled_report(output_path: Path) -> None:
    """Save detailed ignored-styles report to file with examples."""
    lines = ["# Unhandled Styles Report", ""]

    if not unhandled_styles:
        lines.append("All styles handled - no paragraph was ignored.")
        output_path.write_text("\n".join(lines), encoding="utf-8")
        return

    for style in sorted(unhandled_styles.keys()):
        filename, html = unhandled_styles[style]
        lines.append(f"## `{style}`")
        lines.append(f"**Source:** `{filename}`")
        lines.append("")
        lines.append("```html")
        lines.append(html)
        lines.append("```")
        lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    """Convert every saved result page in a directory to JSON."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1 or not Path(args[0]).is_dir():
        print("Usage: rae-dle-parse <directory of saved result pages>", file=sys.stderr)
        return 1

    pages_dir = Path(args[0])
    count = process_directory(pages_dir)

    report_path = pages_dir / "unhandled_report.md"
    save_unhandled_report(report_path)
    print(f"{count} pages converted, ignored styles listed in {report_path.name}")
    print(report_unhandled())
    return 0


if __name__ == "__main__":
    sys.exit(main())
