#!/usr/bin/env python3
"""
Looks words up on dle.rae.es.

Fetches the result page for a word, parses it, and optionally follows
the related word the site suggests when the searched one is missing.
"""

import re
import sys
from typing import Callable

import requests
from requests.utils import requote_uri

from rae_dle.model import Ambiguous, EntryNode, MarkupError, NotFound, Outcome, dump_entries
from rae_dle.parse import BASE_URL, SEE_ALSO_KEY, search

DEFAULT_TIMEOUT = 10

YES_ANSWERS = {"s", "sí", "1"}

_SEE_ALSO_URL = re.compile(r"\((\S+)\)$")


def search_url(word: str, base_url: str = BASE_URL) -> str:
    return f"{base_url}/?w={word}"


def fetch_page(
    word: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = BASE_URL,
) -> str:
    """Download the result page for ``word``.

    Prints a notice when the site redirected the request elsewhere.
    """
    url = search_url(word, base_url)
    http = session if session is not None else requests
    response = http.get(url, timeout=timeout)
    response.raise_for_status()

    if response.url != requote_uri(url):
        print(f"You were redirected to {response.url}")

    return response.text


def lookup(
    word: str,
    confirm: Callable[[str, str], bool] | None = None,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> tuple[str, Outcome]:
    """Look ``word`` up, following suggestions that ``confirm`` accepts.

    Returns the word finally searched together with its outcome. A
    suggestion that was already searched is never followed again.
    """
    seen: set[str] = set()
    while True:
        seen.add(word)
        outcome = search(fetch_page(word, session=session, timeout=timeout))
        if not isinstance(outcome, Ambiguous) or confirm is None or outcome.word in seen:
            return word, outcome
        if not confirm(word, outcome.word):
            return word, outcome
        word = outcome.word


def ask_confirmation(word: str, suggestion: str) -> bool:
    """Ask on the terminal whether to search ``suggestion`` instead."""
    print(
        f"Aviso: La palabra {word} no está en el Diccionario.\n"
        f"Pero existe una palabra que es parecida: {suggestion}, "
        "¿quiere proceder a su búsqueda? (s/n)"
    )
    answer = input("> ")
    return answer.strip().lower() in YES_ANSWERS


def print_redirections(entries: dict[str, EntryNode]) -> None:
    """Announce entries whose only content points somewhere else."""
    for key, node in entries.items():
        if not isinstance(node, dict) or SEE_ALSO_KEY not in node:
            continue
        match = _SEE_ALSO_URL.search(node[SEE_ALSO_KEY])
        if match:
            print(f"La {key}a acepción le redirecciona al siguiente link: {match.group(1)}")


def main() -> int:
    """Main entry point."""
    if len(sys.argv) != 2:
        print(f"Usage: {sys.argv[0]} <word>", file=sys.stderr)
        return 1

    word = sys.argv[1].strip()
    if not word:
        print("Error: Empty word", file=sys.stderr)
        return 1

    try:
        word, outcome = lookup(word, confirm=ask_confirmation)
    except requests.RequestException as e:
        print(f"Error fetching {word}: {e}", file=sys.stderr)
        return 1
    except MarkupError as e:
        print(f"Error reading the result page for {word}: {e}", file=sys.stderr)
        return 1

    if isinstance(outcome, (NotFound, Ambiguous)):
        print(f"Aviso: La palabra {word} no está en el Diccionario.")
        return 0

    print_redirections(outcome.entries)
    print(dump_entries(outcome.entries))
    return 0


if __name__ == "__main__":
    sys.exit(main())
