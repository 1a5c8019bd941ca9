"""
rae_dle - Read word entries from the Diccionario de la lengua española.

This package provides tools for:
- Parsing dle.rae.es result pages into structured entries (parse)
- Result types, errors and JSON output (model)
- Fetching and looking words up on the site (fetch)
"""

from rae_dle.model import (
    Ambiguous,
    DLEError,
    Found,
    MarkupError,
    NotFound,
    SelectorError,
    dump_entries,
    load_entries,
    outcome_to_dict,
    sort_entries,
)

from rae_dle.parse import (
    BASE_URL,
    Role,
    search,
    parse_document,
    find_results,
    resolve,
    extract_suggestion,
    classify_paragraph,
    build_entries,
    absolute_url,
    format_see,
    format_compound_see,
    format_see_also,
    process_file,
    process_directory,
    report_unhandled,
    save_unhandled_report,
)

from rae_dle.fetch import (
    search_url,
    fetch_page,
    lookup,
    ask_confirmation,
)

__version__ = "0.1.0"
