from datetime import date
from typing import List, NamedTuple, Optional

from .errors import SearchTermTooLong
from .normalize import normalize_term
from .store import EmployeeRow, RecordStore

TITLE_KEYWORDS = ("developer", "manager", "analyst", "engineer")
MAX_SEARCH_TERM_LENGTH = 50


class SearchResult(NamedTuple):
    kind: str  # "title" or "name"
    term: str
    rows: List[EmployeeRow]


def is_title_search(term: str) -> bool:
    """
    True when the term reads as a job title rather than a person's name.

    The term matches if it is a substring of any TITLE_KEYWORDS entry, so
    short fragments such as "man" are routed to the title search even if a
    name was meant.
    """
    if not term or not term.strip():
        return False
    needle = normalize_term(term)
    return any(needle in keyword for keyword in TITLE_KEYWORDS)


def search(store: RecordStore, term: str, today: Optional[date] = None) -> SearchResult:
    """
    Route a free-text term to the title or name query.

    Raises:
        SearchTermTooLong: if the trimmed term exceeds MAX_SEARCH_TERM_LENGTH
        ValueError: if the term is blank
    """
    term = term.strip()
    if len(term) > MAX_SEARCH_TERM_LENGTH:
        raise SearchTermTooLong(len(term), MAX_SEARCH_TERM_LENGTH)
    if not term:
        raise ValueError("Search term must not be blank")

    if is_title_search(term):
        return SearchResult("title", term, store.employees_by_exact_title(term, today))
    return SearchResult("name", term, store.employees_by_name_fragment(term, today))
