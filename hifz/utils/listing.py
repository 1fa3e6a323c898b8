# hifz/utils/listing.py
"""
Derived list views over competitor / result records (plain dicts).

Every view is recomputed from scratch: search -> categorical filters -> sort
-> page. Nothing is updated incrementally.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from hifz.utils.levels import GENDERS, LEVELS, gender_label, status_label
from hifz.utils.scoring import result_band

DEFAULT_PAGE_SIZE = 50

# Sorted by what the user reads, not by the stored enum value.
LABEL_SORT_KEYS: Dict[str, Callable] = {
    "gender": gender_label,
    "status": status_label,
}
# Fields that start descending when first selected.
DESC_FIRST_FIELDS = {"final_score"}


class ListingError(ValueError):
    pass


# ---------- search ----------

def smart_name_match(record: dict, query: str) -> bool:
    """
    Competitor search. Matches when:
      - the query is a case-insensitive substring of the name, or
      - the raw query is a substring of the mobile number, or
      - every word of the query is contained in some word of the name, any order.
    """
    if not query:
        return True
    query_lower = query.lower().strip()
    name_lower = (record.get("full_name") or "").lower()

    if query_lower in name_lower:
        return True
    if query in (record.get("mobile") or ""):
        return True

    search_words = query_lower.split()
    name_words = name_lower.split()
    return all(
        any(search_word in name_word for name_word in name_words)
        for search_word in search_words
    )


def name_contains(record: dict, query: str) -> bool:
    if not query:
        return True
    return query.lower() in (record.get("full_name") or "").lower()


# ---------- filters ----------

def _band_filter(record: dict, value: str) -> bool:
    return result_band(record.get("final_score") or 0) == value


FILTER_PREDICATES: Dict[str, Callable[[dict, str], bool]] = {
    "band": _band_filter,
}


def apply_filters(records: Iterable[dict], filters: Dict[str, Optional[str]]) -> List[dict]:
    out = list(records)
    for field, value in filters.items():
        if not value:
            continue
        pred = FILTER_PREDICATES.get(field)
        if pred is not None:
            out = [r for r in out if pred(r, value)]
        else:
            out = [r for r in out if r.get(field) == value]
    return out


# ---------- sorting ----------

def _sort_key(field: str):
    label_fn = LABEL_SORT_KEYS.get(field)

    def key(record: dict):
        value = record.get(field)
        if label_fn is not None:
            value = label_fn(value)
        # missing values sink to the end of an ascending list
        return (value is None, value if value is not None else "")

    return key


def sort_records(records: Iterable[dict], field: str, direction: str = "asc") -> List[dict]:
    # sorted() is stable for reverse=True too: ties keep their incoming order
    return sorted(records, key=_sort_key(field), reverse=(direction == "desc"))


def default_direction(field: str) -> str:
    return "desc" if field in DESC_FIRST_FIELDS else "asc"


# ---------- pagination ----------

def count_pages(total: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if page_size <= 0:
        raise ListingError("page_size must be positive")
    return math.ceil(total / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, max(total_pages, 1)))


def paginate(records: Sequence[dict], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> List[dict]:
    start = (page - 1) * page_size
    return list(records[start:start + page_size])


def page_buttons(current: int, total_pages: int) -> List[Optional[int]]:
    """
    Page numbers to render; None marks an ellipsis.
    First 3, last 3 and current±1 are always shown. The page two steps away
    from the current one on either side becomes the ellipsis when hidden.
    Nothing is rendered for a single page.
    """
    if total_pages <= 1:
        return []
    buttons: List[Optional[int]] = []
    for page in range(1, total_pages + 1):
        if page <= 3 or page > total_pages - 3 or current - 1 <= page <= current + 1:
            buttons.append(page)
        elif page in (current - 2, current + 2):
            buttons.append(None)
    return buttons


class PageView:
    def __init__(self, items: List[dict], total: int, page: int, page_size: int):
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size
        self.total_pages = count_pages(total, page_size)
        self.buttons = page_buttons(page, self.total_pages)

    def meta(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "page_buttons": self.buttons,
        }


# ---------- view state ----------

class ListState:
    """
    Search / filter / sort / page state of one list screen.

    Changing the search term or any filter sends the user back to page 1;
    changing the sort keeps the current page.
    """

    def __init__(self,
                 filter_fields: Sequence[str],
                 matcher: Callable[[dict, str], bool] = name_contains,
                 sort_field: str = "full_name",
                 sort_direction: Optional[str] = None,
                 page_size: int = DEFAULT_PAGE_SIZE):
        self.filter_fields = tuple(filter_fields)
        self.matcher = matcher
        self.search = ""
        self.filters: Dict[str, str] = {f: "" for f in self.filter_fields}
        self.sort_field = sort_field
        self.sort_direction = sort_direction or default_direction(sort_field)
        self.page = 1
        self.page_size = page_size

    # -- mutations --
    def set_search(self, query: Optional[str]) -> None:
        query = query or ""
        if query != self.search:
            self.search = query
            self.page = 1

    def set_filter(self, field: str, value: Optional[str]) -> None:
        if field not in self.filters:
            raise ListingError(f"unknown filter: {field}")
        value = value or ""
        if value != self.filters[field]:
            self.filters[field] = value
            self.page = 1

    def reset_filters(self) -> None:
        self.set_search("")
        for field in self.filter_fields:
            self.set_filter(field, "")

    def toggle_sort(self, field: str) -> None:
        if field == self.sort_field:
            self.sort_direction = "desc" if self.sort_direction == "asc" else "asc"
        else:
            self.sort_field = field
            self.sort_direction = default_direction(field)

    def set_sort(self, field: str, direction: Optional[str] = None) -> None:
        self.sort_field = field
        self.sort_direction = direction if direction in ("asc", "desc") else default_direction(field)

    def set_page(self, page: int) -> None:
        self.page = max(1, int(page))

    # -- derived --
    def filtered(self, records: Iterable[dict]) -> List[dict]:
        rows = list(records)
        if self.search:
            rows = [r for r in rows if self.matcher(r, self.search)]
        rows = apply_filters(rows, self.filters)
        return sort_records(rows, self.sort_field, self.sort_direction)

    def view(self, records: Iterable[dict]) -> PageView:
        rows = self.filtered(records)
        total_pages = count_pages(len(rows), self.page_size)
        page = clamp_page(self.page, total_pages)
        return PageView(paginate(rows, page, self.page_size), len(rows), page, self.page_size)

    def describe(self) -> dict:
        return {
            "q": self.search,
            **self.filters,
            "sort": self.sort_field,
            "direction": self.sort_direction,
        }

    @classmethod
    def from_args(cls, args, sortable: Sequence[str], **kwargs) -> "ListState":
        """Build a state from request query args (q, <filters>, sort, direction, page)."""
        state = cls(**kwargs)
        state.set_search((args.get("q") or "").strip())
        for field in state.filter_fields:
            state.set_filter(field, (args.get(field) or "").strip())
        sort = (args.get("sort") or "").strip()
        if sort:
            if sort not in sortable:
                raise ListingError(f"cannot sort by {sort}")
            state.set_sort(sort, (args.get("direction") or "").strip().lower() or None)
        elif args.get("direction"):
            state.set_sort(state.sort_field, args.get("direction").strip().lower())
        try:
            state.set_page(int(args.get("page") or 1))
        except (TypeError, ValueError):
            raise ListingError("page must be an integer")
        return state


COMPETITOR_SORT_FIELDS = ("full_name", "gender", "level", "city", "status", "created_at")
RESULT_SORT_FIELDS = ("full_name", "gender", "level", "city", "final_score")


def competitor_view_options(page_size: int = DEFAULT_PAGE_SIZE) -> dict:
    """Keyword arguments for the admin competitor list."""
    return dict(
        filter_fields=("gender", "level", "status"),
        matcher=smart_name_match,
        sort_field="full_name",
        page_size=page_size,
    )


def evaluation_view_options(page_size: int = DEFAULT_PAGE_SIZE) -> dict:
    """The judges' pick list: plain name search."""
    return dict(
        filter_fields=("gender", "level", "status"),
        matcher=name_contains,
        sort_field="full_name",
        page_size=page_size,
    )


def result_view_options(page_size: int = DEFAULT_PAGE_SIZE) -> dict:
    return dict(
        filter_fields=("gender", "level", "band"),
        matcher=name_contains,
        sort_field="final_score",
        page_size=page_size,
    )


# ---------- selection ----------

class SelectionSet:
    """Ids picked on a list screen for bulk actions."""

    def __init__(self, ids: Iterable = ()):
        self._ids = []
        for i in ids:
            if i not in self._ids:
                self._ids.append(i)

    def toggle(self, item_id) -> bool:
        """Returns True when the id is selected afterwards."""
        if item_id in self._ids:
            self._ids.remove(item_id)
            return False
        self._ids.append(item_id)
        return True

    def toggle_page(self, page_ids: Iterable) -> None:
        page_ids = list(page_ids)
        if page_ids and set(self._ids) == set(page_ids):
            self.clear()
        else:
            self._ids = list(dict.fromkeys(page_ids))

    def clear(self) -> None:
        self._ids = []

    def __contains__(self, item_id) -> bool:
        return item_id in self._ids

    def __iter__(self):
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)


DELETE_MODES = ("single", "selected", "all")


def resolve_delete_targets(mode: str,
                           competitor_id=None,
                           selection: Optional[SelectionSet] = None,
                           all_ids: Iterable = ()) -> list:
    if mode == "single":
        if competitor_id is None:
            raise ListingError("competitor id is required")
        return [competitor_id]
    if mode == "selected":
        ids = list(selection or [])
        if not ids:
            raise ListingError("no competitors selected")
        return ids
    if mode == "all":
        return list(all_ids)
    raise ListingError(f"mode must be one of {', '.join(DELETE_MODES)}")


# ---------- winners ----------

def top_winners(results: Iterable[dict],
                gender: Optional[str] = None,
                limit: int = 3) -> Dict[str, Dict[str, List[dict]]]:
    """Best `limit` results per level and gender, highest score first."""
    rows = list(results)
    genders = [gender] if gender in GENDERS else list(GENDERS)
    winners: Dict[str, Dict[str, List[dict]]] = {}
    for level in LEVELS:
        level_rows = [r for r in rows if r.get("level") == level]
        winners[level] = {
            g: sorted(
                (r for r in level_rows if r.get("gender") == g),
                key=lambda r: r.get("final_score") or 0,
                reverse=True,
            )[:limit]
            for g in genders
        }
    return winners
