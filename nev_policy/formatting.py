"""Display formatting for instrument codes, target keys and titles.

Every label transformation lives here. Codes passed in are never modified;
callers keep the original code for filtering and use these strings for display
only.
"""

from __future__ import annotations

TITLE_MAX_CHARS = 35
ELLIPSIS = "..."
MISSING_YEAR = "-"
INSTRUMENT_LABEL_PREFIXES = ("fiscal ", "tax ")


def humanize_code(code: str) -> str:
    return code.replace("_", " ")


def instrument_label(code: str) -> str:
    """Short chart label, e.g. ``fiscal_purchase_subsidy`` -> ``purchase subsidy``."""
    label = humanize_code(code)
    for prefix in INSTRUMENT_LABEL_PREFIXES:
        if label.startswith(prefix):
            label = label[len(prefix) :]
    return label


def instrument_tag(code: str) -> str:
    return code.split("_")[-1]


def target_label(code: str) -> str:
    return humanize_code(code.replace("target_", "", 1))


def truncate_title(title: str, max_chars: int = TITLE_MAX_CHARS) -> str:
    if len(title) > max_chars:
        return title[:max_chars] + ELLIPSIS
    return title


def format_year(year: int | None) -> str:
    return MISSING_YEAR if year is None else str(year)


def format_value(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
