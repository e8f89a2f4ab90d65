"""Birth date parsing for member records."""

from datetime import date
import re


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

_QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*", flags=re.IGNORECASE
)


def _build(year: int, month: int | None, day: int | None) -> date | None:
    try:
        return date(year, month or 1, day or 1)
    except ValueError:
        return None


def parse_birth_date(date_str: str | None) -> date | None:
    """
    Parse a member's birth date into a `date`.
    Returns None if the value is empty or cannot be parsed.

    Handles formats like:
    - "1956-01-01" (the normal stored form, optionally with a time part)
    - "1746-00-00"
    - "25 NOV 1954" / "11 Aug. 1968"
    - "NOV 1954" / "May, 1837"
    - "April 17, 1850"
    - "01/27/1920" (month first)
    - "1698" / "about 1833"
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = _QUALIFIERS.sub("", s).strip()
    if not s:
        return None

    # ISO, possibly a timestamp: "1839-08-29" or "1839-08-29T00:00:00"
    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$", s)
    if match:
        year, month, day = (int(g) for g in match.groups())
        # 00 month/day means unknown
        return _build(year, month or None, day or None)

    # "25 NOV 1954", "11 Aug. 1968"
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        if month:
            return _build(int(match.group(3)), month, int(match.group(1)))

    # "NOV 1954", "May, 1837"
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return _build(int(match.group(2)), month, None)

    # "April 17, 1850", "SEPT. 17,1910"
    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        if month:
            return _build(int(match.group(3)), month, int(match.group(2)))

    # "01-27-1920", "1/15/1957"
    match = re.match(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$", s)
    if match:
        return _build(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = re.match(r"^(\d{4})$", s)
    if match:
        return _build(int(match.group(1)), None, None)

    return None


def birth_year(date_str: str | None) -> int | None:
    parsed = parse_birth_date(date_str)
    return parsed.year if parsed else None
