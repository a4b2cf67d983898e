"""Survey year extraction from IPEDS table names.

IPEDS encodes the survey year in table names in a few ways:

- Full year:                 sal2015_is, ef2010d, c2023_a
- Academic year range:       ef0910, sfa1819_p1, f9900_f2 (second half wins)
- Two-digit year:            valuesets23, tables06, ef19a

Two-digit years are mapped to four digits with a pivot: 00-50 are 2000s,
51-99 are 1900s.
"""

import re
from typing import Optional

CENTURY_PIVOT = 50

_FULL_YEAR = re.compile(r"20\d{2}")
_YEAR_RANGE = re.compile(r"(\d{2})(\d{2})")
_PREFIXED_TWO_DIGIT = re.compile(r"^[A-Za-z]+(\d{2})(?!\d)")
_TRAILING_TWO_DIGIT = re.compile(r"(?<!\d)(\d{2})$")


def pivot_two_digit_year(two_digit: int) -> int:
    """
    Expand a two-digit year to four digits.

    Args:
        two_digit: Year in 0-99

    Returns:
        2000 + yy for yy <= 50, otherwise 1900 + yy
    """
    if not 0 <= two_digit <= 99:
        raise ValueError(f"Two-digit year out of range: {two_digit}")
    if two_digit <= CENTURY_PIVOT:
        return 2000 + two_digit
    return 1900 + two_digit


def extract_year(table_name: str) -> Optional[int]:
    """
    Derive the survey year from a table name.

    Args:
        table_name: Table name as stored

    Returns:
        Four-digit year, or None when the name carries no year
    """
    match = _FULL_YEAR.search(table_name)
    if match:
        return int(match.group(0))

    match = _YEAR_RANGE.search(table_name)
    if match:
        return pivot_two_digit_year(int(match.group(2)))

    match = _PREFIXED_TWO_DIGIT.search(table_name) or _TRAILING_TWO_DIGIT.search(table_name)
    if match:
        return pivot_two_digit_year(int(match.group(1)))

    return None


def year_in_range(
    year: Optional[int],
    year_min: Optional[int] = None,
    year_max: Optional[int] = None,
) -> bool:
    """
    Check a table year against optional inclusive bounds.

    A table without a year passes only when no bound is given.
    """
    if year_min is None and year_max is None:
        return True
    if year is None:
        return False
    if year_min is not None and year < year_min:
        return False
    if year_max is not None and year > year_max:
        return False
    return True
