"""Resolve survey patterns to the tables currently in the catalog."""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple, Union

from ipedsr.config.logging_config import get_logger
from ipedsr.database.catalog import Catalog
from ipedsr.exceptions import PatternMatchError
from .years import extract_year

logger = get_logger("resolver")


@dataclass(frozen=True)
class TableHandle:
    """One physical table and the survey year derived from its name."""
    name: str
    year: Optional[int] = None

    @classmethod
    def from_name(cls, name: str) -> "TableHandle":
        return cls(name=name, year=extract_year(name))

    @property
    def sort_key(self) -> Tuple[int, int, str]:
        # Tables without a year sort after every dated table
        if self.year is None:
            return (1, 0, self.name)
        return (0, self.year, self.name)


def compile_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    """
    Compile a table name pattern without altering its case.

    Raises:
        PatternMatchError: If the pattern is not a valid regex
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternMatchError(f"Invalid table pattern {pattern!r}: {e}") from e


def sort_handles(handles: Sequence[TableHandle]) -> List[TableHandle]:
    """Order handles by year ascending, then name."""
    return sorted(handles, key=lambda h: h.sort_key)


class TableResolver:
    """
    Lists tables matching a pattern.

    Matching is re.search against the stored name with the pattern as
    given. Neither side is case-folded: '^sal\\d{4}' finds sal2015_is and
    '^SAL\\d{4}' does not.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def resolve(self, pattern: Union[str, Pattern[str]]) -> List[TableHandle]:
        """
        Find tables whose names match a pattern.

        Args:
            pattern: Regex string or compiled pattern

        Returns:
            Matching TableHandles ordered by year then name; empty when
            nothing matches
        """
        regex = compile_pattern(pattern)
        names = self.catalog.list_table_names()
        handles = [TableHandle.from_name(name) for name in names if regex.search(name)]

        logger.debug(f"Pattern {regex.pattern!r} matched {len(handles)} of {len(names)} tables")
        return sort_handles(handles)

    def find_case_mismatches(self, pattern: Union[str, Pattern[str]]) -> List[str]:
        """
        Find tables that match a pattern only when case is ignored.

        These are tables imported with non-canonical case; resolve() will
        never return them.

        Args:
            pattern: Regex string or compiled pattern

        Returns:
            Sorted table names
        """
        regex = compile_pattern(pattern)
        folded = re.compile(regex.pattern, regex.flags | re.IGNORECASE)
        mismatches = [
            name for name in self.catalog.list_table_names()
            if folded.search(name) and not regex.search(name)
        ]
        if mismatches:
            logger.warning(
                f"{len(mismatches)} table(s) match {regex.pattern!r} only case-insensitively: "
                f"{', '.join(mismatches[:5])}"
            )
        return sorted(mismatches)
