"""Typed projection definitions and their SQL rendering.

A projection is an ordered list of (output name, expression) pairs. The
only expressions are a reference to a source column, a typed NULL and an
integer literal, so every piece of SQL produced here is either a quoted
identifier or a value this module formats itself.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ipedsr.config.logging_config import get_logger

logger = get_logger("projection")

# Declared types come from the catalog; anything outside this alphabet is
# rendered as an untyped NULL instead of being spliced into SQL.
_SAFE_TYPE = re.compile(r"^[A-Za-z0-9_ ,()\[\]]+$")


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name for DuckDB.

    Args:
        name: Identifier exactly as stored

    Returns:
        Double-quoted identifier with embedded quotes doubled
    """
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class ColumnRef:
    """Select a source column verbatim."""
    source_name: str

    def to_sql(self) -> str:
        return quote_identifier(self.source_name)


@dataclass(frozen=True)
class NullLiteral:
    """A NULL, cast to the given type when one is known."""
    data_type: Optional[str] = None

    def to_sql(self) -> str:
        if self.data_type and _SAFE_TYPE.match(self.data_type):
            return f"CAST(NULL AS {self.data_type})"
        if self.data_type:
            logger.debug(f"Rendering untyped NULL for unrecognised type {self.data_type!r}")
        return "NULL"


@dataclass(frozen=True)
class IntegerLiteral:
    """A constant integer; None renders as an INTEGER NULL."""
    value: Optional[int]

    def to_sql(self) -> str:
        if self.value is None:
            return "CAST(NULL AS INTEGER)"
        return str(int(self.value))


Expression = Union[ColumnRef, NullLiteral, IntegerLiteral]


@dataclass(frozen=True)
class ProjectedColumn:
    """One output column of a projection."""
    output_name: str
    expression: Expression

    def to_sql(self) -> str:
        return f"{self.expression.to_sql()} AS {quote_identifier(self.output_name)}"


def render_select(table_name: str, projection: Sequence[ProjectedColumn]) -> str:
    """
    Render a SELECT of a projection over one table.

    Args:
        table_name: Source table, exactly as stored
        projection: Output columns in order

    Returns:
        SQL text

    Raises:
        ValueError: If the projection is empty
    """
    if not projection:
        raise ValueError(f"Empty projection for table '{table_name}'")
    select_list = ", ".join(column.to_sql() for column in projection)
    return f"SELECT {select_list} FROM {quote_identifier(table_name)}"
