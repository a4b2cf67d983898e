"""Database module for DuckDB operations."""

from .connection import (
    DatabaseConnection,
    get_connection,
    get_memory_connection,
)
from .projection import (
    ColumnRef,
    NullLiteral,
    IntegerLiteral,
    ProjectedColumn,
    quote_identifier,
    render_select,
)
from .catalog import (
    ColumnInfo,
    TableSchema,
    Catalog,
    get_catalog,
)

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_connection",
    "get_memory_connection",
    # Projection
    "ColumnRef",
    "NullLiteral",
    "IntegerLiteral",
    "ProjectedColumn",
    "quote_identifier",
    "render_select",
    # Catalog
    "ColumnInfo",
    "TableSchema",
    "Catalog",
    "get_catalog",
]
