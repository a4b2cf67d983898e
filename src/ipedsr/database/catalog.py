"""Live catalog access for the IPEDS database.

Thin adapter over a DuckDB connection exposing what the survey layer needs:
table names exactly as stored, per-table column metadata, and projected
reads. Nothing here is cached; the database is expected to gain tables
between calls as new survey years are imported.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import duckdb
import pandas as pd

from ipedsr.config.logging_config import get_logger
from ipedsr.exceptions import CatalogError, TableNotFoundError
from .projection import ProjectedColumn, quote_identifier, render_select

logger = get_logger("catalog")


@dataclass
class ColumnInfo:
    """Information about a database column."""
    name: str
    data_type: str
    nullable: bool = True


@dataclass
class TableSchema:
    """Schema information for a database table."""
    name: str
    columns: Dict[str, ColumnInfo] = field(default_factory=dict)

    def has_column(self, column: str) -> bool:
        """Check if column exists in table (case-insensitive, as DuckDB resolves it)."""
        return self.get_stored_name(column) is not None

    def get_stored_name(self, column: str) -> Optional[str]:
        """Get the stored spelling of a column, matched case-insensitively."""
        if column in self.columns:
            return column
        lookup = {c.lower(): c for c in self.columns}
        return lookup.get(column.lower())

    def get_column_names(self) -> List[str]:
        """Get list of column names in table order."""
        return list(self.columns.keys())

    def get_column_types(self) -> Dict[str, str]:
        """Get column name to declared type, in table order."""
        return {name: info.data_type for name, info in self.columns.items()}


class Catalog:
    """
    Catalog and storage access for one DuckDB connection.

    Table names are passed and returned exactly as stored, and table lookups
    by name are exact. Column names are returned as stored too.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection, schema: str = "main"):
        """
        Initialize catalog.

        Args:
            conn: Active DuckDB connection
            schema: Schema holding the survey tables
        """
        self.conn = conn
        self.schema = schema

    def list_table_names(self) -> List[str]:
        """
        Get all table names in the schema.

        Returns:
            Table names exactly as stored, sorted

        Raises:
            CatalogError: If the catalog cannot be listed
        """
        try:
            result = self.conn.execute(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_catalog = current_database() AND table_schema = ?
                ORDER BY table_name
                """,
                [self.schema],
            ).fetchall()
        except duckdb.Error as e:
            raise CatalogError(f"Error listing tables: {e}") from e
        return [row[0] for row in result]

    def table_exists(self, table_name: str) -> bool:
        """Check whether a table with exactly this name exists."""
        return table_name in self.list_table_names()

    def get_table_schema(self, table_name: str) -> TableSchema:
        """
        Get column metadata for a table.

        Args:
            table_name: Table name exactly as stored

        Returns:
            TableSchema with columns in table order

        Raises:
            TableNotFoundError: If the table does not exist
            CatalogError: If the metadata query fails
        """
        try:
            result = self.conn.execute(
                """
                SELECT column_name, data_type, is_nullable
                FROM information_schema.columns
                WHERE table_catalog = current_database()
                  AND table_schema = ? AND table_name = ?
                ORDER BY ordinal_position
                """,
                [self.schema, table_name],
            ).fetchall()
        except duckdb.Error as e:
            raise CatalogError(f"Error reading columns of {table_name}: {e}") from e

        # Every table has at least one column, so no rows means no table
        if not result:
            raise TableNotFoundError(table_name)

        columns = {
            name: ColumnInfo(name=name, data_type=data_type, nullable=(nullable == "YES"))
            for name, data_type, nullable in result
        }
        logger.debug(f"Discovered schema for {table_name}: {len(columns)} columns")
        return TableSchema(name=table_name, columns=columns)

    def get_column_names(self, table_name: str) -> List[str]:
        """
        Get column names of a table in table order.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        return self.get_table_schema(table_name).get_column_names()

    def get_column_types(self, table_name: str) -> Dict[str, str]:
        """
        Get column name to declared type of a table in table order.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        return self.get_table_schema(table_name).get_column_types()

    def row_count(self, table_name: str) -> int:
        """
        Count rows in a table.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        try:
            result = self.conn.execute(
                f"SELECT COUNT(*) FROM {quote_identifier(table_name)}"
            ).fetchone()
        except duckdb.CatalogException as e:
            raise TableNotFoundError(table_name, str(e)) from e
        except duckdb.Error as e:
            raise CatalogError(f"Error counting rows of {table_name}: {e}") from e
        return result[0] if result else 0

    def select_as_relation(
        self, table_name: str, projection: Sequence[ProjectedColumn]
    ) -> duckdb.DuckDBPyRelation:
        """
        Read a table through a projection.

        Args:
            table_name: Source table exactly as stored
            projection: Output columns

        Returns:
            Lazy DuckDB relation

        Raises:
            TableNotFoundError: If the table does not exist
        """
        try:
            return self.conn.sql(render_select(table_name, projection))
        except duckdb.CatalogException as e:
            raise TableNotFoundError(table_name, str(e)) from e
        except duckdb.Error as e:
            raise CatalogError(f"Error reading {table_name}: {e}") from e

    def query(self, sql: str, tables: Sequence[str] = ()) -> duckdb.DuckDBPyRelation:
        """
        Run a query built from rendered projections.

        Args:
            sql: Query text
            tables: Tables the query reads; used to name a vanished table
                in the error

        Returns:
            Lazy DuckDB relation

        Raises:
            TableNotFoundError: If one of the tables no longer exists
            CatalogError: If the query fails otherwise
        """
        try:
            return self.conn.sql(sql)
        except duckdb.CatalogException as e:
            raise self._missing_table_error(tables, e) from e
        except duckdb.Error as e:
            raise CatalogError(f"Query failed: {e}") from e

    def fetch_df(
        self,
        sql: str,
        parameters: Optional[list] = None,
        tables: Sequence[str] = (),
    ) -> pd.DataFrame:
        """
        Run a parameterised query into a DataFrame.

        Raises:
            TableNotFoundError: If one of the tables no longer exists
            CatalogError: If the query fails otherwise
        """
        try:
            return self.conn.execute(sql, parameters or []).df()
        except duckdb.CatalogException as e:
            raise self._missing_table_error(tables, e) from e
        except duckdb.Error as e:
            raise CatalogError(f"Query failed: {e}") from e

    def execute(self, sql: str, tables: Sequence[str] = ()) -> None:
        """
        Execute a statement that returns no rows.

        Raises:
            TableNotFoundError: If one of the tables no longer exists
            CatalogError: If the statement fails otherwise (e.g. read-only database)
        """
        try:
            self.conn.execute(sql)
        except duckdb.CatalogException as e:
            raise self._missing_table_error(tables, e) from e
        except duckdb.Error as e:
            raise CatalogError(f"Statement failed: {e}") from e

    def _missing_table_error(
        self, tables: Sequence[str], error: Exception
    ) -> CatalogError:
        present = set(self.list_table_names())
        for table_name in tables:
            if table_name not in present:
                return TableNotFoundError(table_name, str(error))
        return CatalogError(f"Catalog error: {error}")


def get_catalog(conn: duckdb.DuckDBPyConnection, schema: Optional[str] = None) -> Catalog:
    """
    Get a Catalog instance.

    Args:
        conn: DuckDB connection
        schema: Optional schema name (defaults to 'main')

    Returns:
        Catalog instance
    """
    return Catalog(conn, schema or "main")
