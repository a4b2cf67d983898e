"""Schema reconciliation across the years of a survey family.

IPEDS tables for the same survey drift over time: columns are added,
dropped and occasionally retyped. Consolidation projects every year's table
onto the union of all columns seen, filling absent columns with NULL, adds
a YEAR column, and stacks the years with UNION ALL.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import duckdb
import pandas as pd

from ipedsr.config.logging_config import get_logger
from ipedsr.database.catalog import Catalog
from ipedsr.database.projection import (
    ColumnRef,
    IntegerLiteral,
    NullLiteral,
    ProjectedColumn,
    quote_identifier,
    render_select,
)
from ipedsr.exceptions import CatalogError
from .resolver import TableHandle

logger = get_logger("reconciler")

YEAR_COLUMN = "YEAR"


@dataclass(frozen=True)
class ReconcileWarning:
    """A table left out of a consolidation, and why."""
    table_name: str
    message: str


@dataclass(frozen=True)
class TypeDrift:
    """A column declared with different types in different tables."""
    column: str
    types_by_table: Tuple[Tuple[str, str], ...]

    @property
    def distinct_types(self) -> List[str]:
        return list(dict.fromkeys(t for _, t in self.types_by_table))


@dataclass(frozen=True)
class TableProjection:
    """One table's contribution to a consolidated relation."""
    handle: TableHandle
    projection: Tuple[ProjectedColumn, ...]
    missing_columns: Tuple[str, ...] = ()

    def to_sql(self) -> str:
        return render_select(self.handle.name, self.projection)


@dataclass
class ConsolidatedRelation:
    """
    Survey years stacked into one relation.

    The relation is lazy: nothing is read until sql() is executed through
    relation(), to_df(), row_count() or materialize(). Rows are never
    filtered or de-duplicated, so the row count is the sum of the
    contributing tables' row counts.
    """

    catalog: Catalog
    columns: List[str]
    parts: List[TableProjection] = field(default_factory=list)
    column_types: Dict[str, str] = field(default_factory=dict)
    warnings: List[ReconcileWarning] = field(default_factory=list)
    type_drift: List[TypeDrift] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when no table contributed."""
        return not self.parts

    @property
    def tables(self) -> List[str]:
        """Contributing table names in stacking order."""
        return [part.handle.name for part in self.parts]

    @property
    def years(self) -> List[Optional[int]]:
        """Contributing table years in stacking order."""
        return [part.handle.year for part in self.parts]

    def sql(self) -> str:
        """
        Render the consolidation query.

        Returns:
            UNION ALL of every table projection; a query with the same
            columns and no rows when nothing contributed
        """
        if not self.parts:
            select_list = ", ".join(
                f"{NullLiteral(self.column_types.get(c)).to_sql()} AS {quote_identifier(c)}"
                if c != YEAR_COLUMN
                else f"{IntegerLiteral(None).to_sql()} AS {quote_identifier(c)}"
                for c in self.columns
            )
            return f"SELECT {select_list} WHERE false"
        return "\nUNION ALL\n".join(part.to_sql() for part in self.parts)

    def relation(self) -> duckdb.DuckDBPyRelation:
        """Get a lazy DuckDB relation over the consolidation."""
        return self.catalog.query(self.sql(), tables=self.tables)

    def to_df(self, limit: Optional[int] = None) -> pd.DataFrame:
        """
        Execute the consolidation into a DataFrame.

        Args:
            limit: Optional maximum number of rows

        Returns:
            DataFrame with the union columns and YEAR
        """
        rel = self.relation()
        if limit is not None:
            rel = rel.limit(limit)
        return rel.df()

    def row_count(self) -> int:
        """Count rows of the consolidation."""
        result = self.catalog.query(
            f"SELECT COUNT(*) FROM ({self.sql()}) AS consolidated", tables=self.tables
        ).fetchone()
        return result[0] if result else 0

    def materialize(self, table_name: str, replace: bool = True) -> int:
        """
        Store the consolidation as a physical table.

        Args:
            table_name: Target table name
            replace: Replace the table if it exists

        Returns:
            Rows written
        """
        verb = "CREATE OR REPLACE TABLE" if replace else "CREATE TABLE"
        self.catalog.execute(
            f"{verb} {quote_identifier(table_name)} AS {self.sql()}", tables=self.tables
        )
        count = self.catalog.row_count(table_name)
        logger.info(f"Materialized {table_name} from {len(self.parts)} tables ({count:,} rows)")
        return count


class SchemaReconciler:
    """Builds ConsolidatedRelations from table handles."""

    def __init__(self, catalog: Catalog):
        """
        Initialize reconciler.

        Args:
            catalog: Catalog the tables live in
        """
        self.catalog = catalog

    def reconcile(self, handles: Sequence[TableHandle]) -> ConsolidatedRelation:
        """
        Consolidate tables into one relation over the union of their columns.

        Tables whose metadata cannot be read (dropped since they were
        listed, permission problems) are skipped with a warning; the
        remaining tables are still consolidated.

        Args:
            handles: Tables of one survey family, in the order to stack them

        Returns:
            ConsolidatedRelation
        """
        warnings: List[ReconcileWarning] = []
        introspected: List[Tuple[TableHandle, Dict[str, str]]] = []

        for handle in handles:
            try:
                column_types = self.catalog.get_column_types(handle.name)
            except CatalogError as e:
                logger.warning(f"Skipping {handle.name}: {e}")
                warnings.append(ReconcileWarning(table_name=handle.name, message=str(e)))
                continue
            introspected.append((handle, column_types))

        union_columns, first_types, seen_types = self._union_schema(introspected)
        type_drift = self._find_type_drift(seen_types)

        parts = []
        for handle, column_types in introspected:
            stored_names = {c.lower(): c for c in column_types}
            projection = []
            missing = []
            for column in union_columns:
                stored = stored_names.get(column.lower())
                if stored is not None:
                    projection.append(ProjectedColumn(column, ColumnRef(stored)))
                else:
                    projection.append(ProjectedColumn(column, NullLiteral(first_types[column])))
                    missing.append(column)
            projection.append(ProjectedColumn(YEAR_COLUMN, IntegerLiteral(handle.year)))
            parts.append(TableProjection(handle, tuple(projection), tuple(missing)))

            if missing:
                logger.debug(f"{handle.name}: NULL for {len(missing)} missing column(s)")

        first_types[YEAR_COLUMN] = "INTEGER"
        logger.debug(
            f"Reconciled {len(parts)} of {len(handles)} tables into "
            f"{len(union_columns)} columns"
        )

        return ConsolidatedRelation(
            catalog=self.catalog,
            columns=union_columns + [YEAR_COLUMN],
            parts=parts,
            column_types=first_types,
            warnings=warnings,
            type_drift=type_drift,
        )

    @staticmethod
    def _union_schema(
        introspected: Sequence[Tuple[TableHandle, Dict[str, str]]],
    ) -> Tuple[List[str], Dict[str, str], Dict[str, List[Tuple[str, str]]]]:
        """
        Union of column names in first-seen order, with their types.

        Names are matched case-insensitively, as DuckDB resolves them; the
        first spelling seen names the output column.
        """
        union_columns: List[str] = []
        first_types: Dict[str, str] = {}
        seen_types: Dict[str, List[Tuple[str, str]]] = {}
        first_spelling: Dict[str, str] = {}

        for handle, column_types in introspected:
            for column, data_type in column_types.items():
                key = column.lower()
                # The synthesized YEAR replaces any stored year column
                if key == YEAR_COLUMN.lower():
                    continue
                if key not in first_spelling:
                    first_spelling[key] = column
                    union_columns.append(column)
                    first_types[column] = data_type
                seen_types.setdefault(first_spelling[key], []).append((handle.name, data_type))

        return union_columns, first_types, seen_types

    @staticmethod
    def _find_type_drift(seen_types: Dict[str, List[Tuple[str, str]]]) -> List[TypeDrift]:
        drift = []
        for column, types in seen_types.items():
            if len({t for _, t in types}) > 1:
                entry = TypeDrift(column=column, types_by_table=tuple(types))
                logger.warning(
                    f"Column {column} has differing types across years: "
                    f"{', '.join(entry.distinct_types)}"
                )
                drift.append(entry)
        return drift
