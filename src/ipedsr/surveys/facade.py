"""Survey query entry point for reporting code.

Combines the registry, the resolver and the reconciler. Every call lists
the live catalog again; nothing is cached between calls because survey
components are published, and imported, throughout the year.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ipedsr.config.logging_config import get_logger
from ipedsr.config.survey_registry import SurveyRegistry, get_default_registry
from ipedsr.database.catalog import Catalog
from .reconciler import ConsolidatedRelation, SchemaReconciler
from .resolver import TableHandle, TableResolver, sort_handles
from .years import year_in_range

logger = get_logger("surveys")


@dataclass
class SurveyCoverage:
    """Which years of a survey are present in the catalog."""
    survey_id: str
    tables: List[str] = field(default_factory=list)
    years: List[int] = field(default_factory=list)
    undated_tables: List[str] = field(default_factory=list)

    @property
    def first_year(self) -> Optional[int]:
        return min(self.years) if self.years else None

    @property
    def last_year(self) -> Optional[int]:
        return max(self.years) if self.years else None

    @property
    def missing_years(self) -> List[int]:
        """Years inside the covered span with no table."""
        if not self.years:
            return []
        present = set(self.years)
        return [y for y in range(self.first_year, self.last_year + 1) if y not in present]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "survey": self.survey_id,
            "table_count": len(self.tables),
            "first_year": self.first_year,
            "last_year": self.last_year,
            "missing_years": self.missing_years,
        }


class SurveyQuery:
    """
    Survey-level access to the IPEDS catalog.

    Example:
        with get_connection() as conn:
            surveys = SurveyQuery(Catalog(conn))
            salaries = surveys.get_consolidated("salaries", 2015, 2020).to_df()
    """

    def __init__(self, catalog: Catalog, registry: Optional[SurveyRegistry] = None):
        """
        Initialize survey query facade.

        Args:
            catalog: Catalog to query
            registry: Survey registry. Defaults to the packaged registry.
        """
        self.catalog = catalog
        self.registry = registry if registry is not None else get_default_registry()
        self.resolver = TableResolver(catalog)
        self.reconciler = SchemaReconciler(catalog)

    def get_tables(
        self,
        survey_id: str,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
    ) -> List[TableHandle]:
        """
        Get the tables of a survey, optionally limited to a year range.

        Tables with no year in their name are returned only when no bound
        is given.

        Args:
            survey_id: Registered survey id
            year_min: Inclusive lower year bound
            year_max: Inclusive upper year bound

        Returns:
            TableHandles ordered by year then name; empty if none exist

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        pattern = self.registry.get_compiled_pattern(survey_id)
        handles = [
            h for h in self.resolver.resolve(pattern)
            if year_in_range(h.year, year_min, year_max)
        ]
        logger.debug(f"{survey_id}: {len(handles)} table(s) for years {year_min}-{year_max}")
        return handles

    def get_consolidated(
        self,
        survey_id: str,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
    ) -> ConsolidatedRelation:
        """
        Get a survey's tables stacked into one relation with a YEAR column.

        Args:
            survey_id: Registered survey id
            year_min: Inclusive lower year bound
            year_max: Inclusive upper year bound

        Returns:
            ConsolidatedRelation; empty when no tables exist

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        handles = self.get_tables(survey_id, year_min, year_max)
        if not handles:
            logger.info(f"No tables found for survey '{survey_id}'")
        return self.reconciler.reconcile(handles)

    def get_lineage_tables(
        self,
        lineage_id: str,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
    ) -> List[TableHandle]:
        """
        Get the tables of a lineage, each era limited to its own years.

        Args:
            lineage_id: Registered lineage id (e.g. 'admissions')
            year_min: Inclusive lower year bound
            year_max: Inclusive upper year bound

        Returns:
            TableHandles across eras ordered by year then name

        Raises:
            UnknownSurveyError: If the lineage is not registered
        """
        lineage = self.registry.get_lineage(lineage_id)
        handles: List[TableHandle] = []
        for segment in lineage.segments:
            bounds = segment.clamp(year_min, year_max)
            if bounds is None:
                continue
            handles.extend(self.get_tables(segment.survey_id, *bounds))
        # A name can satisfy more than one era's pattern
        unique = {h.name: h for h in handles}
        return sort_handles(list(unique.values()))

    def get_lineage_consolidated(
        self,
        lineage_id: str,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
    ) -> ConsolidatedRelation:
        """Consolidate every era of a lineage into one relation."""
        return self.reconciler.reconcile(self.get_lineage_tables(lineage_id, year_min, year_max))

    def materialize(
        self,
        survey_id: str,
        table_name: Optional[str] = None,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
    ) -> int:
        """
        Store a survey's consolidation as a table.

        Args:
            survey_id: Registered survey id
            table_name: Target table. Defaults to '<survey_id>_all'.
            year_min: Inclusive lower year bound
            year_max: Inclusive upper year bound

        Returns:
            Rows written

        Raises:
            UnknownSurveyError: If the survey is not registered
            CatalogError: If the database is read-only or the write fails
        """
        target = table_name or f"{survey_id}_all"
        relation = self.get_consolidated(survey_id, year_min, year_max)
        return relation.materialize(target)

    def coverage(self, survey_id: str) -> SurveyCoverage:
        """
        Report which years of a survey are present.

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        handles = self.get_tables(survey_id)
        return SurveyCoverage(
            survey_id=survey_id,
            tables=[h.name for h in handles],
            years=sorted({h.year for h in handles if h.year is not None}),
            undated_tables=[h.name for h in handles if h.year is None],
        )

    def coverage_report(self) -> pd.DataFrame:
        """
        Year coverage of every registered survey.

        Returns:
            DataFrame with survey, table_count, first_year, last_year,
            missing_years; one row per survey in registry order
        """
        rows = [self.coverage(survey_id).to_dict() for survey_id in self.registry.survey_ids]
        return pd.DataFrame(
            rows, columns=["survey", "table_count", "first_year", "last_year", "missing_years"]
        )

    def find_case_mismatches(self, survey_id: str) -> List[str]:
        """
        Tables that a survey's pattern would match if case were ignored.

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        return self.resolver.find_case_mismatches(self.registry.get_compiled_pattern(survey_id))
