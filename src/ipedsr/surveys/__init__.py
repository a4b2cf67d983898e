"""Survey table resolution and consolidation."""

from .years import (
    CENTURY_PIVOT,
    extract_year,
    pivot_two_digit_year,
    year_in_range,
)
from .resolver import (
    TableHandle,
    TableResolver,
    compile_pattern,
    sort_handles,
)
from .reconciler import (
    YEAR_COLUMN,
    ReconcileWarning,
    TypeDrift,
    TableProjection,
    ConsolidatedRelation,
    SchemaReconciler,
)
from .facade import (
    SurveyCoverage,
    SurveyQuery,
)
from .dictionary import (
    dictionary_table_name,
    get_variables,
    get_valueset,
    decode_values,
)

__all__ = [
    # Years
    "CENTURY_PIVOT",
    "extract_year",
    "pivot_two_digit_year",
    "year_in_range",
    # Resolver
    "TableHandle",
    "TableResolver",
    "compile_pattern",
    "sort_handles",
    # Reconciler
    "YEAR_COLUMN",
    "ReconcileWarning",
    "TypeDrift",
    "TableProjection",
    "ConsolidatedRelation",
    "SchemaReconciler",
    # Facade
    "SurveyCoverage",
    "SurveyQuery",
    # Dictionary
    "dictionary_table_name",
    "get_variables",
    "get_valueset",
    "decode_values",
]
