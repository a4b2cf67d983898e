"""IPEDSR - survey table registry and consolidation over an IPEDS DuckDB database."""

from .exceptions import (
    IpedsError,
    UnknownSurveyError,
    CatalogError,
    TableNotFoundError,
    PatternMatchError,
)
from .config import SurveyRegistry, load_registry, get_default_registry
from .database import Catalog, get_connection
from .surveys import (
    TableHandle,
    TableResolver,
    SchemaReconciler,
    ConsolidatedRelation,
    SurveyQuery,
    extract_year,
)

__version__ = "0.3.0"

__all__ = [
    "IpedsError",
    "UnknownSurveyError",
    "CatalogError",
    "TableNotFoundError",
    "PatternMatchError",
    "SurveyRegistry",
    "load_registry",
    "get_default_registry",
    "Catalog",
    "get_connection",
    "TableHandle",
    "TableResolver",
    "SchemaReconciler",
    "ConsolidatedRelation",
    "SurveyQuery",
    "extract_year",
]
