"""Exception types for IPEDSR."""

from typing import Iterable, Optional


class IpedsError(Exception):
    """
    Base exception for all IPEDSR errors
    """
    pass


class UnknownSurveyError(IpedsError, KeyError):
    """
    Raised when a survey or lineage id is not present in the registry
    """

    def __init__(self, survey_id: str, available: Optional[Iterable[str]] = None):
        self.survey_id = survey_id
        self.available = list(available or [])
        message = f"Survey '{survey_id}' not found in registry"
        if self.available:
            message += f". Available surveys: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class CatalogError(IpedsError):
    """
    Raised when the catalog cannot answer a metadata or data request
    """
    pass


class TableNotFoundError(CatalogError):
    """
    Raised when a table is not present in the catalog
    """

    def __init__(self, table_name: str, message: Optional[str] = None):
        self.table_name = table_name
        super().__init__(message or f"Table '{table_name}' not found in catalog")


class PatternMatchError(IpedsError):
    """
    Raised when a registry pattern is not a valid regular expression
    """
    pass
