"""
IPEDS Survey Registry - single source of truth for survey table patterns.

Every survey family in the database (salaries, enrollment, completions, ...)
is registered here with the regex that matches all of its tables across
years, plus documentation about how its table names and schemas changed
over time.

IMPORTANT: patterns are matched against table names exactly as stored
(lowercase). They are never upper- or lower-cased before matching; a
pattern written in the wrong case matches nothing.

The registry is immutable. Load it once and pass it to the objects that
need it.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Tuple, Union

from ipedsr.exceptions import PatternMatchError, UnknownSurveyError
from .config_loader import ConfigurationError, get_list, load_survey_data
from .logging_config import get_logger

logger = get_logger("survey_registry")


# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class FormatChange:
    """A documented schema or naming break for a survey."""
    era_label: str
    description: str


@dataclass(frozen=True)
class SurveyDefinition:
    """Complete definition of one IPEDS survey family."""
    id: str
    pattern: str
    description: str
    table_format: str = ""
    category: str = "other"
    format_changes: Tuple[FormatChange, ...] = ()
    notes: str = ""


@dataclass(frozen=True)
class SurveySummary:
    """Short listing entry for a survey."""
    id: str
    description: str
    category: str


@dataclass(frozen=True)
class EraSegment:
    """One era of a lineage, served by a single registered survey."""
    label: str
    survey_id: str
    first_year: Optional[int] = None
    last_year: Optional[int] = None

    def clamp(
        self, year_min: Optional[int], year_max: Optional[int]
    ) -> Optional[Tuple[Optional[int], Optional[int]]]:
        """
        Intersect a requested year range with this segment.

        Returns:
            (low, high) bounds to query this segment with, or None if the
            ranges do not overlap
        """
        low = _max_bound(year_min, self.first_year)
        high = _min_bound(year_max, self.last_year)
        if low is not None and high is not None and low > high:
            return None
        return low, high


@dataclass(frozen=True)
class SurveyLineage:
    """A logical survey whose tables changed name across eras."""
    id: str
    description: str
    segments: Tuple[EraSegment, ...] = ()

    def survey_ids(self) -> List[str]:
        """Registered survey ids in era order."""
        return [segment.survey_id for segment in self.segments]


def _max_bound(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _min_bound(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


# =============================================================================
# REGISTRY
# =============================================================================

class SurveyRegistry:
    """
    Immutable lookup of survey definitions and lineages.

    Patterns are compiled once when the registry is built. A pattern that
    does not compile is a defect in the registry itself and raises
    PatternMatchError immediately.
    """

    def __init__(
        self,
        surveys: Iterable[SurveyDefinition],
        lineages: Iterable[SurveyLineage] = (),
    ):
        survey_map: Dict[str, SurveyDefinition] = {}
        compiled: Dict[str, Pattern[str]] = {}

        for survey in surveys:
            if survey.id in survey_map:
                raise ConfigurationError(f"Duplicate survey id in registry: {survey.id}")
            try:
                compiled[survey.id] = re.compile(survey.pattern)
            except re.error as e:
                raise PatternMatchError(
                    f"Invalid pattern for survey '{survey.id}': {survey.pattern!r} ({e})"
                ) from e
            survey_map[survey.id] = survey

        lineage_map: Dict[str, SurveyLineage] = {}
        for lineage in lineages:
            if lineage.id in lineage_map:
                raise ConfigurationError(f"Duplicate lineage id in registry: {lineage.id}")
            for segment in lineage.segments:
                if segment.survey_id not in survey_map:
                    raise ConfigurationError(
                        f"Lineage '{lineage.id}' refers to unknown survey '{segment.survey_id}'"
                    )
            lineage_map[lineage.id] = lineage

        self._surveys: Mapping[str, SurveyDefinition] = MappingProxyType(survey_map)
        self._compiled: Mapping[str, Pattern[str]] = MappingProxyType(compiled)
        self._lineages: Mapping[str, SurveyLineage] = MappingProxyType(lineage_map)

    def __contains__(self, survey_id: object) -> bool:
        return survey_id in self._surveys

    def __len__(self) -> int:
        return len(self._surveys)

    @property
    def survey_ids(self) -> List[str]:
        """Registered survey ids in registry order."""
        return list(self._surveys)

    def get_info(self, survey_id: str) -> SurveyDefinition:
        """
        Get the full definition of a survey.

        Args:
            survey_id: Registered survey id

        Returns:
            SurveyDefinition

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        try:
            return self._surveys[survey_id]
        except KeyError:
            raise UnknownSurveyError(survey_id, self._surveys) from None

    def get_pattern(self, survey_id: str) -> str:
        """
        Get the table name pattern for a survey.

        Args:
            survey_id: Registered survey id

        Returns:
            Regex pattern string

        Raises:
            UnknownSurveyError: If the survey is not registered
        """
        return self.get_info(survey_id).pattern

    def get_compiled_pattern(self, survey_id: str) -> Pattern[str]:
        """Get the compiled pattern for a survey."""
        self.get_info(survey_id)
        return self._compiled[survey_id]

    def list_surveys(self, category: Optional[str] = None) -> List[SurveySummary]:
        """
        List registered surveys in registry order.

        Args:
            category: Optional category filter (personnel, enrollment, ...)

        Returns:
            List of SurveySummary
        """
        return [
            SurveySummary(id=s.id, description=s.description, category=s.category)
            for s in self._surveys.values()
            if category is None or s.category == category
        ]

    def get_lineage(self, lineage_id: str) -> SurveyLineage:
        """
        Get a lineage definition.

        Raises:
            UnknownSurveyError: If the lineage is not registered
        """
        try:
            return self._lineages[lineage_id]
        except KeyError:
            raise UnknownSurveyError(lineage_id, self._lineages) from None

    def list_lineages(self) -> List[SurveyLineage]:
        """Registered lineages in registry order."""
        return list(self._lineages.values())

    def format_info(self, survey_id: str) -> str:
        """Render a survey definition as readable text."""
        info = self.get_info(survey_id)
        rule = "=" * 70
        lines = [
            f"Survey: {info.id}",
            rule,
            f"Description:   {info.description}",
            f"Category:      {info.category}",
            f"Pattern:       {info.pattern}",
            f"Table Format:  {info.table_format}",
        ]
        if info.format_changes:
            lines.append("")
            lines.append("Format Changes:")
            for change in info.format_changes:
                lines.append(f"  {change.era_label}: {change.description}")
        if info.notes:
            lines.append("")
            lines.append(f"Notes: {info.notes}")
        lines.append(rule)
        return "\n".join(lines)


# =============================================================================
# LOADING
# =============================================================================

def _optional_int(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{what} must be an integer year, got {value!r}")


def _parse_survey(survey_id: str, entry: Dict[str, Any]) -> SurveyDefinition:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Survey '{survey_id}' must be a mapping")
    if not entry.get("pattern"):
        raise ConfigurationError(f"Survey '{survey_id}' has no pattern")

    changes = []
    for change in get_list(entry, "format_changes"):
        try:
            changes.append(FormatChange(str(change["era"]), str(change["description"])))
        except (KeyError, TypeError):
            raise ConfigurationError(
                f"Survey '{survey_id}' format_changes entries need 'era' and 'description'"
            )

    return SurveyDefinition(
        id=str(survey_id),
        pattern=str(entry["pattern"]),
        description=str(entry.get("description", "")),
        table_format=str(entry.get("table_format", "")),
        category=str(entry.get("category", "other")),
        format_changes=tuple(changes),
        notes=str(entry.get("notes", "")),
    )


def _parse_lineage(lineage_id: str, entry: Dict[str, Any]) -> SurveyLineage:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Lineage '{lineage_id}' must be a mapping")

    segments = []
    for raw in get_list(entry, "segments"):
        if not isinstance(raw, dict) or "survey" not in raw:
            raise ConfigurationError(f"Lineage '{lineage_id}' segments need a 'survey'")
        segments.append(EraSegment(
            label=str(raw.get("label", raw["survey"])),
            survey_id=str(raw["survey"]),
            first_year=_optional_int(raw.get("first_year"), f"{lineage_id}.first_year"),
            last_year=_optional_int(raw.get("last_year"), f"{lineage_id}.last_year"),
        ))

    if not segments:
        raise ConfigurationError(f"Lineage '{lineage_id}' has no segments")

    return SurveyLineage(
        id=str(lineage_id),
        description=str(entry.get("description", "")),
        segments=tuple(segments),
    )


def load_registry(path: Optional[Union[str, Path]] = None) -> SurveyRegistry:
    """
    Build a registry from a YAML file.

    Args:
        path: Registry file. Defaults to the packaged surveys.yaml.

    Returns:
        SurveyRegistry

    Raises:
        ConfigurationError: If the file is missing or malformed
        PatternMatchError: If a survey pattern does not compile
    """
    data = load_survey_data(path)
    surveys = [_parse_survey(sid, entry) for sid, entry in data["surveys"].items()]
    lineages = [_parse_lineage(lid, entry) for lid, entry in data["lineages"].items()]

    registry = SurveyRegistry(surveys, lineages)
    logger.debug(f"Loaded survey registry: {len(surveys)} surveys, {len(lineages)} lineages")
    return registry


@lru_cache(maxsize=1)
def get_default_registry() -> SurveyRegistry:
    """Get the packaged survey registry, loading it on first use."""
    return load_registry()
