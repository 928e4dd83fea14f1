"""
Reference Catalog Service.

Immutable country -> state -> procedure/hospital index loaded once at
startup from the bundled JSON file. Used by the resolver as the fallback
source when the relational store has no match, and by the location APIs.

Loading:
- load(raw_document) validates the document into frozen schemas and raises
  MalformedCatalogError if it is not a JSON array of countries. Individual
  countries, states, hospitals or procedures that fail validation are
  quarantined (skipped); the rest of their parent entry is kept.
- load_from_path(path) never raises: a missing or malformed file yields an
  empty catalog and the service runs in degraded mode.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError

from healthflow.core.exceptions import MalformedCatalogError
from healthflow.schemas.catalog import CatalogCountry, CatalogHospital, CatalogProcedure, CatalogState

logger = logging.getLogger(__name__)


class ReferenceCatalog:
    """
    Read-only hierarchical index of the reference document.

    Country and state lookups are case-insensitive equality; procedure
    lookups are case-insensitive substring, first match in document order.
    """

    __slots__ = ("_countries", "_index")

    def __init__(self, countries: Iterable[CatalogCountry] = ()):
        self._countries: Tuple[CatalogCountry, ...] = tuple(countries)
        index = {}
        for country in self._countries:
            # First occurrence wins, same as a linear scan would.
            index.setdefault(country.name.lower(), country)
        self._index = MappingProxyType(index)

    @classmethod
    def empty(cls) -> "ReferenceCatalog":
        return cls(())

    @property
    def is_empty(self) -> bool:
        return not self._countries

    def __len__(self) -> int:
        return len(self._countries)

    def __iter__(self) -> Iterator[CatalogCountry]:
        return iter(self._countries)

    # ============================================
    # Lookups
    # ============================================

    def country_names(self) -> List[str]:
        return [country.name for country in self._countries]

    def get_country(self, name: Optional[str]) -> Optional[CatalogCountry]:
        if not name:
            return None
        return self._index.get(name.strip().lower())

    def state_names(self, country: str) -> Optional[List[str]]:
        """State names for a country, or None if the country is unknown."""
        country_data = self.get_country(country)
        if country_data is None:
            return None
        return [state.name for state in country_data.states]

    def get_state(self, country: str, state: Optional[str]) -> Optional[CatalogState]:
        country_data = self.get_country(country)
        if country_data is None or not state:
            return None
        wanted = state.strip().lower()
        for state_data in country_data.states:
            if state_data.name.lower() == wanted:
                return state_data
        return None

    @staticmethod
    def find_procedure(state: CatalogState, query: str) -> Optional[CatalogProcedure]:
        """First procedure in the state whose name contains the query."""
        needle = query.strip().lower()
        if not needle:
            return None
        for procedure in state.procedures:
            if needle in procedure.name.lower():
                return procedure
        return None

    def __repr__(self) -> str:
        return f"<ReferenceCatalog(countries={len(self._countries)})>"


# ============================================
# Loading
# ============================================

def _parse_rows(raw_rows, model, kind: str, where: str) -> list:
    """Validate hospital or procedure rows one by one, skipping bad rows."""
    rows = []
    for raw_row in raw_rows:
        try:
            rows.append(model.model_validate(raw_row))
        except ValidationError as e:
            row_name = raw_row.get("name") if isinstance(raw_row, dict) else raw_row
            logger.warning(f"Quarantined {kind} {row_name!r} in {where}: {e.error_count()} validation error(s)")
    return rows


def _parse_state(raw_state, country_name) -> Optional[CatalogState]:
    """Validate one state, quarantining malformed hospitals and procedures."""
    if not isinstance(raw_state, dict):
        logger.warning(f"Quarantined state of {country_name!r}: expected object, got {type(raw_state).__name__}")
        return None

    state_name = raw_state.get("state_name")
    where = f"{state_name!r} of {country_name!r}"
    raw_hospitals = raw_state.get("hospitals") or []
    raw_procedures = raw_state.get("procedures") or []
    if not isinstance(raw_hospitals, list) or not isinstance(raw_procedures, list):
        logger.warning(f"Quarantined state {where}: 'hospitals' and 'procedures' must be lists")
        return None

    try:
        return CatalogState.model_validate({
            **raw_state,
            "hospitals": _parse_rows(raw_hospitals, CatalogHospital, "hospital", where),
            "procedures": _parse_rows(raw_procedures, CatalogProcedure, "procedure", where),
        })
    except ValidationError as e:
        logger.warning(f"Quarantined state {where}: {e.error_count()} validation error(s)")
        return None


def _parse_country(entry) -> Optional[CatalogCountry]:
    """Validate one country entry, quarantining malformed states."""
    if not isinstance(entry, dict):
        logger.warning(f"Quarantined catalog entry: expected object, got {type(entry).__name__}")
        return None

    raw_states = entry.get("states") or []
    if not isinstance(raw_states, list):
        logger.warning(f"Quarantined country {entry.get('country')!r}: 'states' is not a list")
        return None

    states = [
        state
        for state in (_parse_state(raw_state, entry.get("country")) for raw_state in raw_states)
        if state is not None
    ]

    try:
        return CatalogCountry.model_validate({**entry, "states": states})
    except ValidationError as e:
        logger.warning(f"Quarantined country {entry.get('country')!r}: {e.error_count()} validation error(s)")
        return None


def load(raw_document: Union[str, bytes, list]) -> ReferenceCatalog:
    """
    Parse the reference document into a catalog.

    Args:
        raw_document: JSON text, or an already-decoded list of countries.

    Returns:
        ReferenceCatalog with every valid country.

    Raises:
        MalformedCatalogError: If the document is not a JSON array.
    """
    if isinstance(raw_document, (str, bytes)):
        try:
            raw_document = json.loads(raw_document)
        except ValueError as e:
            raise MalformedCatalogError(f"Reference document is not valid JSON: {e}") from e

    if not isinstance(raw_document, list):
        raise MalformedCatalogError(
            f"Reference document must be an array of countries, got {type(raw_document).__name__}"
        )

    countries = [country for country in map(_parse_country, raw_document) if country is not None]
    catalog = ReferenceCatalog(countries)
    logger.info(f"Loaded reference catalog: {len(catalog)} countries")
    return catalog


def load_from_path(path: Union[str, Path]) -> ReferenceCatalog:
    """
    Load the catalog from a file, degrading to an empty catalog on failure.

    The store-backed tier keeps working in degraded mode; only the catalog
    and national-average tiers become unavailable.
    """
    filepath = Path(path)
    if not filepath.exists():
        logger.warning(f"Reference data file not found: {filepath}. Running with an empty catalog (degraded mode)")
        return ReferenceCatalog.empty()

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return load(f.read())
    except MalformedCatalogError as e:
        logger.error(f"Malformed reference data in {filepath}: {e}. Running with an empty catalog (degraded mode)")
    except OSError as e:
        logger.error(f"Could not read reference data {filepath}: {e}. Running with an empty catalog (degraded mode)")
    return ReferenceCatalog.empty()
