"""
Pathway Resolution Service.

Resolves a free-text procedure name, a location and an income level into a
single Pathway by walking an ordered fallback chain:

1. store-exact       - substring match in the relational store
2. catalog           - substring match in the state's reference catalog entry
3. national-average  - fixed placeholder estimate, flagged as degraded

Each step returns Found or MISS and the first Found wins. Unknown
countries/states are rejected before the chain starts. Hospitals of the
winning tier go through the eligibility filter.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from healthflow.config import settings
from healthflow.core.exceptions import LocationNotFound, ProcedureNotFound
from healthflow.core.metrics import track_pathway_not_found, track_pathway_resolution
from healthflow.schemas.catalog import CatalogCountry, CatalogState
from healthflow.schemas.pathway import (
    HiddenCostRead, HospitalRead, IncomeLevel, Pathway, ProcedureEstimate, ResolutionTier,
)
from healthflow.services.catalog_service import ReferenceCatalog
from healthflow.services.eligibility import filter_hospitals, requires_pmjay
from healthflow.services.procedure_store import (
    ProcedureStore, hospital_location, is_government_hospital,
)

logger = logging.getLogger(__name__)

NATIONAL_AVERAGE_NOTE = "State-specific data missing, showing national average."


@dataclass(frozen=True)
class Location:
    country: str
    state: str


@dataclass(frozen=True)
class Found:
    """A tier produced a procedure estimate."""
    tier: ResolutionTier
    procedure: ProcedureEstimate
    hidden_costs: List[HiddenCostRead] = field(default_factory=list)
    hospitals: List[HospitalRead] = field(default_factory=list)
    note: Optional[str] = None


class Miss:
    """A tier had no record for the query."""

    def __repr__(self) -> str:
        return "MISS"


MISS = Miss()

LookupResult = Union[Found, Miss]


@dataclass(frozen=True)
class _ResolutionContext:
    query: str
    location: Location
    income_level: IncomeLevel
    country: Optional[CatalogCountry]
    state: Optional[CatalogState]


LookupStep = Callable[[_ResolutionContext], LookupResult]


class PathwayResolver:
    """
    Walks ProcedureStore, then ReferenceCatalog, then the national average.

    Holds no per-request state; one instance may serve one request or many.
    """

    def __init__(
        self,
        store: ProcedureStore,
        catalog: ReferenceCatalog,
        national_average_cost: Optional[float] = None,
        default_currency_symbol: Optional[str] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.national_average_cost = (
            settings.NATIONAL_AVERAGE_COST if national_average_cost is None else national_average_cost
        )
        self.default_currency_symbol = default_currency_symbol or settings.DEFAULT_CURRENCY_SYMBOL

    # ============================================
    # Public API
    # ============================================

    def resolve(
        self,
        procedure_query: str,
        location: Location,
        income_level: Union[IncomeLevel, str, None] = IncomeLevel.UNSPECIFIED,
    ) -> Pathway:
        """
        Resolve a procedure query to a Pathway.

        Raises:
            LocationNotFound: Country or state unknown to the catalog.
            ProcedureNotFound: Empty query, or no tier could resolve it
                (only possible when the catalog is unavailable).
            StoreFailure: The relational store failed.
        """
        income = IncomeLevel.parse(income_level)
        query = (procedure_query or "").strip()
        if not query:
            track_pathway_not_found("empty_query")
            raise ProcedureNotFound("Procedure name is required.")

        context = self._build_context(query, location, income)

        for step in self._steps(context):
            result = step(context)
            if isinstance(result, Found):
                break
        else:
            logger.info(f"No tier resolved {query!r} (catalog unavailable)")
            track_pathway_not_found("procedure")
            raise ProcedureNotFound("Procedure not found in our database yet.")

        if result.tier == ResolutionTier.NATIONAL_AVERAGE:
            logger.warning(
                f"Degraded match for {query!r} in {location.state}, {location.country}: using national average"
            )
        track_pathway_resolution(result.tier.value)

        hospitals = filter_hospitals(result.hospitals, income, location_hint=location.state)
        currency = context.country.currency_symbol if context.country else self.default_currency_symbol

        return Pathway(
            procedure=result.procedure,
            hidden_costs=list(result.hidden_costs),
            hospitals=hospitals,
            currency_symbol=currency,
            income_level=income,
            resolution_tier=result.tier,
            note=result.note,
        )

    # ============================================
    # Chain construction
    # ============================================

    def _build_context(self, query: str, location: Location, income: IncomeLevel) -> _ResolutionContext:
        if self.catalog.is_empty:
            # Degraded mode: locations cannot be validated, only the store tier runs
            logger.warning("Reference catalog unavailable; resolving from the store only")
            return _ResolutionContext(query, location, income, country=None, state=None)

        country = self.catalog.get_country(location.country)
        if country is None:
            track_pathway_not_found("country")
            raise LocationNotFound(f"Country not found: {location.country}")

        state = self.catalog.get_state(location.country, location.state)
        if state is None:
            track_pathway_not_found("state")
            raise LocationNotFound(f"State not found: {location.state}")

        return _ResolutionContext(query, location, income, country=country, state=state)

    def _steps(self, context: _ResolutionContext) -> List[LookupStep]:
        steps: List[LookupStep] = [self._lookup_store]
        if context.state is not None:
            steps.append(self._lookup_catalog)
            steps.append(self._national_average)
        return steps

    # ============================================
    # Tiers
    # ============================================

    def _lookup_store(self, context: _ResolutionContext) -> LookupResult:
        procedure = self.store.find_procedure(context.query)
        if procedure is None:
            return MISS

        hidden_costs = self.store.hidden_costs_for(procedure.id)
        hospitals = self.store.list_hospitals(pmjay_only=requires_pmjay(context.income_level))

        return Found(
            tier=ResolutionTier.STORE_EXACT,
            procedure=ProcedureEstimate(
                id=procedure.id,
                name=procedure.name,
                avg_private_cost=procedure.avg_private_cost,
                govt_rate=procedure.pmjay_rate,
                recovery_days=procedure.recovery_days,
            ),
            hidden_costs=[HiddenCostRead.model_validate(cost) for cost in hidden_costs],
            hospitals=[HospitalRead.model_validate(h) for h in hospitals],
        )

    def _lookup_catalog(self, context: _ResolutionContext) -> LookupResult:
        state = context.state
        procedure = ReferenceCatalog.find_procedure(state, context.query)
        if procedure is None:
            return MISS

        return Found(
            tier=ResolutionTier.CATALOG,
            procedure=ProcedureEstimate(
                name=procedure.name,
                avg_private_cost=procedure.avg_cost_private,
                govt_rate=procedure.avg_cost_govt,
            ),
            hidden_costs=[
                HiddenCostRead(item_name=cost.item, avg_cost=cost.cost, description=cost.note)
                for cost in procedure.hidden_costs
            ],
            hospitals=[
                HospitalRead(
                    name=hosp.name,
                    location=hospital_location(hosp.city, state.name),
                    is_pmjay_empaneled=is_government_hospital(hosp.type),
                    rating=hosp.rating,
                )
                for hosp in state.hospitals
            ],
        )

    def _national_average(self, context: _ResolutionContext) -> LookupResult:
        return Found(
            tier=ResolutionTier.NATIONAL_AVERAGE,
            procedure=ProcedureEstimate(
                name=context.query,
                avg_private_cost=self.national_average_cost,
            ),
            note=NATIONAL_AVERAGE_NOTE,
        )
