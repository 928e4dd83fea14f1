"""
Hospital eligibility rules.

Low and middle income patients are only recommended PMJAY-empaneled
hospitals; everyone else sees every hospital. An optional location hint
narrows the list further. Results are ordered by rating, best first.
"""

from typing import Iterable, List, Optional

from healthflow.schemas.pathway import HospitalRead, IncomeLevel

PMJAY_ONLY_INCOME_LEVELS = frozenset({IncomeLevel.LOW, IncomeLevel.MIDDLE})


def requires_pmjay(income_level: IncomeLevel) -> bool:
    """Whether this income level is restricted to PMJAY-empaneled hospitals."""
    return IncomeLevel.parse(income_level) in PMJAY_ONLY_INCOME_LEVELS


def filter_hospitals(
    hospitals: Iterable[HospitalRead],
    income_level: IncomeLevel,
    location_hint: Optional[str] = None,
) -> List[HospitalRead]:
    """
    Apply income and location eligibility, then sort by rating.

    Args:
        hospitals: Candidate hospitals; not modified.
        income_level: Patient income classification.
        location_hint: Optional case-insensitive substring of ``location``
            (typically a state name).

    Returns:
        New list sorted by rating descending. Hospitals with equal ratings
        keep their input order.
    """
    eligible = list(hospitals)

    if requires_pmjay(income_level):
        eligible = [h for h in eligible if h.is_pmjay_empaneled]

    hint = (location_hint or "").strip().lower()
    if hint:
        eligible = [h for h in eligible if hint in h.location.lower()]

    # sorted() is stable, including with reverse=True
    return sorted(eligible, key=lambda h: h.rating, reverse=True)
