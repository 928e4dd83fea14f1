"""
Procedure Store.

Read access to the canonical relational store (procedures, hidden costs,
hospitals) plus the offline seeding transaction that populates it from the
reference document.

Every query is independently atomic; the resolver's procedure -> hidden
costs -> hospitals reads are deliberately not wrapped in one transaction.
Failures surface as StoreFailure and are not retried.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from healthflow.config import settings
from healthflow.core.exceptions import StoreFailure
from healthflow.models.pricing import HiddenCost, Hospital, Procedure
from healthflow.schemas.catalog import CatalogCountry

logger = logging.getLogger(__name__)

GOVERNMENT_HOSPITAL_TYPE = "government"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def hospital_location(city: str, state: str) -> str:
    """Location string shared by seeded rows and catalog hospitals."""
    return f"{city}, {state}" if city else state


def is_government_hospital(hospital_type: Optional[str]) -> bool:
    """Government hospitals are treated as PMJAY-empaneled."""
    return (hospital_type or "").strip().lower() == GOVERNMENT_HOSPITAL_TYPE


@dataclass
class SeedSummary:
    """Row counts written by one seeding run."""
    hospitals: int = 0
    procedures: int = 0
    hidden_costs: int = 0


class ProcedureStore:
    """Repository over the procedures/hidden_costs/hospitals tables."""

    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # Read path
    # ============================================

    def find_procedure(self, query: str) -> Optional[Procedure]:
        """
        First procedure (lowest id) whose name contains the query,
        case-insensitively.
        """
        needle = query.strip()
        if not needle:
            return None
        stmt = (
            select(Procedure)
            .where(Procedure.name.ilike(f"%{_escape_like(needle)}%", escape="\\"))
            .order_by(Procedure.id)
            .limit(1)
        )
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Procedure lookup failed for {needle!r}: {e}")
            raise StoreFailure("Procedure lookup failed") from e

    def hidden_costs_for(self, procedure_id: int) -> List[HiddenCost]:
        stmt = (
            select(HiddenCost)
            .where(HiddenCost.procedure_id == procedure_id)
            .order_by(HiddenCost.id)
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Hidden cost lookup failed for procedure {procedure_id}: {e}")
            raise StoreFailure("Hidden cost lookup failed") from e

    def list_hospitals(self, pmjay_only: bool = False) -> List[Hospital]:
        """All hospitals in id order, optionally only PMJAY-empaneled ones."""
        stmt = select(Hospital).order_by(Hospital.id)
        if pmjay_only:
            stmt = stmt.where(Hospital.is_pmjay_empaneled.is_(True))
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Hospital lookup failed: {e}")
            raise StoreFailure("Hospital lookup failed") from e

    # ============================================
    # Seeding (offline, single writer)
    # ============================================

    def seed(self, countries: Iterable[CatalogCountry]) -> SeedSummary:
        """
        Replace the store contents with the reference document.

        Runs as one transaction: existing rows are cleared, then hospitals,
        procedures and their hidden costs are inserted per state. Any failure
        rolls everything back.

        Raises:
            StoreFailure: If any statement fails.
        """
        summary = SeedSummary()
        try:
            self.db.execute(delete(HiddenCost))
            self.db.execute(delete(Procedure))
            self.db.execute(delete(Hospital))

            for country in countries:
                for state in country.states:
                    logger.info(f"Seeding {state.name}, {country.name}")

                    for hosp in state.hospitals:
                        self.db.add(Hospital(
                            name=hosp.name,
                            location=hospital_location(hosp.city, state.name),
                            is_pmjay_empaneled=is_government_hospital(hosp.type),
                            rating=hosp.rating,
                        ))
                        summary.hospitals += 1

                    for proc in state.procedures:
                        procedure = Procedure(
                            name=proc.name,
                            avg_private_cost=proc.avg_cost_private,
                            pmjay_rate=proc.avg_cost_govt,
                            recovery_days=settings.DEFAULT_RECOVERY_DAYS,
                        )
                        procedure.hidden_costs = [
                            HiddenCost(
                                item_name=cost.item,
                                avg_cost=cost.cost,
                                description=cost.note,
                                is_avoidable=True,
                            )
                            for cost in proc.hidden_costs
                        ]
                        self.db.add(procedure)
                        # Flush per procedure so ids follow document order
                        self.db.flush()
                        summary.procedures += 1
                        summary.hidden_costs += len(proc.hidden_costs)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Seeding failed, rolled back: {e}")
            raise StoreFailure("Seeding failed") from e

        logger.info(
            f"Seeded {summary.procedures} procedures, {summary.hidden_costs} hidden costs, "
            f"{summary.hospitals} hospitals"
        )
        return summary
