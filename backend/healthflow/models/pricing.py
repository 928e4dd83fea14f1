"""
Procedure Pricing Models.

Canonical relational records for procedures, their hidden-cost line items
and hospitals. Rows are produced by the offline seeding transaction and are
read-only on the serving path.
"""

from typing import Optional

from sqlalchemy import String, Integer, Float, ForeignKey, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from healthflow.db.base import Base, IDMixin


class Procedure(Base, IDMixin):
    """
    Canonical procedure with private and PMJAY package costs.

    Resolution matches free-text queries against ``name`` by
    case-insensitive substring, first row by ``id`` wins.
    """
    __tablename__ = "procedures"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    avg_private_cost: Mapped[float] = mapped_column(Float, nullable=False)
    pmjay_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    recovery_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    hidden_costs = relationship(
        "HiddenCost",
        back_populates="procedure",
        cascade="all, delete-orphan",
        order_by="HiddenCost.id",
    )

    def __repr__(self) -> str:
        return f"<Procedure(id={self.id}, name={self.name})>"


class HiddenCost(Base, IDMixin):
    """Cost line item typically left out of a procedure's sticker price."""
    __tablename__ = "hidden_costs"

    procedure_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("procedures.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    avg_cost: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_avoidable: Mapped[bool] = mapped_column(Boolean, default=True)

    procedure = relationship("Procedure", back_populates="hidden_costs")

    def __repr__(self) -> str:
        return f"<HiddenCost(id={self.id}, item={self.item_name}, procedure_id={self.procedure_id})>"


class Hospital(Base, IDMixin):
    """
    Hospital available for recommendation.

    ``location`` is stored as "City, State" so a state name works as a
    substring location hint.
    """
    __tablename__ = "hospitals"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    is_pmjay_empaneled: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    rating: Mapped[float] = mapped_column(Float, default=0.0)

    def __repr__(self) -> str:
        return f"<Hospital(id={self.id}, name={self.name}, location={self.location})>"
