"""
SQLAlchemy ORM models.

Import all models here for Alembic auto-detection.
"""

from healthflow.models.pricing import Procedure, HiddenCost, Hospital

__all__ = [
    "Procedure",
    "HiddenCost",
    "Hospital",
]
