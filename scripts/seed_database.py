#!/usr/bin/env python3
"""
Seed the relational store from the reference document.

Clears procedures, hidden costs and hospitals, then inserts every
country/state from the JSON file in a single transaction. Runs offline,
before the API starts serving.

Usage:
    python scripts/seed_database.py --data data/healthcare_data.json
    python scripts/seed_database.py --database-url sqlite:///data/local_dev.db --create-tables
"""

import argparse
import logging
import sys
from pathlib import Path

from sqlalchemy.orm import sessionmaker

from healthflow.config import settings
from healthflow.core.exceptions import MalformedCatalogError, StoreFailure
from healthflow.db.base import Base
from healthflow.db.session import build_engine
from healthflow.models import Procedure, HiddenCost, Hospital  # noqa: F401  (registers tables)
from healthflow.services.catalog_service import load
from healthflow.services.procedure_store import ProcedureStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("seed_database")


def seed_from_file(data_path: Path, database_url: str, create_tables: bool = False) -> int:
    """
    Seed the store from a reference file.

    Returns:
        Process exit code.
    """
    try:
        catalog = load(data_path.read_text(encoding="utf-8"))
    except (OSError, MalformedCatalogError) as e:
        logger.error(f"Cannot read reference data {data_path}: {e}")
        return 1

    engine = build_engine(database_url)
    if create_tables:
        Base.metadata.create_all(bind=engine)

    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        summary = ProcedureStore(session).seed(catalog)
    except StoreFailure as e:
        logger.error(f"Seeding failed: {e}")
        return 1
    finally:
        session.close()
        engine.dispose()

    logger.info(
        f"Database seeded: {summary.procedures} procedures, "
        f"{summary.hidden_costs} hidden costs, {summary.hospitals} hospitals"
    )
    return 0


def main():
    """Main entry point for CLI usage."""
    parser = argparse.ArgumentParser(
        description="Seed procedures, hidden costs and hospitals from the reference JSON."
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=settings.REFERENCE_DATA_PATH,
        help="Path to the reference JSON document",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=settings.DATABASE_URL,
        help="SQLAlchemy database URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding (local development)",
    )
    args = parser.parse_args()
    sys.exit(seed_from_file(args.data, args.database_url, args.create_tables))


if __name__ == "__main__":
    main()
