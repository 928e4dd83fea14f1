#!/usr/bin/env python3
"""
Run the backend locally - No Docker Required!

Usage:
    python backend/run_local.py

Uses a SQLite file under data/, creates the tables and seeds them from the
reference document on first start, then serves the API at
http://localhost:8000
- API Docs: http://localhost:8000/docs
- Health Check: http://localhost:8000/health
"""

import os
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
os.chdir(project_root)

# Set environment for local development (before healthflow reads settings)
os.environ.setdefault("PROJECT_ROOT", str(project_root))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{project_root}/data/local_dev.db")
os.environ.setdefault("DEBUG", "true")


def prepare_database():
    """Create tables and seed them when the procedures table is empty."""
    from sqlalchemy import func, select

    from healthflow.config import settings
    from healthflow.db.base import Base
    from healthflow.db.session import SessionLocal, engine
    from healthflow.models import Procedure
    from healthflow.services.catalog_service import load_from_path
    from healthflow.services.procedure_store import ProcedureStore

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.execute(select(func.count()).select_from(Procedure)).scalar_one():
            return
        catalog = load_from_path(settings.REFERENCE_DATA_PATH)
        summary = ProcedureStore(db).seed(catalog)
        print(f"  Seeded {summary.procedures} procedures and {summary.hospitals} hospitals")
    finally:
        db.close()


def main():
    print("=" * 60)
    print("  HealthFlow - Local Development Server")
    print("=" * 60)
    print()
    prepare_database()
    print()
    print("  API URL:      http://localhost:8000")
    print("  API Docs:     http://localhost:8000/docs")
    print("  Health Check: http://localhost:8000/health")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 60)
    print()

    import uvicorn
    uvicorn.run(
        "healthflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes
        reload_dirs=[str(project_root / "backend" / "healthflow")],
        app_dir=str(project_root / "backend"),
        log_level="info",
    )


if __name__ == "__main__":
    main()
