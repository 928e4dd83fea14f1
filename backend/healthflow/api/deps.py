"""
API dependencies for dependency injection.

Provides the shared reference catalog, per-request store/resolver and the
advisory grounder.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from healthflow.db.session import get_db
from healthflow.services.advisory_service import AdvisoryGrounder, get_advisory_grounder
from healthflow.services.catalog_service import ReferenceCatalog
from healthflow.services.pathway_service import PathwayResolver
from healthflow.services.procedure_store import ProcedureStore


def get_catalog(request: Request) -> ReferenceCatalog:
    """
    The catalog loaded at startup.

    Falls back to an empty catalog if the app was started without the
    lifespan (degraded mode).
    """
    catalog = getattr(request.app.state, "catalog", None)
    return catalog if catalog is not None else ReferenceCatalog.empty()


def get_procedure_store(db: Annotated[Session, Depends(get_db)]) -> ProcedureStore:
    return ProcedureStore(db)


def get_pathway_resolver(
    store: Annotated[ProcedureStore, Depends(get_procedure_store)],
    catalog: Annotated[ReferenceCatalog, Depends(get_catalog)],
) -> PathwayResolver:
    return PathwayResolver(store=store, catalog=catalog)


def get_advisory() -> AdvisoryGrounder:
    return get_advisory_grounder()
