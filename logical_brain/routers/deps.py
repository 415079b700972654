from fastapi import Depends
from sqlalchemy.orm import Session

from logical_brain.database import get_db
from logical_brain.services.catalog import ReferenceCatalog, load_catalog


def get_catalog(db: Session = Depends(get_db)) -> ReferenceCatalog:
    return load_catalog(db)
