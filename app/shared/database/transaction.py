# app/shared/database/transaction.py
import logging
from contextlib import contextmanager

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, conflict_detail: str = "Conflicting concurrent update, please retry"):
    """
    One commit per stock-mutating operation.

    Any exception rolls the whole unit back (releasing row locks) and is
    re-raised; a unique-constraint violation surfaces as 409.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity conflict: {e.orig}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail) from e
    except Exception:
        db.rollback()
        raise
