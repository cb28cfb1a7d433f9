"""
Database helper utilities for the Phorest sync service
Provides the keyed upsert used by every synchronizer
"""
import logging
from typing import Dict, Any
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def upsert_row(model, keys: Dict[str, Any], values: Dict[str, Any]) -> bool:
    """
    Insert or update a single row identified by its natural key.

    Each row is committed on its own so a constraint failure only loses
    that row; the session is rolled back and the caller carries on.

    Args:
        model: SQLAlchemy model class
        keys: Natural/composite key columns and their values
        values: Remaining column values to write

    Returns:
        bool: True if the row was written, False on a database error

    Example:
        >>> upsert_row(Appointment, {'phorest_id': 'A1'}, {'status': 'confirmed'})
        True
    """
    db = current_app.extensions['sqlalchemy']

    try:
        row = model.query.filter_by(**keys).one_or_none()
        if row is None:
            row = model(**keys)
            db.session.add(row)

        for field, value in values.items():
            setattr(row, field, value)

        db.session.commit()
        return True

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning(f"Upsert failed for {model.__tablename__} {keys}: {str(e)}")
        return False
