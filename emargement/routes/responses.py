import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def store_failure(db: Session, exc: SQLAlchemyError, action: str) -> HTTPException:
    """Roll back, log the store error and build the generic 500 to raise.

    The driver message stays in the log and is never echoed to the client.
    """
    db.rollback()
    logger.error('Database error while %s: %s', action, exc, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail='Database error.',
    )
