# Overview: Transaction helpers shared by the multi-statement services.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Lock the selected table/stock/sequence row until the transaction ends.

    SQLite has no row locks and serialises writers instead; PostgreSQL and
    MySQL honour SELECT ... FOR UPDATE.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on: tuple = ()):
    """
    Execute a unit of work as one transaction.

    Any exception rolls the session back before it propagates, so a failed
    call leaves no partial writes. Lock conflicts (OperationalError),
    optimistic-locking conflicts (StaleDataError) and any extra exception
    types in retry_on are retried with exponential backoff.
    """
    retryable = (OperationalError, StaleDataError) + tuple(retry_on)
    for attempt in range(attempts):
        try:
            return func()
        except retryable as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Retrying transaction after %s (attempt %d/%d)",
                type(exc).__name__, attempt + 1, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
