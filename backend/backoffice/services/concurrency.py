# Overview: Optimistic-lock retry helpers shared by every stock and order mutation.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the version_id check
    on Product/RegionStock is what catches a concurrent writer.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a read-check-write operation with retry on concurrency failures.

    func must do its own reads: on StaleDataError (another writer bumped the
    version) or OperationalError (lock timeout, deadlock) the session is
    rolled back and func runs again against fresh rows, so every business
    check is re-evaluated before the write is retried.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Concurrent update detected (%s), retrying attempt %d/%d",
                type(exc).__name__, attempt + 2, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def commit_session():
    """
    Commit the current session; on failure roll back and re-raise.

    Never retried on its own: retries wrap the whole read-check-write in
    run_with_retry.
    """
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
