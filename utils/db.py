from contextlib import contextmanager
from datetime import datetime, timezone

from extensions import db
from services.errors import NotFoundError


def utcnow():
    """Naive UTC timestamp, the form the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@contextmanager
def unit_of_work():
    """Scope one transaction on the request session.

    Commits when the block finishes and rolls back on any exception before
    re-raising it.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_or_404(model, pk, label):
    """Load ``model`` by primary key or raise NotFoundError."""
    row = db.session.get(model, pk)
    if row is None:
        raise NotFoundError(f"{label} with ID {pk} not found")
    return row
