"""
Sweep Lock Repository.

Responsibilities:
- Hold a named lease row so that two sweeps never overlap.
- Let a new owner take over a lease older than its TTL.
- Let the holder renew its lease while a long sweep runs.

Non-Responsibilities:
- No sweep logic.

Invariant:
The unique constraint on job matches remains the correctness backstop;
the lease only avoids duplicate work.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError

from ...database import SweepLock

SWEEP_LOCK_NAME = "matching_sweep"


def acquire_lock(
    session,
    owner: str,
    ttl_seconds: int,
    name: str = SWEEP_LOCK_NAME,
    now: Optional[datetime] = None,
) -> bool:
    """
    Try to take the named lease.

    Returns:
        True if ``owner`` now holds the lease
    """
    now = now or datetime.now()
    lock = session.query(SweepLock).populate_existing().filter(SweepLock.name == name).first()

    if lock is not None:
        if lock.acquired_at > now - timedelta(seconds=ttl_seconds):
            return False
        # Stale lease: take it over only if nobody else did in between
        updated = (
            session.query(SweepLock)
            .filter(SweepLock.name == name, SweepLock.acquired_at == lock.acquired_at)
            .update({"owner": owner, "acquired_at": now}, synchronize_session=False)
        )
        session.commit()
        session.expire_all()
        return updated == 1

    session.add(SweepLock(name=name, owner=owner, acquired_at=now))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        return False
    return True


def renew_lock(session, owner: str, name: str = SWEEP_LOCK_NAME, now: Optional[datetime] = None) -> bool:
    """Restart the TTL of a lease ``owner`` still holds; False once it was taken over."""
    updated = (
        session.query(SweepLock)
        .filter(SweepLock.name == name, SweepLock.owner == owner)
        .update({"acquired_at": now or datetime.now()}, synchronize_session=False)
    )
    session.commit()
    return updated == 1


def release_lock(session, owner: str, name: str = SWEEP_LOCK_NAME) -> bool:
    deleted = (
        session.query(SweepLock)
        .filter(SweepLock.name == name, SweepLock.owner == owner)
        .delete(synchronize_session="fetch")
    )
    session.commit()
    return deleted == 1


@contextmanager
def held_lock(session_factory, owner: str, ttl_seconds: int, name: str = SWEEP_LOCK_NAME) -> Iterator[bool]:
    """
    Hold the lease for the duration of the block.

    Yields whether the lease was acquired; it is released on exit only
    when it was.
    """
    session = session_factory()
    try:
        acquired = acquire_lock(session, owner, ttl_seconds, name=name)
        try:
            yield acquired
        finally:
            if acquired:
                release_lock(session, owner, name=name)
    finally:
        session.close()
