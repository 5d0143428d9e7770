"""
Per-team serialization for transfer commits.

Two requests for the same team must never both pass an affordability
check against the same stale balance. The database transaction
(BEGIN IMMEDIATE) serializes writers across processes; this process-local
lock additionally keeps same-process requests for one team from queueing
on the database busy timeout.

Callers lock on the stored team id (after looking the team up), so the
registry holds at most one lock per existing team.
"""

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Iterator, Optional

_REGISTRY_LOCK = Lock()
_TEAM_LOCKS: dict[str, RLock] = {}


def _lock_for(team_id: str) -> RLock:
    with _REGISTRY_LOCK:
        lock = _TEAM_LOCKS.get(team_id)
        if lock is None:
            lock = RLock()
            _TEAM_LOCKS[team_id] = lock
        return lock


@contextmanager
def team_transfer_lock(team_id: str, *, timeout_s: Optional[float] = None) -> Iterator[None]:
    """
    Hold the transfer lock for one team.

    Args:
        team_id: Team whose ledger is about to change.
        timeout_s: Seconds to wait for the lock. None waits indefinitely.

    Raises:
        TimeoutError: The lock was not acquired within timeout_s.

    Usage:
        with team_transfer_lock(team_id, timeout_s=5.0):
            ...  # re-read ledger, validate, commit
    """
    lock = _lock_for(str(team_id))
    if timeout_s is None:
        acquired = lock.acquire()
    else:
        acquired = lock.acquire(timeout=max(0.0, float(timeout_s)))

    if not acquired:
        raise TimeoutError(f"team_transfer_lock timeout for team {team_id} (timeout_s={timeout_s})")

    try:
        yield
    finally:
        lock.release()
