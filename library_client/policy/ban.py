"""Ban calculator and administrative ban overrides."""

from datetime import datetime, timedelta

from library_client.exceptions import InvalidEntityStateError
from library_client.models import User
from library_client.policy.constants import BAN_MULTIPLIER
from library_client.policy.fees import days_late as _days_late


def compute_ban_until(return_date: datetime, days_late: int) -> datetime | None:
    """Ban end for a return ``days_late`` days late; ``None`` when on time."""
    if days_late <= 0:
        return None
    return return_date + timedelta(days=days_late * BAN_MULTIPLIER)


def apply_return_ban(user: User, return_date: datetime, days_late: int) -> datetime | None:
    """Set the user's ban from a late return.

    The new ban replaces any existing one. Admins are never banned.
    """
    if user.is_admin:
        return None
    ban_until = compute_ban_until(return_date, days_late)
    if ban_until is not None:
        user.ban_until = ban_until
    return ban_until


def impose_ban(user: User, days: int, now: datetime) -> datetime:
    """Ban ``user`` for ``days`` days from ``now`` (admin override)."""
    if user.is_admin:
        raise InvalidEntityStateError("Admin users cannot be banned")
    if days < 1:
        raise InvalidEntityStateError(f"Ban length must be at least 1 day, got {days}")
    user.ban_until = now + timedelta(days=days)
    return user.ban_until


def clear_ban(user: User) -> None:
    user.ban_until = None


def is_banned(user: User, now: datetime) -> bool:
    """True when ``ban_until`` is strictly after ``now``."""
    return user.ban_until is not None and user.ban_until > now


def ban_days_remaining(user: User, now: datetime) -> int:
    if not is_banned(user, now):
        return 0
    # ceil((ban_until - now) / day), mirroring the days-late rounding
    return _days_late(now, user.ban_until)
