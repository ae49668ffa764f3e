from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalise aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    """Midnight UTC of the day containing ``dt``."""
    return datetime.combine(as_utc(dt).date(), time.min, tzinfo=timezone.utc)


def recent_days(today: date, count: int) -> List[date]:
    """``count`` consecutive days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def count_by_day(timestamps: Iterable[datetime], days: List[date]) -> List[Dict[str, object]]:
    """Bucket timestamps into the given UTC days in a single pass."""
    counts = {day: 0 for day in days}
    for ts in timestamps:
        day = as_utc(ts).date()
        if day in counts:
            counts[day] += 1
    return [{"date": day.isoformat(), "count": counts[day]} for day in days]


def gender_distribution(genders: Iterable[Optional[str]]) -> Dict[str, int]:
    """Count male/female case-insensitively; anything else, including missing, is other."""
    distribution = {"male": 0, "female": 0, "other": 0}
    for gender in genders:
        key = (gender or "").strip().lower()
        distribution[key if key in ("male", "female") else "other"] += 1
    return distribution


def mask_email(email: str) -> str:
    """Mask email for privacy (e.g., j***e@example.com)."""
    if '@' not in email or email.startswith('@'):
        return email

    local, domain = email.split('@', 1)
    if len(local) <= 2:
        masked_local = local[0] + '*'
    else:
        masked_local = local[0] + '*' * (len(local) - 2) + local[-1]

    return f"{masked_local}@{domain}"
