"""
Horloge injectable / Injectable clock.
Les routes la reçoivent via Depends(get_clock) ; les tests la remplacent.
Routes receive it through Depends(get_clock); tests override it.
"""

from datetime import date, datetime, timedelta, timezone


class Clock:
    """Horloge système / System clock (naive UTC, as stored in the DB)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Horloge figée, avançable à la main / Frozen clock, advanced manually."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


_system_clock = Clock()


def get_clock() -> Clock:
    """Dépendance FastAPI / FastAPI dependency."""
    return _system_clock
