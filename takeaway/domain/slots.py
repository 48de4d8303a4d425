"""
Pickup slot generation.

Slots are wall-clock times in the restaurant's timezone. Everything here is a
pure function of (date, now); the clock is always passed in.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

import pytz


@dataclass(frozen=True)
class SlotPolicy:
    opening: time = time(11, 0)
    last_slot: time = time(21, 45)
    step_minutes: int = 15
    lead_minutes: int = 30
    horizon_days: int = 7
    timezone: str = "Europe/Paris"

    @classmethod
    def from_settings(cls, settings) -> "SlotPolicy":
        return cls(
            opening=time.fromisoformat(settings.OPENING_TIME),
            last_slot=time.fromisoformat(settings.LAST_SLOT_TIME),
            step_minutes=settings.SLOT_MINUTES,
            lead_minutes=settings.LEAD_MINUTES,
            horizon_days=settings.BOOKING_HORIZON_DAYS,
            timezone=settings.TIMEZONE,
        )

    def to_local(self, moment: datetime) -> datetime:
        """Naive wall-clock time in the restaurant's timezone."""
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(pytz.timezone(self.timezone)).replace(tzinfo=None)

    def now(self) -> datetime:
        return datetime.now(pytz.timezone(self.timezone)).replace(tzinfo=None)


DEFAULT_POLICY = SlotPolicy()


class PickupSlots:
    """
    Ascending pickup times for one day.

    Lazy and restartable: every iteration recomputes from (day, now), so the
    same object can be listed, counted and re-iterated.
    """

    def __init__(self, day: date, now: datetime, policy: SlotPolicy = DEFAULT_POLICY):
        self.day = day
        self.now = policy.to_local(now)
        self.policy = policy

    def __iter__(self) -> Iterator[time]:
        step = timedelta(minutes=self.policy.step_minutes)
        current = datetime.combine(self.day, self.policy.opening)
        last = datetime.combine(self.day, self.policy.last_slot)

        # Same day: anything at or before now + lead time is gone.
        boundary = None
        if self.day == self.now.date():
            boundary = self.now + timedelta(minutes=self.policy.lead_minutes)

        while current <= last:
            if boundary is None or current > boundary:
                yield current.time()
            current += step

    def __contains__(self, slot: time) -> bool:
        return any(s == slot for s in self)

    def first(self) -> time | None:
        return next(iter(self), None)

    def is_empty(self) -> bool:
        return self.first() is None


def generate_pickup_slots(day: date, now: datetime, policy: SlotPolicy = DEFAULT_POLICY) -> PickupSlots:
    return PickupSlots(day, now, policy)


def is_selectable_date(day: date, now: datetime, policy: SlotPolicy = DEFAULT_POLICY) -> bool:
    """Today up to `horizon_days` ahead. Checked by callers before asking for slots."""
    local_now = policy.to_local(now)
    return local_now.date() <= day <= (local_now + timedelta(days=policy.horizon_days)).date()


def is_valid_pickup(moment: datetime, now: datetime, policy: SlotPolicy = DEFAULT_POLICY) -> bool:
    moment = policy.to_local(moment)
    if not is_selectable_date(moment.date(), now, policy):
        return False
    return moment.time() in PickupSlots(moment.date(), now, policy)


def pickup_moment(day: date, slot: time) -> datetime:
    return datetime.combine(day, slot)
