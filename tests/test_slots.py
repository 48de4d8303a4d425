from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytz

from takeaway.domain.slots import (
    SlotPolicy,
    generate_pickup_slots,
    is_selectable_date,
    is_valid_pickup,
    pickup_moment,
)

DAY = date(2024, 6, 1)


def test_same_day_after_last_slot_minus_lead_is_empty():
    slots = generate_pickup_slots(DAY, datetime(2024, 6, 1, 21, 50))
    assert list(slots) == []
    assert slots.is_empty()
    assert slots.first() is None


def test_morning_same_day_starts_at_opening():
    # 10:00 + 30 min = 10:30, before opening: the whole window is open.
    slots = list(generate_pickup_slots(DAY, datetime(2024, 6, 1, 10, 0)))
    assert slots[0] == time(11, 0)
    assert len(slots) == 44


def test_slot_on_lead_boundary_is_excluded():
    # 10:45 + 30 min = 11:15 exactly; 11:15 itself is not offered.
    slots = list(generate_pickup_slots(DAY, datetime(2024, 6, 1, 10, 45)))
    assert time(11, 15) not in slots
    assert slots[0] == time(11, 30)


def test_seconds_past_now_push_boundary():
    slots = generate_pickup_slots(DAY, datetime(2024, 6, 1, 11, 14, 30))
    assert slots.first() == time(11, 45)


def test_future_date_gets_all_44_slots_regardless_of_time():
    for now in (datetime(2024, 6, 1, 0, 1), datetime(2024, 6, 1, 23, 59)):
        slots = list(generate_pickup_slots(DAY + timedelta(days=3), now))
        assert len(slots) == 44
        assert slots[0] == time(11, 0)
        assert slots[-1] == time(21, 45)
        assert slots == sorted(slots)
        assert all((b.hour * 60 + b.minute) - (a.hour * 60 + a.minute) == 15 for a, b in zip(slots, slots[1:]))


def test_sequence_is_restartable():
    slots = generate_pickup_slots(DAY, datetime(2024, 6, 1, 18, 0))
    first_pass = list(slots)
    assert list(slots) == first_pass
    assert first_pass[0] == time(18, 45)
    assert time(19, 0) in slots


def test_aware_now_is_read_in_restaurant_timezone():
    # 19:50 UTC is 21:50 in Paris during summer time.
    now = pytz.utc.localize(datetime(2024, 6, 1, 19, 50))
    assert list(generate_pickup_slots(DAY, now)) == []


def test_late_evening_closes_today():
    assert generate_pickup_slots(DAY, datetime(2024, 6, 1, 23, 50)).is_empty()


def test_selectable_dates_cover_today_to_seven_days():
    now = datetime(2024, 6, 1, 15, 0)
    assert is_selectable_date(DAY, now)
    assert is_selectable_date(DAY + timedelta(days=7), now)
    assert not is_selectable_date(DAY + timedelta(days=8), now)
    assert not is_selectable_date(DAY - timedelta(days=1), now)


def test_valid_pickup_must_be_a_generated_slot():
    now = datetime(2024, 6, 1, 15, 0)
    assert is_valid_pickup(pickup_moment(DAY, time(16, 0)), now)
    assert not is_valid_pickup(pickup_moment(DAY, time(15, 30)), now)  # on the lead boundary
    assert not is_valid_pickup(pickup_moment(DAY, time(16, 5)), now)  # off the 15-minute grid
    assert not is_valid_pickup(pickup_moment(DAY, time(22, 0)), now)  # after the last slot
    assert not is_valid_pickup(pickup_moment(DAY + timedelta(days=9), time(12, 0)), now)


def test_policy_from_settings():
    settings = SimpleNamespace(
        OPENING_TIME="12:00",
        LAST_SLOT_TIME="13:00",
        SLOT_MINUTES=30,
        LEAD_MINUTES=60,
        BOOKING_HORIZON_DAYS=2,
        TIMEZONE="Europe/Paris",
    )
    policy = SlotPolicy.from_settings(settings)
    slots = list(generate_pickup_slots(DAY + timedelta(days=1), datetime(2024, 6, 1, 9, 0), policy))
    assert slots == [time(12, 0), time(12, 30), time(13, 0)]
    assert not is_selectable_date(DAY + timedelta(days=3), datetime(2024, 6, 1, 9, 0), policy)
