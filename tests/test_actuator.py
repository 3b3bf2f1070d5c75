import threading
from datetime import date, time

import pytest

from actuator_scheduler.domain.errors import (
    InvalidActuatorState,
    InvalidTimePeriod,
    TimeOverrideOverlap,
    TimeSlotOverlap,
    UnknownOverrideId,
    UnknownTimeSlotId,
)
from actuator_scheduler.domain.models import FloatState, ToggleState
from actuator_scheduler.domain.timeperiod import TimeInterval, TimePeriod, Weekday, WEEKDAYS, WEEKEND

from helpers import january


def test_add_time_slot_scenario(heater, weekday_morning, weekend_morning):
    assert heater.add_time_slot(weekday_morning, FloatState(20), True) == 0

    with pytest.raises(TimeSlotOverlap) as exc:
        heater.add_time_slot(january("09:00", "11:00", WEEKDAYS), FloatState(20), True)
    assert exc.value.conflicting_id == 0

    assert heater.add_time_slot(weekend_morning, FloatState(20), True) == 1
    assert sorted(heater.timeslots()) == [0, 1]


@pytest.mark.parametrize("first_start, second_start", [("08:00", "09:00"), ("09:00", "08:00")])
def test_overlap_is_symmetric(heater, first_start, second_start):
    first = january(first_start, f"{int(first_start[:2]) + 2:02d}:00", WEEKDAYS)
    second = january(second_start, f"{int(second_start[:2]) + 2:02d}:00", WEEKDAYS)
    heater.add_time_slot(first, FloatState(20), True)
    with pytest.raises(TimeSlotOverlap) as exc:
        heater.add_time_slot(second, FloatState(20), True)
    assert exc.value.conflicting_id == 0


def test_adjacent_slots_do_not_overlap(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    assert heater.add_time_slot(january("10:00", "12:00", WEEKDAYS), FloatState(18), True) == 1


def test_disabled_slot_still_reserves_its_period(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), False)
    with pytest.raises(TimeSlotOverlap):
        heater.add_time_slot(weekday_morning, FloatState(20), True)


def test_add_time_slot_validates_input(heater, light, weekday_morning):
    with pytest.raises(InvalidTimePeriod):
        heater.add_time_slot(january("10:00", "08:00"), FloatState(20), True)
    with pytest.raises(InvalidTimePeriod):
        heater.add_time_slot(TimePeriod(), FloatState(20), True)
    with pytest.raises(InvalidActuatorState):
        heater.add_time_slot(weekday_morning, FloatState(101), True)
    with pytest.raises(InvalidActuatorState):
        heater.add_time_slot(weekday_morning, ToggleState(True), True)
    with pytest.raises(InvalidActuatorState):
        light.add_time_slot(weekday_morning, FloatState(1), True)
    assert heater.timeslots() == {}


def test_ids_are_never_reused(heater, weekday_morning, weekend_morning):
    assert heater.add_time_slot(weekday_morning, FloatState(20), True) == 0
    heater.remove_time_slot(0)
    assert heater.add_time_slot(weekday_morning, FloatState(20), True) == 1

    assert heater.time_slot_add_time_override(1, january("08:00", "09:00", first=5, last=5)) == 0
    heater.time_slot_remove_time_override(1, 0)
    assert heater.time_slot_add_time_override(1, january("08:00", "09:00", first=5, last=5)) == 1


def test_override_ids_are_shared_across_slots(heater, weekday_morning, weekend_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.add_time_slot(weekend_morning, FloatState(20), True)
    assert heater.time_slot_add_time_override(0, january("08:30", "09:30", [Weekday.TUE], first=6, last=6)) == 0
    assert heater.time_slot_add_time_override(1, january("08:30", "09:30", [Weekday.SAT], first=10, last=10)) == 1


def test_default_state(heater):
    heater.set_default_state(FloatState(0))
    assert heater.default_state == FloatState(0)
    with pytest.raises(InvalidActuatorState):
        heater.set_default_state(ToggleState(False))
    assert heater.default_state == FloatState(0)


def test_valid(heater, light):
    assert heater.valid()
    assert light.valid()


# --- time_slot_set_time_period ---

def test_set_time_period_with_nothing_set_is_a_noop(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.time_slot_set_time_period(0, TimePeriod())
    assert heater.timeslots()[0].time_period == weekday_morning


def test_set_time_period_partial_update(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.time_slot_set_time_period(0, TimePeriod.build(end_time=time(11), days=[Weekday.MON]))

    period = heater.timeslots()[0].time_period
    assert period.time_interval == TimeInterval(time(8), time(11))
    assert period.date_range == weekday_morning.date_range
    assert period.days == frozenset({Weekday.MON})


def test_set_time_period_checks_merged_period(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.add_time_slot(january("10:00", "12:00", WEEKDAYS), FloatState(18), True)

    # Only the end moves, but the merged 08:00-11:00 collides with slot 1
    with pytest.raises(TimeSlotOverlap) as exc:
        heater.time_slot_set_time_period(0, TimePeriod.build(end_time=time(11)))
    assert exc.value.conflicting_id == 1
    assert heater.timeslots()[0].time_period == weekday_morning

    # Moving slot 0 to the weekend clears the way
    heater.time_slot_set_time_period(0, TimePeriod.build(end_time=time(11), days=WEEKEND))
    assert heater.timeslots()[0].time_period.time_interval.end == time(11)


def test_set_time_period_does_not_conflict_with_itself(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.time_slot_set_time_period(0, TimePeriod.build(start_time=time(7)))
    assert heater.timeslots()[0].time_period.time_interval.start == time(7)


def test_set_time_period_rejects_invalid_merge(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    with pytest.raises(InvalidTimePeriod):
        heater.time_slot_set_time_period(0, TimePeriod.build(start_time=time(11)))
    with pytest.raises(InvalidTimePeriod):
        heater.time_slot_set_time_period(0, TimePeriod.build(end_date=date(2025, 12, 1)))
    assert heater.timeslots()[0].time_period == weekday_morning


def test_set_time_period_unknown_slot(heater):
    with pytest.raises(UnknownTimeSlotId) as exc:
        heater.time_slot_set_time_period(7, TimePeriod())
    assert exc.value.entity_id == 7


# --- simple mutators ---

def test_set_enabled_and_state(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.time_slot_set_enabled(0, False)
    heater.time_slot_set_actuator_state(0, FloatState(22.5))

    ts = heater.timeslots()[0]
    assert ts.enabled is False
    assert ts.actuator_state == FloatState(22.5)

    with pytest.raises(InvalidActuatorState):
        heater.time_slot_set_actuator_state(0, FloatState(-1))
    with pytest.raises(UnknownTimeSlotId):
        heater.time_slot_set_enabled(3, True)
    with pytest.raises(UnknownTimeSlotId):
        heater.time_slot_set_actuator_state(3, FloatState(10))


def test_state_is_checked_before_slot_existence(heater):
    with pytest.raises(InvalidActuatorState):
        heater.time_slot_set_actuator_state(3, ToggleState(True))


def test_removing_unknown_ids_leaves_actuator_untouched(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.time_slot_add_time_override(0, january("08:30", "09:30", first=6, last=6))
    before = heater.snapshot()

    with pytest.raises(UnknownTimeSlotId):
        heater.remove_time_slot(42)
    with pytest.raises(UnknownTimeSlotId):
        heater.time_slot_remove_time_override(42, 0)
    with pytest.raises(UnknownOverrideId) as exc:
        heater.time_slot_remove_time_override(0, 42)
    assert exc.value.entity_id == 42

    assert heater.snapshot() == before


# --- overrides ---

def test_overrides_on_one_slot_cannot_share_a_day(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    first = heater.time_slot_add_time_override(0, january("08:00", "08:30", first=6, last=6))

    # Disjoint times on the same day are still rejected
    with pytest.raises(TimeOverrideOverlap) as exc:
        heater.time_slot_add_time_override(0, january("09:00", "09:30", first=6, last=6))
    assert exc.value.conflicting_id == first

    # Weekday sets that intersect within overlapping ranges collide too
    with pytest.raises(TimeOverrideOverlap):
        heater.time_slot_add_time_override(0, january("09:00", "09:30", [Weekday.TUE], first=1, last=31))

    assert heater.time_slot_add_time_override(0, january("09:00", "09:30", first=7, last=7)) == first + 1


def test_override_competes_with_other_slots(heater, weekday_morning, weekend_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.add_time_slot(weekend_morning, FloatState(20), True)

    # Monday the 5th at 09:00 belongs to slot 0
    with pytest.raises(TimeSlotOverlap) as exc:
        heater.time_slot_add_time_override(1, january("09:00", "11:00", first=5, last=5))
    assert exc.value.conflicting_id == 0

    # Outside slot 0's hours the override is fine
    assert heater.time_slot_add_time_override(1, january("10:00", "11:00", first=5, last=5)) == 0


def test_override_may_overlap_other_slots_overrides(heater, weekday_morning, weekend_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    heater.add_time_slot(weekend_morning, FloatState(20), True)
    heater.time_slot_add_time_override(0, january("11:00", "12:00", first=5, last=5))
    assert heater.time_slot_add_time_override(1, january("11:00", "12:00", first=5, last=5)) == 1


def test_override_validation(heater, weekday_morning):
    with pytest.raises(InvalidTimePeriod):
        heater.time_slot_add_time_override(0, TimePeriod())
    with pytest.raises(UnknownTimeSlotId):
        heater.time_slot_add_time_override(0, january("08:00", "09:00"))

    heater.add_time_slot(weekday_morning, FloatState(20), True)
    before = heater.snapshot()
    with pytest.raises(InvalidTimePeriod):
        heater.time_slot_add_time_override(0, january("09:00", "08:00"))
    assert heater.snapshot() == before


def test_timeslots_returns_a_copy(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    copy = heater.timeslots()
    copy[0].enabled = False
    copy[0].time_override[99] = weekday_morning
    assert heater.timeslots()[0].enabled is True
    assert heater.timeslots()[0].time_override == {}


def test_concurrent_adds_get_distinct_ids(heater):
    errors = []
    ids = []
    lock = threading.Lock()

    def add(day: int) -> None:
        try:
            ts_id = heater.add_time_slot(january("08:00", "10:00", first=day, last=day), FloatState(20), True)
        except Exception as e:
            errors.append(e)
            return
        with lock:
            ids.append(ts_id)

    threads = [threading.Thread(target=add, args=(d,)) for d in range(1, 29)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sorted(ids) == list(range(28))


def test_override_on_unknown_slot_is_reported_before_overlaps(heater, weekday_morning):
    heater.add_time_slot(weekday_morning, FloatState(20), True)
    with pytest.raises(UnknownTimeSlotId) as exc:
        heater.time_slot_add_time_override(5, january("09:00", "11:00", first=5, last=5))
    assert exc.value.entity_id == 5
