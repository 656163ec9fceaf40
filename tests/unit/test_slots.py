from datetime import date, datetime

from utils.slots import day_slots, is_on_grid, open_days, open_slots, upcoming_slots

MONDAY = date(2030, 1, 7)
SATURDAY = date(2030, 1, 12)


def test_default_schedule_is_half_hour_slots_nine_to_five():
    slots = day_slots({}, MONDAY)
    assert slots[0] == datetime(2030, 1, 7, 9, 0)
    assert slots[-1] == datetime(2030, 1, 7, 16, 30)
    assert len(slots) == 16


def test_no_slots_outside_working_days():
    assert day_slots({}, SATURDAY) == []
    assert day_slots({"working_days": [5]}, SATURDAY)


def test_last_slot_must_end_by_closing_time():
    doctor = {"start_time": "09:00", "end_time": "10:00", "slot_minutes": 40}
    assert day_slots(doctor, MONDAY) == [datetime(2030, 1, 7, 9, 0)]


def test_is_on_grid():
    assert is_on_grid({}, datetime(2030, 1, 7, 9, 30))
    assert not is_on_grid({}, datetime(2030, 1, 7, 9, 15))
    assert not is_on_grid({}, datetime(2030, 1, 7, 17, 0))
    assert not is_on_grid({}, datetime(2030, 1, 12, 10, 0))


def test_open_slots_skip_booked_and_past():
    now = datetime(2030, 1, 7, 15, 10)
    booked = [datetime(2030, 1, 7, 16, 0)]
    assert open_slots({}, MONDAY, booked, now) == [
        datetime(2030, 1, 7, 15, 30),
        datetime(2030, 1, 7, 16, 30),
    ]


def test_upcoming_slots_roll_over_to_next_working_day():
    now = datetime(2030, 1, 11, 16, 45)  # Friday after the last slot started
    assert upcoming_slots({}, [], now, count=2) == [
        datetime(2030, 1, 14, 9, 0),
        datetime(2030, 1, 14, 9, 30),
    ]


def test_upcoming_slots_empty_when_nothing_in_horizon():
    doctor = {"working_days": [2]}  # Wednesdays only
    now = datetime(2030, 1, 7, 8, 0)
    assert upcoming_slots(doctor, [], now, horizon_days=2) == []
    assert upcoming_slots(doctor, [], now, horizon_days=3)[0] == datetime(2030, 1, 9, 9, 0)


def test_open_days_skip_finished_and_non_working_days():
    now = datetime(2030, 1, 11, 16, 45)  # Friday
    assert open_days({}, [], now, horizon_days=4) == [date(2030, 1, 14)]


def test_fully_booked_day_is_not_open():
    now = datetime(2030, 1, 7, 8, 0)
    doctor = {"start_time": "09:00", "end_time": "10:00"}
    booked = [datetime(2030, 1, 7, 9, 0), datetime(2030, 1, 7, 9, 30)]
    assert open_days(doctor, booked, now, horizon_days=2) == [date(2030, 1, 8)]


def test_cleared_working_days_means_no_slots():
    doctor = {"working_days": []}
    assert day_slots(doctor, MONDAY) == []
    assert upcoming_slots(doctor, [], datetime(2030, 1, 7, 8, 0)) == []
    assert not is_on_grid(doctor, datetime(2030, 1, 7, 9, 0))
