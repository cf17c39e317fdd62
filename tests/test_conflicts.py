from datetime import datetime

from opslearn.config import LOCAL_TZ
from opslearn.conflicts import find_own_conflict, find_team_conflict
from opslearn.ledger import BookingLedger
from opslearn.timeutils import add_minutes

from conftest import at, make_booking


def test_team_conflict_finds_any_user():
    alice = make_booking("u1", at(3, 10), 30)

    assert find_team_conflict(at(3, 10, 15), at(3, 10, 45), [alice]) is alice
    assert find_team_conflict(at(3, 10, 30), at(3, 11), [alice]) is None


def test_team_conflict_excludes_given_booking():
    alice = make_booking("u1", at(3, 10), 30, booking_id="b1")

    assert find_team_conflict(at(3, 10), at(3, 10, 30), [alice], exclude_id="b1") is None


def test_team_conflict_returns_first_in_list_order():
    late = make_booking("u2", at(3, 10, 30), 30)
    early = make_booking("u1", at(3, 10), 30)

    assert find_team_conflict(at(3, 10), at(3, 11), [late, early]) is late


def test_team_conflict_on_ledger_returns_earliest():
    late = make_booking("u2", at(3, 10, 30), 30)
    early = make_booking("u1", at(3, 10), 30)

    assert find_team_conflict(at(3, 10), at(3, 11), BookingLedger([late, early])) is early


def test_own_conflict_only_looks_at_given_bookings():
    mine = make_booking("u1", at(7, 20), 30)

    assert find_own_conflict(at(7, 20, 15), at(7, 20, 45), [mine]) is mine
    assert find_own_conflict(at(7, 20, 30), at(7, 21), [mine]) is None
    assert find_own_conflict(at(7, 20, 15), at(7, 20, 45), []) is None


def test_ledger_overlapping_uses_half_open_ranges():
    a = make_booking("u1", at(3, 9), 30)
    b = make_booking("u2", at(3, 9, 30), 60)
    c = make_booking("u3", at(3, 11), 30)
    ledger = BookingLedger([c, b, a])

    assert ledger.overlapping(at(3, 9, 15), at(3, 10)) == [a, b]
    assert ledger.overlapping(at(3, 10, 30), at(3, 11)) == []
    assert ledger.overlapping(at(3, 8), at(3, 12), exclude_id=b.id) == [a, c]


def test_ledger_finds_long_booking_started_earlier():
    long_one = make_booking("u1", at(3, 8), 180)
    ledger = BookingLedger([long_one, make_booking("u2", at(3, 12), 30)])

    assert ledger.overlapping(at(3, 10), at(3, 10, 30)) == [long_one]


def test_ledger_user_queries():
    mine = [make_booking("u1", at(2, 9), 30), make_booking("u1", at(8, 21), 30)]
    other_week = make_booking("u1", at(9, 9), 30)
    ledger = BookingLedger(mine + [other_week, make_booking("u2", at(4, 9), 30)])

    assert len(ledger) == 4
    assert ledger.for_user("u1") == mine + [other_week]
    assert ledger.for_user_in_week("u1", at(5, 12)) == mine
    assert ledger.get(other_week.id) is other_week
    assert ledger.get("missing") is None


def test_ledger_orders_repeated_hour_by_absolute_time():
    # 01:45 EDT précède 01:15 EST
    first = make_booking("u1", datetime(2025, 11, 2, 1, 45, tzinfo=LOCAL_TZ), 30)
    second = make_booking("u2", datetime(2025, 11, 2, 1, 15, fold=1, tzinfo=LOCAL_TZ), 30)
    ledger = BookingLedger([second, first])

    assert list(ledger) == [first, second]
    query = datetime(2025, 11, 2, 1, 20, fold=1, tzinfo=LOCAL_TZ)
    assert ledger.overlapping(query, add_minutes(query, 10)) == [second]
