import pytest

from opslearn import config
from opslearn.models import User
from opslearn.quota import (
    in_week,
    is_work_hours,
    leaderboard,
    quota_minutes,
    remaining_minutes,
    total_minutes,
    weekly_usage,
)

from conftest import at, make_booking


@pytest.mark.parametrize(
    "ts, expected",
    [
        (at(6, 17, 59), True),   # vendredi 17:59
        (at(6, 18, 0), False),   # vendredi 18:00
        (at(7, 10, 0), False),   # samedi
        (at(8, 10, 0), False),   # dimanche
        (at(2, 8, 0), True),     # lundi 08:00
        (at(3, 0, 30), True),    # mardi très tôt : pas de borne basse
    ],
)
def test_is_work_hours(ts, expected):
    assert is_work_hours(ts) is expected


def test_quota_counts_only_work_hours_starts():
    bookings = [
        make_booking("u1", at(2, 10), 30),
        make_booking("u1", at(2, 17, 45), 60),  # déborde après 18h, compte en entier
        make_booking("u1", at(3, 18), 45),       # exempté
        make_booking("u1", at(7, 10), 60),       # samedi
    ]

    assert quota_minutes(bookings) == 90
    assert total_minutes(bookings) == 195


def test_remaining_never_negative():
    bookings = [make_booking("u1", at(2, 9), 60), make_booking("u1", at(2, 11), 60)]

    assert remaining_minutes(bookings) == 0
    assert remaining_minutes([make_booking("u1", at(2, 9), 30)]) == 60


def test_limit_follows_config(monkeypatch):
    monkeypatch.setattr(config, "WEEKLY_LIMIT_MINUTES", 120)

    assert remaining_minutes([make_booking("u1", at(2, 9), 30)]) == 90


def test_in_week_uses_half_open_bounds():
    bookings = [
        make_booking("u1", at(1, 23, 30), 30),   # dimanche précédent
        make_booking("u1", at(2, 0), 30),        # lundi 00:00 inclus
        make_booking("u1", at(8, 23, 30), 30),   # dimanche inclus
        make_booking("u1", at(9, 0), 30),        # lundi suivant exclu
    ]

    kept = in_week(bookings, at(4, 12))

    assert [b.start_time for b in kept] == [bookings[1].start_time, bookings[2].start_time]


def test_weekly_usage_is_per_user_and_per_week():
    bookings = [
        make_booking("u1", at(2, 10), 30),
        make_booking("u1", at(7, 10), 45),
        make_booking("u2", at(3, 10), 60),
        make_booking("u1", at(10, 10, month=6), 60),  # semaine suivante
    ]

    usage = weekly_usage(bookings, "u1", at(5, 9))

    assert usage == {"quota_used": 30, "total_used": 75, "remaining": 60, "limit": 90}


def test_weekly_usage_remaining_follows_limit(monkeypatch):
    monkeypatch.setattr(config, "WEEKLY_LIMIT_MINUTES", 45)
    bookings = [make_booking("u1", at(2, 10), 60)]

    usage = weekly_usage(bookings, "u1", at(2, 12))

    assert usage["remaining"] == 0
    assert usage["limit"] == 45
    assert usage["remaining"] == remaining_minutes(bookings)


def test_leaderboard_ranks_and_skips_unknown_users():
    users = [User(id="u1", name="Alice"), User(id="u2", name="Bob")]
    bookings = [
        make_booking("u1", at(2, 10), 30),
        make_booking("u2", at(3, 10), 60),
        make_booking("u2", at(7, 10), 15),
        make_booking("ghost", at(4, 10), 120),
    ]

    board = leaderboard(bookings, users)

    assert board == [
        {"user_id": "u2", "name": "Bob", "minutes": 75},
        {"user_id": "u1", "name": "Alice", "minutes": 30},
    ]


def test_leaderboard_can_be_windowed_and_limited():
    users = [User(id=f"u{i}", name=f"User {i}") for i in range(1, 8)]
    bookings = [make_booking(f"u{i}", at(2 + i % 5, 8 + i), 10 * i) for i in range(1, 8)]
    bookings.append(make_booking("u1", at(16, 10), 500))

    board = leaderboard(bookings, users, ref=at(4, 12), limit=3)

    assert [row["user_id"] for row in board] == ["u7", "u6", "u5"]
