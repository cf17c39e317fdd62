# ============================================================
# quota.py: Politique de quota hebdomadaire
# ------------------------------------------------------------
# Seules les minutes des sessions qui COMMENCENT en heures de
# travail (lun→ven, avant 18:00 local) comptent dans le plafond.
# Une session à 17:45 de 60 min compte entièrement ; une session
# à 18:00 ne compte pas du tout.
# ============================================================
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from opslearn import config
from opslearn.models import Booking, User
from opslearn.timeutils import instant, to_local, week_end, week_start


def is_work_hours(ts: datetime) -> bool:
    local = to_local(ts)
    is_weekend = local.weekday() >= 5  # samedi=5, dimanche=6
    is_after_hours = local.hour >= config.WORK_DAY_END_HOUR
    return not is_weekend and not is_after_hours


def quota_minutes(bookings: Iterable[Booking]) -> int:
    return sum(b.duration_minutes for b in bookings if is_work_hours(b.start_time))


def total_minutes(bookings: Iterable[Booking]) -> int:
    # affichage seulement, jamais pour refuser une réservation
    return sum(b.duration_minutes for b in bookings)


def remaining_minutes(bookings: Iterable[Booking]) -> int:
    return max(0, config.WEEKLY_LIMIT_MINUTES - quota_minutes(bookings))


def in_week(bookings: Iterable[Booking], ref: datetime) -> List[Booking]:
    lo, hi = instant(week_start(ref)), instant(week_end(ref))
    return [b for b in bookings if lo <= instant(b.start_time) < hi]


def weekly_usage(bookings: Iterable[Booking], user_id: str, ref: datetime) -> Dict[str, int]:
    """Consommation de la semaine contenant `ref` pour un utilisateur."""
    mine = in_week((b for b in bookings if b.user_id == user_id), ref)
    used = quota_minutes(mine)
    return {
        "quota_used": used,
        "total_used": total_minutes(mine),
        "remaining": remaining_minutes(mine),
        "limit": config.WEEKLY_LIMIT_MINUTES,
    }


def leaderboard(
    bookings: Iterable[Booking],
    users: Iterable[User],
    ref: Optional[datetime] = None,
    limit: int = 5,
) -> List[Dict[str, object]]:
    """Classement par minutes totales réservées.

    Sans `ref`, toutes les réservations comptent ; avec `ref`, seulement
    celles de la semaine. Les réservations d'utilisateurs inconnus sont
    ignorées.
    """
    if ref is not None:
        bookings = in_week(bookings, ref)
    stats: Dict[str, int] = {}
    for b in bookings:
        stats[b.user_id] = stats.get(b.user_id, 0) + b.duration_minutes

    by_id = {u.id: u for u in users}
    rows = [
        {"user_id": uid, "name": by_id[uid].name, "minutes": minutes}
        for uid, minutes in stats.items()
        if uid in by_id
    ]
    rows.sort(key=lambda r: r["minutes"], reverse=True)
    return rows[:limit]
