# ============================================================
# authorization.py: Décision de réservation
# ------------------------------------------------------------
# Compose temps / quota / conflits en une seule Decision.
# Étapes, la première qui échoue gagne :
#   1. end = start + durée
#   2. heures de travail : conflit d'équipe (TeamBusy)
#   3. conflit avec ses propres réservations (Overlap)
#   4. quota de la semaine de `start` (QuotaFull)
#   5. sinon : autorisé
# Fonction pure : aucun accès au stockage ici.
# ============================================================
from datetime import date, datetime
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from opslearn import config
from opslearn.conflicts import find_own_conflict, find_team_conflict
from opslearn.ledger import BookingLedger
from opslearn.models import Booking, Candidate, Decision, Reason
from opslearn.quota import is_work_hours, quota_minutes
from opslearn.timeutils import add_minutes, slots_for_day, to_local

DURATION_OPTIONS = (30, 45, 60)
MIN_DURATION = DURATION_OPTIONS[0]


def authorize(candidate: Candidate, bookings: Union[BookingLedger, Iterable[Booking]]) -> Decision:
    ledger = bookings if isinstance(bookings, BookingLedger) else BookingLedger(bookings)
    start = to_local(candidate.start)
    end = add_minutes(start, candidate.duration_minutes)
    work_hours = is_work_hours(start)
    mine = ledger.for_user(candidate.user_id)

    if work_hours:
        conflict = find_team_conflict(start, end, ledger)
        if conflict:
            return Decision.deny(Reason.TEAM_BUSY, conflict)

    # même si l'équipe est libre, on ne se double-réserve jamais
    conflict = find_own_conflict(start, end, mine)
    if conflict:
        return Decision.deny(Reason.OVERLAP, conflict)

    if work_hours:
        used = quota_minutes(ledger.for_user_in_week(candidate.user_id, start))
        if used + candidate.duration_minutes > config.WEEKLY_LIMIT_MINUTES:
            return Decision.deny(Reason.QUOTA_FULL)

    return Decision.allow()


def evaluate_durations(
    user_id: str,
    course_id: str,
    start: datetime,
    bookings: Union[BookingLedger, Iterable[Booking]],
    options: Sequence[int] = DURATION_OPTIONS,
) -> Dict[int, Decision]:
    """Décision pour chaque durée proposée, avant de confirmer."""
    ledger = bookings if isinstance(bookings, BookingLedger) else BookingLedger(bookings)
    return {
        minutes: authorize(
            Candidate(user_id=user_id, course_id=course_id, start=start, duration_minutes=minutes),
            ledger,
        )
        for minutes in options
    }


def slot_statuses(
    user_id: str,
    day: date,
    bookings: Union[BookingLedger, Iterable[Booking]],
) -> List[Tuple[datetime, Decision]]:
    # un créneau est ouvrable si la durée minimale passe
    ledger = bookings if isinstance(bookings, BookingLedger) else BookingLedger(bookings)
    return [
        (
            slot,
            authorize(
                Candidate(user_id=user_id, course_id="", start=slot, duration_minutes=MIN_DURATION),
                ledger,
            ),
        )
        for slot in slots_for_day(day)
    ]
