# ============================================================
# conflicts.py: Détection de conflits
# ------------------------------------------------------------
# En heures de travail, un seul créneau à la fois pour toute
# l'équipe (ressource partagée). Hors heures de travail, seuls
# les chevauchements avec ses propres réservations comptent.
# Ces fonctions ne décident pas de la politique : voir
# authorization.py.
# ============================================================
from datetime import datetime
from typing import Iterable, Optional, Union

from opslearn.ledger import BookingLedger
from opslearn.models import Booking
from opslearn.timeutils import overlaps

Bookings = Union[BookingLedger, Iterable[Booking]]


def find_team_conflict(
    start: datetime,
    end: datetime,
    bookings: Bookings,
    exclude_id: Optional[str] = None,
) -> Optional[Booking]:
    """Première réservation (tout utilisateur) qui chevauche [start, end).

    `exclude_id` sert à re-vérifier une réservation existante.
    """
    if isinstance(bookings, BookingLedger):
        hits = bookings.overlapping(start, end, exclude_id=exclude_id)
        return hits[0] if hits else None
    for b in bookings:
        if exclude_id and b.id == exclude_id:
            continue
        if overlaps(start, end, b.start_time, b.end_time):
            return b
    return None


def find_own_conflict(
    start: datetime,
    end: datetime,
    bookings_of_user: Iterable[Booking],
) -> Optional[Booking]:
    for b in bookings_of_user:
        if overlaps(start, end, b.start_time, b.end_time):
            return b
    return None
