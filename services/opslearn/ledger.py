# ============================================================
# ledger.py: Vue en lecture seule sur les réservations
# ------------------------------------------------------------
# Remplace la liste globale parcourue à chaque vérification :
# un instantané des réservations trié par début, avec quelques
# requêtes étroites (chevauchement, par utilisateur, par semaine).
# Le tri ne change pas la sémantique, seulement le coût.
# ============================================================
from bisect import bisect_left
from datetime import datetime
from typing import Iterable, Iterator, List, Optional

from opslearn.models import Booking
from opslearn.timeutils import instant, overlaps, week_end, week_start


class BookingLedger:
    def __init__(self, bookings: Iterable[Booking] = ()):
        self._bookings: List[Booking] = sorted(bookings, key=lambda b: instant(b.start_time))
        self._starts = [instant(b.start_time) for b in self._bookings]
        self._by_id = {b.id: b for b in self._bookings}

    def __iter__(self) -> Iterator[Booking]:
        return iter(self._bookings)

    def __len__(self) -> int:
        return len(self._bookings)

    def get(self, booking_id: str) -> Optional[Booking]:
        return self._by_id.get(booking_id)

    def overlapping(
        self, start: datetime, end: datetime, exclude_id: Optional[str] = None
    ) -> List[Booking]:
        # seules les réservations qui commencent avant `end` peuvent chevaucher
        upto = bisect_left(self._starts, instant(end))
        return [
            b
            for b in self._bookings[:upto]
            if b.id != exclude_id and overlaps(start, end, b.start_time, b.end_time)
        ]

    def for_user(self, user_id: str) -> List[Booking]:
        return [b for b in self._bookings if b.user_id == user_id]

    def for_user_in_week(self, user_id: str, ref: datetime) -> List[Booking]:
        lo = bisect_left(self._starts, instant(week_start(ref)))
        hi = bisect_left(self._starts, instant(week_end(ref)))
        return [b for b in self._bookings[lo:hi] if b.user_id == user_id]
