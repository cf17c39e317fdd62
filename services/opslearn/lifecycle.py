# ============================================================
# lifecycle.py: Création / annulation des réservations
# ------------------------------------------------------------
# Seul chemin d'écriture des réservations :
#   - create : autorise PUIS persiste, jamais l'inverse
#   - cancel : supprime sans condition (le contrôle du
#     propriétaire se fait à la frontière API)
# Un refus est une réponse normale, pas une exception. Une panne
# du stockage remonte telle quelle (PersistenceUnavailable) :
# l'écriture a pu aboutir ou non, aucun retry ici.
# ============================================================
import threading
from typing import Callable, Optional

from pika.exceptions import AMQPError
from sqlmodel import SQLModel

from opslearn.authorization import authorize
from opslearn.errors import WriteConflict
from opslearn.ledger import BookingLedger
from opslearn.models import Booking, Candidate, Decision, Reason, new_id
from opslearn.publisher import publish_event
from opslearn.storage import Storage
from opslearn.timeutils import add_minutes, instant, to_local, to_utc

# autorisation + ajout = une seule opération dans ce process
_create_lock = threading.Lock()


def _same_request(booking: Booking, candidate: Candidate) -> bool:
    return (
        booking.user_id == candidate.user_id
        and booking.course_id == candidate.course_id
        and booking.duration_minutes == candidate.duration_minutes
        and instant(booking.start_time) == instant(candidate.start)
    )


class BookingResult(SQLModel):
    decision: Decision
    booking: Optional[Booking] = None


class BookingService:
    def __init__(self, storage: Storage, publish: Callable[[str, dict], None] = publish_event):
        self.storage = storage
        self.publish = publish

    def create(self, candidate: Candidate) -> BookingResult:
        with _create_lock:
            bookings = self.storage.list_bookings()
            if candidate.id:
                existing = next((b for b in bookings if b.id == candidate.id), None)
                if existing:
                    if not _same_request(existing, candidate):
                        # id déjà pris par une autre demande
                        return BookingResult(decision=Decision.deny(Reason.OVERLAP, existing))
                    # même id client = même demande, déjà enregistrée
                    return BookingResult(decision=Decision.allow(), booking=existing)

            decision = authorize(candidate, BookingLedger(bookings))
            if not decision.valid:
                print(
                    f"[booking] denied {decision.reason.value} user={candidate.user_id} "
                    f"start={candidate.start.isoformat()} duration={candidate.duration_minutes}",
                    flush=True,
                )
                return BookingResult(decision=decision)

            start = to_local(candidate.start)
            booking = Booking(
                id=candidate.id or new_id(),
                user_id=candidate.user_id,
                course_id=candidate.course_id,
                start_time=to_utc(start),
                end_time=to_utc(add_minutes(start, candidate.duration_minutes)),
                duration_minutes=candidate.duration_minutes,
            )
            try:
                self.storage.add_booking(booking)
            except WriteConflict as e:
                return BookingResult(decision=e.decision)

        print(f"[booking] created {booking.id} user={booking.user_id} start={booking.start_time.isoformat()}", flush=True)
        self._notify("BookingCreated", {
            "bookingId": booking.id,
            "userId": booking.user_id,
            "courseId": booking.course_id,
            "start": booking.start_time.isoformat(),
            "end": booking.end_time.isoformat(),
            "durationMinutes": booking.duration_minutes,
        })
        return BookingResult(decision=decision, booking=booking)

    def cancel(self, booking_id: str):
        self.storage.delete_booking(booking_id)
        print(f"[booking] cancelled {booking_id}", flush=True)
        self._notify("BookingCancelled", {"bookingId": booking_id})

    def _notify(self, event_type: str, payload: dict):
        # best-effort : l'écriture est déjà faite à ce stade
        try:
            self.publish(event_type, payload)
        except AMQPError as e:
            print(f"[event] publish {event_type} failed: {e!r}", flush=True)
