# ============================================================
# Booking API Router
# ------------------------------------------------------------
# Expose l'API JSON du service : utilisateurs, cours,
# réservations, réglages admin, plus les décisions utilisées
# par l'interface (durées possibles, état des créneaux, quota,
# classement). Les réservations passent TOUJOURS par le cycle
# de vie (autorisation puis écriture).
# ============================================================
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, create_engine

from opslearn import config
from opslearn.authorization import MIN_DURATION, evaluate_durations, slot_statuses
from opslearn.content import OpenAIContentGenerator
from opslearn.ledger import BookingLedger
from opslearn.lifecycle import BookingService
from opslearn.models import AdminSettings, Candidate, CourseCreate
from opslearn.publisher import publish_event
from opslearn.quota import leaderboard, weekly_usage
from opslearn.repository import SqlStorage
from opslearn.timeutils import add_minutes

UNKNOWN_USER = "Unknown"
UNKNOWN_COURSE = "Unknown Course"

# Moteur SQLAlchemy/SQLModel + routeur FastAPI
engine = create_engine(config.DATABASE_URL, pool_pre_ping=True)
router = APIRouter(prefix="/api")


# Dépendance FastAPI : fournit une Session DB par requête, auto-close
def get_session():
    with Session(engine) as s:
        yield s


def get_storage(s: Session = Depends(get_session)) -> SqlStorage:
    return SqlStorage(s)


def get_booking_service(storage: SqlStorage = Depends(get_storage)) -> BookingService:
    return BookingService(storage, publish=publish_event)


def get_content_generator():
    return OpenAIContentGenerator()


@router.get("/users")
def list_users(storage: SqlStorage = Depends(get_storage)):
    return storage.list_users()


@router.get("/courses")
def list_courses(storage: SqlStorage = Depends(get_storage)):
    return storage.list_courses()


# ------------------------------------------------------------
# POST /api/courses : Ajouter un cours
# ------------------------------------------------------------
# Le quiz est validé (4 options, index 0..3). Avec generate=true,
# la description / les tags / le quiz manquants sont générés.
# ------------------------------------------------------------
@router.post("/courses", status_code=201)
def add_course(
    body: CourseCreate,
    generate: bool = False,
    storage: SqlStorage = Depends(get_storage),
    content=Depends(get_content_generator),
):
    if generate and not (body.description and body.tags and body.quiz):
        details = content.generate_course_details(body.title, body.url)
        body.description = body.description or details.description
        body.tags = body.tags or details.tags
        body.quiz = body.quiz or details.quiz
    return storage.add_course(body.to_course())


@router.get("/bookings")
def list_bookings(storage: SqlStorage = Depends(get_storage)):
    return storage.list_bookings()


# ------------------------------------------------------------
# POST /api/bookings : Créer une réservation
# ------------------------------------------------------------
# - Refus (TeamBusy / Overlap / QuotaFull) -> 409 + Decision
# - Un `id` déjà connu renvoie la réservation existante
# ------------------------------------------------------------
@router.post("/bookings", status_code=201)
def create_booking(candidate: Candidate, service: BookingService = Depends(get_booking_service)):
    result = service.create(candidate)
    if not result.decision.valid:
        raise HTTPException(409, result.decision.model_dump(mode="json"))
    return result.booking


# ------------------------------------------------------------
# DELETE /api/bookings/{id} : Annuler une réservation
# ------------------------------------------------------------
# Le contrôle du propriétaire se fait ici : si user_id est fourni
# et ne correspond pas, 403.
# ------------------------------------------------------------
@router.delete("/bookings/{booking_id}")
def cancel_booking(
    booking_id: str,
    user_id: Optional[str] = None,
    storage: SqlStorage = Depends(get_storage),
    service: BookingService = Depends(get_booking_service),
):
    b = storage.get_booking(booking_id)
    if not b:
        raise HTTPException(404, "not found")
    if user_id is not None and b.user_id != user_id:
        raise HTTPException(403, "only the owner can cancel a booking")
    service.cancel(booking_id)
    return {"success": True}


# Décision pour chaque durée proposée (30 / 45 / 60 min)
@router.get("/bookings/check")
def check_booking(
    user_id: str,
    start: datetime,
    course_id: str = "",
    storage: SqlStorage = Depends(get_storage),
):
    decisions = evaluate_durations(user_id, course_id, start, storage.list_bookings())
    return {str(minutes): d for minutes, d in decisions.items()}


# ------------------------------------------------------------
# GET /api/schedule : Créneaux d'une journée
# ------------------------------------------------------------
# Pour chaque créneau de 30 min : la réservation qui l'occupe
# (avec noms lisibles, "Unknown" si la référence est cassée) et
# la décision pour la durée minimale.
# ------------------------------------------------------------
@router.get("/schedule")
def schedule(user_id: str, day: date, storage: SqlStorage = Depends(get_storage)):
    ledger = BookingLedger(storage.list_bookings())
    users = {u.id: u.name for u in storage.list_users()}
    courses = {c.id: c.title for c in storage.list_courses()}

    slots = []
    for start, decision in slot_statuses(user_id, day, ledger):
        end = add_minutes(start, MIN_DURATION)
        taken = ledger.overlapping(start, end)
        occupant = None
        if taken:
            b = taken[0]
            occupant = {
                "booking_id": b.id,
                "user_id": b.user_id,
                "user_name": users.get(b.user_id, UNKNOWN_USER),
                "course_title": courses.get(b.course_id, UNKNOWN_COURSE),
                "is_mine": b.user_id == user_id,
            }
        slots.append({"start": start.isoformat(), "end": end.isoformat(), "decision": decision, "booking": occupant})
    return slots


@router.get("/usage/{user_id}")
def usage(user_id: str, ref: Optional[datetime] = None, storage: SqlStorage = Depends(get_storage)):
    ref = ref or datetime.now(timezone.utc)
    return weekly_usage(storage.list_bookings(), user_id, ref)


@router.get("/leaderboard")
def get_leaderboard(
    ref: Optional[datetime] = None,
    limit: int = 5,
    storage: SqlStorage = Depends(get_storage),
):
    return leaderboard(storage.list_bookings(), storage.list_users(), ref=ref, limit=limit)


@router.get("/quote")
def quote(content=Depends(get_content_generator)):
    return {"quote": content.daily_quote()}


@router.get("/admin/settings")
def get_admin_settings(storage: SqlStorage = Depends(get_storage)):
    return storage.get_admin_settings()


@router.post("/admin/settings")
def save_admin_settings(settings: AdminSettings, storage: SqlStorage = Depends(get_storage)):
    return storage.save_admin_settings(settings)
