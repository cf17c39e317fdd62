# ============================================================
# repository.py: Accès aux données (SQLModel)
# ------------------------------------------------------------
# Ce module implémente le design pattern "Repository" pour les
# tables User, Course, Booking et AdminSettings. Il isole la
# logique d'accès de la couche API et du cycle de vie.
# Toute erreur SQLAlchemy devient PersistenceUnavailable.
# ============================================================
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from opslearn.errors import PersistenceUnavailable
from opslearn.models import AdminSettings, Booking, Course, User
from opslearn.timeutils import to_utc


def _normalized(b: Booking) -> Booking:
    # la DB peut rendre des datetimes naïfs : ils sont en UTC.
    # copie détachée, pour ne pas salir la session
    return Booking(
        id=b.id,
        user_id=b.user_id,
        course_id=b.course_id,
        start_time=to_utc(b.start_time),
        end_time=to_utc(b.end_time),
        duration_minutes=b.duration_minutes,
    )


# SqlStorage
# Implémente le contrat de stockage (storage.Storage) sur une Session.
# Utilisé par les routes FastAPI et par le cycle de vie côté serveur.
class SqlStorage:
    def __init__(self, session: Session):
        self.session = session

    def _commit(self, operation: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceUnavailable(operation, e) from e

    def _all(self, operation: str, stmt) -> list:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(operation, e) from e

    def list_users(self) -> List[User]:
        return self._all("list_users", select(User))

    def list_courses(self) -> List[Course]:
        return self._all("list_courses", select(Course))

    def add_course(self, course: Course):
        self.session.add(course)
        self._commit("add_course")
        self.session.refresh(course)
        return course

    def list_bookings(self) -> List[Booking]:
        rows = self._all("list_bookings", select(Booking).order_by(Booking.start_time))
        return [_normalized(b) for b in rows]

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        try:
            b = self.session.get(Booking, booking_id)
        except SQLAlchemyError as e:
            raise PersistenceUnavailable("get_booking", e) from e
        return _normalized(b) if b else None

    def add_booking(self, booking: Booking):
        # on persiste une copie : l'objet de l'appelant garde ses dates UTC
        self.session.add(_normalized(booking))
        self._commit("add_booking")
        return booking

    def delete_booking(self, booking_id: str):
        b = self.session.get(Booking, booking_id)
        if b:
            self.session.delete(b)
            self._commit("delete_booking")

    def get_admin_settings(self) -> AdminSettings:
        settings = self.session.get(AdminSettings, 1)
        return settings or AdminSettings()

    def save_admin_settings(self, settings: AdminSettings):
        settings.id = 1
        merged = self.session.merge(settings)
        self._commit("save_admin_settings")
        return merged
