# ============================================================
# storage.py: Stockage côté client
# ------------------------------------------------------------
# Trois implémentations du même contrat (Storage) :
#   - HttpStorage : l'API JSON du service (httpx)
#   - JsonFileStorage : cache local dans un fichier JSON
#   - FallbackStorage : essaie l'API, se replie sur le fichier
# Côté serveur, repository.SqlStorage remplit le même contrat.
# ============================================================
import json
import os
from typing import List, Optional, Protocol

import httpx

from opslearn import config
from opslearn.errors import PersistenceUnavailable, WriteConflict
from opslearn.models import AdminSettings, Booking, Course, Decision, User
from opslearn.seed import default_courses, default_users


class Storage(Protocol):
    def list_users(self) -> List[User]: ...
    def list_courses(self) -> List[Course]: ...
    def add_course(self, course: Course): ...
    def list_bookings(self) -> List[Booking]: ...
    def add_booking(self, booking: Booking): ...
    def delete_booking(self, booking_id: str): ...
    def get_admin_settings(self) -> AdminSettings: ...
    def save_admin_settings(self, settings: AdminSettings): ...


def _dump(obj) -> dict:
    return obj.model_dump(mode="json")


# ------------------------------------------------------------
# HttpStorage
# ------------------------------------------------------------
# Toute erreur réseau ou HTTP devient PersistenceUnavailable.
# Un 409 sur POST /bookings = refus du serveur -> WriteConflict.
# ------------------------------------------------------------
class HttpStorage:
    def __init__(self, base_url: str = config.API_URL, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=config.HTTP_TIMEOUT_S)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            r = self.client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise PersistenceUnavailable(f"{method} {path}", e) from e
        if r.status_code == 409:
            raise WriteConflict(Decision.model_validate(r.json()["detail"]))
        if r.status_code == 404 and method == "DELETE":
            return r  # déjà supprimée
        try:
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceUnavailable(f"{method} {path}", e) from e
        return r

    def list_users(self) -> List[User]:
        return [User.model_validate(u) for u in self._request("GET", "/users").json()]

    def list_courses(self) -> List[Course]:
        return [Course.model_validate(c) for c in self._request("GET", "/courses").json()]

    def add_course(self, course: Course):
        self._request("POST", "/courses", json=_dump(course))

    def list_bookings(self) -> List[Booking]:
        return [Booking.model_validate(b) for b in self._request("GET", "/bookings").json()]

    def add_booking(self, booking: Booking):
        # le serveur re-vérifie la décision avant d'écrire (même id = idempotent)
        self._request(
            "POST",
            "/bookings",
            json={
                "id": booking.id,
                "user_id": booking.user_id,
                "course_id": booking.course_id,
                "start": booking.start_time.isoformat(),
                "duration_minutes": booking.duration_minutes,
            },
        )

    def delete_booking(self, booking_id: str):
        self._request("DELETE", f"/bookings/{booking_id}")

    def get_admin_settings(self) -> AdminSettings:
        return AdminSettings.model_validate(self._request("GET", "/admin/settings").json())

    def save_admin_settings(self, settings: AdminSettings):
        self._request("POST", "/admin/settings", json=_dump(settings))


# ------------------------------------------------------------
# JsonFileStorage
# ------------------------------------------------------------
# Un seul fichier {"users", "courses", "bookings", "admin"}.
# Créé avec les données par défaut s'il n'existe pas.
# ------------------------------------------------------------
class JsonFileStorage:
    def __init__(self, path: str = config.LOCAL_DB_PATH):
        self.path = path

    def _default(self) -> dict:
        return {
            "users": [_dump(u) for u in default_users()],
            "courses": [_dump(c) for c in default_courses()],
            "bookings": [],
            "admin": _dump(AdminSettings()),
        }

    def _read(self) -> dict:
        try:
            if not os.path.exists(self.path):
                db = self._default()
                self._write(db)
                return db
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceUnavailable(f"read {self.path}", e) from e

    def _write(self, db: dict):
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(db, f, indent=2)
        except OSError as e:
            raise PersistenceUnavailable(f"write {self.path}", e) from e

    def replace(self, key: str, items: list):
        db = self._read()
        db[key] = items
        self._write(db)

    def list_users(self) -> List[User]:
        return [User.model_validate(u) for u in self._read().get("users", [])]

    def list_courses(self) -> List[Course]:
        return [Course.model_validate(c) for c in self._read().get("courses", [])]

    def add_course(self, course: Course):
        db = self._read()
        db.setdefault("courses", []).append(_dump(course))
        self._write(db)

    def list_bookings(self) -> List[Booking]:
        return [Booking.model_validate(b) for b in self._read().get("bookings", [])]

    def add_booking(self, booking: Booking):
        db = self._read()
        db.setdefault("bookings", []).append(_dump(booking))
        self._write(db)

    def delete_booking(self, booking_id: str):
        db = self._read()
        db["bookings"] = [b for b in db.get("bookings", []) if b.get("id") != booking_id]
        self._write(db)

    def get_admin_settings(self) -> AdminSettings:
        return AdminSettings.model_validate(self._read().get("admin") or {})

    def save_admin_settings(self, settings: AdminSettings):
        db = self._read()
        db["admin"] = _dump(settings)
        self._write(db)


# ------------------------------------------------------------
# FallbackStorage
# ------------------------------------------------------------
# Lectures : l'API d'abord ; si elle est injoignable, le fichier.
# Une lecture réussie rafraîchit le fichier (dernier écrit gagne,
# pas de fusion). Écritures : le fichier d'abord, puis l'API ; si
# l'API est injoignable, on garde la version locale seulement.
# ------------------------------------------------------------
class FallbackStorage:
    def __init__(self, remote: HttpStorage, local: JsonFileStorage):
        self.remote = remote
        self.local = local

    def _read(self, name: str, key: str):
        try:
            items = getattr(self.remote, name)()
        except PersistenceUnavailable as e:
            print(f"[storage] server unavailable ({name}: {e.cause}), falling back to local storage", flush=True)
            return getattr(self.local, name)()
        self.local.replace(key, [_dump(i) for i in items])
        return items

    def list_users(self) -> List[User]:
        return self._read("list_users", "users")

    def list_courses(self) -> List[Course]:
        return self._read("list_courses", "courses")

    def list_bookings(self) -> List[Booking]:
        return self._read("list_bookings", "bookings")

    def add_course(self, course: Course):
        self.local.add_course(course)
        try:
            self.remote.add_course(course)
        except PersistenceUnavailable:
            print("[storage] server unavailable, course saved locally only", flush=True)

    def add_booking(self, booking: Booking):
        self.local.add_booking(booking)
        try:
            self.remote.add_booking(booking)
        except PersistenceUnavailable:
            print("[storage] server unavailable, booking saved locally only", flush=True)
        except WriteConflict:
            # le serveur a tranché : on retire la copie locale
            self.local.delete_booking(booking.id)
            raise

    def delete_booking(self, booking_id: str):
        self.local.delete_booking(booking_id)
        try:
            self.remote.delete_booking(booking_id)
        except PersistenceUnavailable:
            print("[storage] server unavailable, booking deleted locally only", flush=True)

    def get_admin_settings(self) -> AdminSettings:
        try:
            return self.remote.get_admin_settings()
        except PersistenceUnavailable:
            return self.local.get_admin_settings()

    def save_admin_settings(self, settings: AdminSettings):
        self.local.save_admin_settings(settings)
        try:
            self.remote.save_admin_settings(settings)
        except PersistenceUnavailable:
            print("[storage] server unavailable, settings saved locally only", flush=True)
