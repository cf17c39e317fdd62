# ============================================================
# timeutils.py: Arithmétique de dates et d'intervalles
# ------------------------------------------------------------
# Fonctions pures, sans effet de bord :
#   - créneaux de 30 min de la journée (08:00 → 21:30)
#   - test de chevauchement (intervalles semi-ouverts)
#   - début / fin de semaine (lundi 00:00 local)
#   - ajout de minutes en temps absolu
# Convention : un datetime naïf venant d'un appelant est en heure
# locale (LOCAL_TZ) ; un datetime naïf relu du stockage est en UTC.
# ============================================================
from datetime import date, datetime, time, timedelta, timezone
from typing import List

from opslearn.config import LOCAL_TZ

FIRST_SLOT_HOUR = 8
LAST_SLOT_HOUR = 22  # exclu : dernier créneau à 21:30
SLOT_MINUTES = 30


def to_local(dt: datetime) -> datetime:
    # si pas de tz, on suppose la timezone locale
    if dt.tzinfo is None:
        return dt.replace(tzinfo=LOCAL_TZ)
    return dt.astimezone(LOCAL_TZ)


def to_utc(dt: datetime) -> datetime:
    # si naïf, on suppose UTC (stockage)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def instant(dt: datetime) -> datetime:
    # instant absolu, comparable sans ambiguïté (heure répétée au changement d'heure)
    return to_utc(to_local(dt))


def generate_daily_slots() -> List[time]:
    """Heures de début des 28 créneaux d'une journée, sans date."""
    slots = []
    for h in range(FIRST_SLOT_HOUR, LAST_SLOT_HOUR):
        for m in range(0, 60, SLOT_MINUTES):
            slots.append(time(h, m))
    return slots


def slots_for_day(day: date) -> List[datetime]:
    return [datetime.combine(day, t, tzinfo=LOCAL_TZ) for t in generate_daily_slots()]


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # semi-ouvert : [9:00, 9:30) et [9:30, 10:00) ne se chevauchent pas
    return instant(start_a) < instant(end_b) and instant(start_b) < instant(end_a)


def week_start(d: datetime) -> datetime:
    # lundi 00:00 local ; dimanche -> lundi précédent
    local = to_local(d)
    monday = local - timedelta(days=local.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def week_end(d: datetime) -> datetime:
    # borne exclue : le lundi suivant à 00:00
    return week_start(d) + timedelta(days=7)


def add_minutes(d: datetime, n: int) -> datetime:
    if d.tzinfo is None:
        return d + timedelta(minutes=n)
    # temps absolu : on passe par UTC pour ne pas subir le changement d'heure
    return (d.astimezone(timezone.utc) + timedelta(minutes=n)).astimezone(d.tzinfo)
