# ============================================================
# models.py: Modèles de données SQLModel (OpsLearn)
# ------------------------------------------------------------
# Tables persistées :
#   1️. User : membre de l'équipe (Engineer | Lead)
#   2️. Course : contenu d'apprentissage (+ quiz optionnel)
#   3️. Booking : session réservée sur le créneau d'un utilisateur
#   4️. AdminSettings : réglages globaux (un seul enregistrement)
# Types non persistés :
#   - Question / Quiz : validation de la forme d'un quiz
#   - CourseCreate : corps de requête pour ajouter un cours
#   - Candidate : demande de réservation pas encore créée
#   - Decision / Reason : verdict de l'autorisation
# ============================================================
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import field_validator
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def new_id() -> str:
    return uuid4().hex


class Role(str, Enum):
    ENGINEER = "Engineer"
    LEAD = "Lead"


class User(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    avatar: str = ""
    role: Role = Role.ENGINEER


# ------------------------------------------------------------
# Course
# ------------------------------------------------------------
# Les tags et le quiz sont stockés en JSON. Le quiz n'est pas
# validé par la table elle-même : l'API passe par Quiz avant
# d'enregistrer.
# ------------------------------------------------------------
class Course(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    title: str
    description: str = ""
    url: str
    duration_minutes: int = Field(gt=0)
    created_by: str
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    ai_summary: Optional[str] = None
    quiz: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))


# ------------------------------------------------------------
# Booking
# ------------------------------------------------------------
# Immuable une fois créée : une modification = suppression +
# création. end_time = start_time + duration_minutes, stockés
# en UTC. course_id peut pointer vers un cours supprimé.
# ------------------------------------------------------------
class Booking(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(index=True)
    course_id: str
    start_time: datetime = Field(index=True)
    end_time: datetime
    duration_minutes: int


class AdminSettings(SQLModel, table=True):
    id: int = Field(default=1, primary_key=True)
    oauth_url: str = ""


class Question(SQLModel):
    id: str
    text: str
    options: List[str]
    correct_answer_index: int = Field(ge=0, le=3)

    @field_validator("options")
    @classmethod
    def four_options(cls, v: List[str]) -> List[str]:
        if len(v) != 4:
            raise ValueError("a question needs exactly 4 options")
        return v


class Quiz(SQLModel):
    questions: List[Question] = Field(default_factory=list)


class CourseCreate(SQLModel):
    id: Optional[str] = None
    title: str
    description: str = ""
    url: str
    duration_minutes: int = Field(gt=0)
    created_by: str
    tags: List[str] = Field(default_factory=list)
    ai_summary: Optional[str] = None
    quiz: Optional[Quiz] = None

    def to_course(self) -> Course:
        data = self.model_dump(exclude={"id", "quiz"})
        return Course(
            id=self.id or new_id(),
            quiz=self.quiz.model_dump() if self.quiz else None,
            **data,
        )


class Candidate(SQLModel):
    # identifiant choisi par le client : rend la création idempotente
    id: Optional[str] = None
    user_id: str
    course_id: str
    start: datetime
    duration_minutes: int = Field(gt=0)


class Reason(str, Enum):
    NONE = "None"
    TEAM_BUSY = "TeamBusy"
    OVERLAP = "Overlap"
    QUOTA_FULL = "QuotaFull"


class Decision(SQLModel):
    valid: bool
    reason: Reason = Reason.NONE
    # réservation en conflit (TeamBusy / Overlap), pour l'affichage
    conflict_id: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(valid=True)

    @classmethod
    def deny(cls, reason: Reason, conflict: Optional[Booking] = None) -> "Decision":
        return cls(valid=False, reason=reason, conflict_id=conflict.id if conflict else None)
