# ============================================================
# seed.py: Données par défaut
# ------------------------------------------------------------
# Utilisées au premier démarrage du serveur (DB vide) et pour
# initialiser le cache local du client (fichier absent).
# ============================================================
from sqlmodel import Session

from opslearn.models import AdminSettings, Course, Role, User
from opslearn.repository import SqlStorage


def default_users():
    return [
        User(id="u1", name="Alice Chen", role=Role.ENGINEER, avatar="https://picsum.photos/id/64/100/100"),
        User(id="u2", name="Bob Smith", role=Role.ENGINEER, avatar="https://picsum.photos/id/65/100/100"),
        User(id="u3", name="Charlie Kim", role=Role.LEAD, avatar="https://picsum.photos/id/66/100/100"),
        User(id="u4", name="David Lee", role=Role.ENGINEER, avatar="https://picsum.photos/id/67/100/100"),
    ]


def default_courses():
    return [
        Course(
            id="c1",
            title="Kubernetes in 100 Seconds",
            description="A quick, high-level overview of Kubernetes architecture and concepts.",
            url="https://www.youtube.com/watch?v=lxxyY5e_h2o",
            duration_minutes=15,
            created_by="u3",
            tags=["K8s", "DevOps", "Cloud"],
            quiz={
                "questions": [
                    {
                        "id": "q1",
                        "text": "What is the smallest deployable unit in K8s?",
                        "options": ["Node", "Pod", "Container", "Cluster"],
                        "correct_answer_index": 1,
                    },
                    {
                        "id": "q2",
                        "text": "Which component manages the cluster?",
                        "options": ["Worker Node", "Control Plane", "Kubelet", "Proxy"],
                        "correct_answer_index": 1,
                    },
                ]
            },
        ),
        Course(
            id="c2",
            title="React in 100 Seconds",
            description="Understand the core concepts of React: Components, State, and Props.",
            url="https://www.youtube.com/watch?v=Tn6-PIqc4UM",
            duration_minutes=15,
            created_by="u1",
            tags=["Frontend", "React", "JS"],
        ),
        Course(
            id="c3",
            title="Site Reliability Engineering in 100 Seconds",
            description="What is SRE? Key concepts like SLIs, SLOs, and Error Budgets explained.",
            url="https://www.youtube.com/watch?v=BrFE-9K4hHg",
            duration_minutes=15,
            created_by="u2",
            tags=["Ops", "SRE", "Process"],
        ),
        Course(
            id="c4",
            title="WebSockets in 100 Seconds",
            description="Learn how WebSockets enable real-time, bidirectional communication between clients and servers.",
            url="https://www.youtube.com/watch?v=UBUNrFtufWo",
            duration_minutes=15,
            created_by="u3",
            tags=["Web", "Network", "Realtime"],
        ),
    ]


def seed_database(session: Session):
    # ne touche à rien si des utilisateurs existent déjà
    repo = SqlStorage(session)
    if repo.list_users():
        return
    for u in default_users():
        session.add(u)
    for c in default_courses():
        session.add(c)
    session.add(AdminSettings())
    session.commit()
    print("[booking] seeded default users and courses", flush=True)
