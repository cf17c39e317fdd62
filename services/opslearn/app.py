# ============================================================
# app.py: Point d'entrée du service OpsLearn
# ------------------------------------------------------------
# Ce module initialise l'application FastAPI :
#   - Crée les tables et insère les données par défaut
#   - Démarre un thread consommateur RabbitMQ (notifications)
#   - Monte les routes de l'API
# Lancement : uvicorn opslearn.app:app
# ============================================================
import threading

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, SQLModel

from opslearn import config
from opslearn.api import engine, router
from opslearn.errors import PersistenceUnavailable
from opslearn.notifier import start_consumer
from opslearn.seed import seed_database

app = FastAPI(title="OpsLearn Booking Service")


# Exécuté automatiquement par FastAPI au lancement du conteneur.
# 1️. Crée les tables SQL + données par défaut.
# 2️. Lance un thread secondaire pour écouter RabbitMQ sans bloquer l'API.
@app.on_event("startup")
def start():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        seed_database(s)
    if config.EVENTS_ENABLED:
        threading.Thread(target=start_consumer, daemon=True).start()


# Stockage injoignable : l'état est inconnu, on le dit à l'appelant
@app.exception_handler(PersistenceUnavailable)
def persistence_unavailable(request: Request, exc: PersistenceUnavailable):
    print(f"[booking] {exc}", flush=True)
    return JSONResponse(status_code=503, content={"detail": f"storage unavailable during {exc.operation}"})


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(router)
