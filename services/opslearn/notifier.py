# ============================================================
# notifier.py: Consommateur RabbitMQ des notifications
# ------------------------------------------------------------
# Écoute l'échange "events" et produit une notification (mock
# email sur stdout) pour chaque réservation créée ou annulée.
# Lancé dans un thread démon au démarrage de l'application.
# ============================================================
import json
import time

import pika

from opslearn import config
from opslearn.publisher import EXCHANGE

NOTIFIED_EVENTS = ("BookingCreated", "BookingCancelled")


def format_notification(event_type: str, payload: dict) -> str:
    if event_type == "BookingCreated":
        return (
            f"session booked for {payload.get('userId')}: course {payload.get('courseId')} "
            f"at {payload.get('start')} ({payload.get('durationMinutes')} min)"
        )
    return f"session {payload.get('bookingId')} cancelled"


# Callback exécuté à chaque message reçu depuis RabbitMQ
def on_message(ch, method, properties, body):
    try:
        msg = json.loads(body)
    except ValueError as e:
        print(f"[notification] bad payload: {e}", flush=True)
        return
    t = msg.get("type")
    p = msg.get("payload", {})
    if t in NOTIFIED_EVENTS:
        print(f"[notification] {t} -> mock email: {format_notification(t, p)}", flush=True)


#  Boucle de connexion + consommation RabbitMQ
def start_consumer():
    attempt = 0
    while True:
        try:
            print(f"[notification] connecting to rabbitmq at {config.RABBITMQ_HOST}...", flush=True)
            conn = pika.BlockingConnection(pika.ConnectionParameters(config.RABBITMQ_HOST, heartbeat=60))
            ch = conn.channel()
            ch.exchange_declare(exchange=EXCHANGE, exchange_type="fanout", durable=True)
            # queue anonyme, exclusive à ce consumer
            q = ch.queue_declare(queue="", exclusive=True).method.queue
            ch.queue_bind(exchange=EXCHANGE, queue=q)
            print("[notification] bound to 'events'. waiting...", flush=True)
            attempt = 0
            ch.basic_consume(queue=q, on_message_callback=on_message, auto_ack=True)
            ch.start_consuming()
        except Exception as e:
            attempt += 1
            wait = min(5 * attempt, 30)
            print(f"[notification] connection error: {e}, retrying in {wait}s", flush=True)
            time.sleep(wait)
