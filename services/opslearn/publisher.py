# ============================================================
# publisher.py: Émission d'événements RabbitMQ
# ------------------------------------------------------------
# Le cycle de vie des réservations publie ici BookingCreated et
# BookingCancelled. Le consommateur de notifications (notifier.py)
# et tout autre service intéressé les reçoivent.
# ============================================================
import json

import pika

from opslearn import config

EXCHANGE = "events"

# Cette méthode publie un message sur l’échange "events" en mode fanout :
#
#   - event_type : nom de l’événement
#   - payload    : contenu du message
#
# Tous les consommateurs liés à l’échange reçoivent le message.
# Lève pika.exceptions.AMQPError si le broker est injoignable.


def publish_event(event_type: str, payload: dict):
    if not config.EVENTS_ENABLED:
        return
    conn = pika.BlockingConnection(pika.ConnectionParameters(host=config.RABBITMQ_HOST))
    try:
        ch = conn.channel()
        # durable=True pour survivre aux redémarrages RabbitMQ
        ch.exchange_declare(exchange=EXCHANGE, exchange_type="fanout", durable=True)
        message = {"type": event_type, "payload": payload}
        ch.basic_publish(exchange=EXCHANGE, routing_key="", body=json.dumps(message))
        print(f"[event] {event_type} {payload}", flush=True)
    finally:
        conn.close()
