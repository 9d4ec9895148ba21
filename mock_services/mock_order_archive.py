"""
mock_order_archive.py — Mock Order Archive consuming confirmed orders (RabbitMQ)

This module simulates the downstream system that receives confirmed orders
from the checkout service (`RabbitMQOrderSink`) and stores them.

Communication Channels:
    - Input Queue: 'checkout.orders.confirmed' ← Receives confirmed orders

Each order is written to ORDER_ARCHIVE_DIR as '<order_id>.json'.
"""

import json
import logging
import os
import time
from pathlib import Path

import pika

logging.basicConfig(level=logging.INFO)
RABBITMQ_HOST = os.environ.get("RABBITMQ_HOST", "localhost")
ARCHIVE_DIR = Path(os.environ.get("ORDER_ARCHIVE_DIR", "archived_orders"))
ORDER_QUEUE = "checkout.orders.confirmed"


# Connection Utilities
def get_mq_connection():
    """
    Establishes and returns a connection to the RabbitMQ message broker.

    Returns:
        pika.BlockingConnection: Active connection to the RabbitMQ broker.

    Raises:
        pika.exceptions.AMQPConnectionError: If the broker is unavailable.
    """
    credentials = pika.PlainCredentials(
        os.environ.get("RABBITMQ_USER", "guest"),
        os.environ.get("RABBITMQ_PASSWORD", "guest"),
    )
    return pika.BlockingConnection(
        pika.ConnectionParameters(host=RABBITMQ_HOST, credentials=credentials)
    )


def archive_order(order: dict, directory: Path = None) -> Path:
    """Writes one order to the archive directory and returns the file path."""
    directory = directory or ARCHIVE_DIR
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{order['order_id']}.json"
    path.write_text(json.dumps(order, indent=2), encoding="utf-8")
    return path


def on_order_received(ch, method, properties, body):
    """
    Callback function triggered when a new message arrives on the order queue.

    Behavior:
        - Archives the order contained in the message.
        - Acknowledges successful message handling.
        - Rejects malformed messages to Dead Letter Queue (DLQ).
    """
    try:
        data = json.loads(body)
        order = data["order"]
        path = archive_order(order)
        logging.info(f"[ARCHIVE] Order {order['order_id']} archiviert unter {path}.")
        ch.basic_ack(delivery_tag=method.delivery_tag)
    except (ValueError, KeyError, TypeError) as e:
        logging.error(f"[ARCHIVE] Fehler bei Nachrichtenverarbeitung: {e}")
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)  # In DLQ (falls konfiguriert)


def main():
    """
        Starts the mock archive consumer loop.

        Behavior:
            - Establishes a RabbitMQ connection.
            - Waits for incoming orders.
            - Automatically retries connection every 5 seconds if lost.
            - Stops gracefully on keyboard interrupt (Ctrl+C).
    """
    logging.info("Mock Order Archive (MQ) startet...")
    while True:
        try:
            connection = get_mq_connection()
            channel = connection.channel()
            channel.queue_declare(queue=ORDER_QUEUE, durable=True)

            logging.info("[ARCHIVE] Wartet auf bestätigte Bestellungen. (Consumer aktiv)")
            channel.basic_consume(queue=ORDER_QUEUE, on_message_callback=on_order_received)
            channel.start_consuming()
        except pika.exceptions.AMQPConnectionError as e:
            logging.warning(f"MQ-Verbindung fehlgeschlagen, versuche erneut in 5s... {e}")
            time.sleep(5)
        except KeyboardInterrupt:
            break


if __name__ == '__main__':
    main()
