"""
kafka_client.py - Kafka Producer Wrapper

PURPOSE:
    Publishes storefront events to Kafka with JSON serialization and
    delivery acknowledgments.

PRODUCER FEATURES:
    - JSON serialization of Pydantic events (or plain dicts)
    - Delivery callbacks for tracking
    - Automatic retries on failure (3 attempts)
    - All replicas acknowledgment (acks=all)

USAGE:
    producer = BaseKafkaProducer("localhost:9092", "storefront-producer")
    producer.publish("order.placed", event)
    producer.flush()
"""

import json
import logging
from typing import Optional, Union

from confluent_kafka import Producer
from confluent_kafka.error import KafkaError

from shared.events import BaseEvent

logger = logging.getLogger(__name__)


class BaseKafkaProducer:
    """Kafka producer with JSON serialization and delivery callbacks."""

    def __init__(self, bootstrap_servers: str, client_id: str = "producer"):
        """
        Initialize Kafka producer.

        Args:
            bootstrap_servers: Comma-separated Kafka broker addresses
            client_id: Unique identifier for this producer instance
        """
        self.config = {
            "bootstrap.servers": bootstrap_servers,
            "client.id": client_id,
            "acks": "all",
            "retries": 3,
        }
        self.producer = Producer(self.config)

    def _delivery_report(self, err: Optional[KafkaError], msg) -> None:
        """Delivery report handler called by producer on message delivery."""
        if err is not None:
            logger.error(f"Message delivery failed: {err}")
        else:
            logger.info(
                f"Message delivered to topic={msg.topic()}, "
                f"partition={msg.partition()}, offset={msg.offset()}"
            )

    def publish(self, topic: str, event: Union[BaseEvent, dict]) -> None:
        """Publish event to Kafka topic."""
        if isinstance(event, dict):
            message = json.dumps(event, default=str)
            event_type = event.get("event_type", "unknown")
            correlation_id = event.get("correlation_id", "unknown")
        else:
            message = event.model_dump_json()
            event_type = event.event_type
            correlation_id = event.correlation_id

        try:
            self.producer.produce(
                topic=topic,
                value=message.encode("utf-8"),
                callback=self._delivery_report,
            )
            self.producer.flush()
        except Exception as e:
            logger.error(f"Error publishing event to {topic}: {e}")
            raise

        logger.info(
            f"Published event to {topic}",
            extra={"event_type": event_type, "correlation_id": correlation_id},
        )

    def flush(self) -> None:
        """Flush any pending messages."""
        self.producer.flush()
