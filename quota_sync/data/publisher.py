"""Kafka event publisher.

Writes one message per quota snapshot. The bus is a plain append sink:
nothing is read back, no schema registry, no compaction.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from .models import Event, QuotaSnapshot


def _log(msg: str) -> None:
    print(msg, flush=True)


class PublishError(Exception):
    """Raised when an event cannot be serialized or written to the bus."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(f"[publisher] {message}")


class EventPublisher:
    """Publishes quota events to a Kafka topic.

    The producer is created on first publish, so runs that fail before
    producing anything never connect to the brokers.
    """

    def __init__(
        self,
        brokers: List[str],
        topic: str,
        *,
        acks: Any = "all",
        retries: int = 3,
        retry_backoff_ms: int = 500,
        send_timeout: float = 30,
        client_id: str = "kubesphere-quota-sync",
        producer_factory: Optional[Callable[..., Any]] = None,
    ):
        if not brokers:
            raise ValueError("At least one Kafka broker address is required")
        if not topic:
            raise ValueError("Kafka topic is required")
        self.brokers = list(brokers)
        self.topic = topic
        self.acks = acks
        self.retries = retries
        self.retry_backoff_ms = retry_backoff_ms
        self.send_timeout = send_timeout
        self.client_id = client_id
        self._producer_factory = producer_factory or KafkaProducer
        self._producer: Optional[Any] = None
        self.sent = 0

    def _get_producer(self) -> Any:
        if self._producer is None:
            try:
                self._producer = self._producer_factory(
                    bootstrap_servers=self.brokers,
                    client_id=self.client_id,
                    acks=self.acks,
                    retries=self.retries,
                    retry_backoff_ms=self.retry_backoff_ms,
                )
            except KafkaError as e:
                raise PublishError(f"Could not connect to brokers {self.brokers}: {e}", e)
        return self._producer

    def publish(self, snapshot: QuotaSnapshot) -> Event:
        """Wrap a snapshot in an event and write it to the topic.

        Blocks until the broker acknowledges the write.

        Returns:
            The published Event

        Raises:
            PublishError: If serialization or the write fails.
        """
        event = Event(data=snapshot)
        try:
            value = event.to_bytes()
        except (TypeError, ValueError) as e:
            raise PublishError(f"Failed to serialize event for {snapshot.pair}: {e}", e)

        producer = self._get_producer()
        try:
            future = producer.send(self.topic, key=event.key, value=value)
            metadata = future.get(timeout=self.send_timeout)
        except KafkaError as e:
            raise PublishError(f"Failed to send event for {snapshot.pair} to '{self.topic}': {e}", e)

        self.sent += 1
        _log(
            f"[publisher] Sent {event.btype.value}/{event.action.value} "
            f"workspace={snapshot.workspace} cluster={snapshot.cluster} "
            f"partition={getattr(metadata, 'partition', '?')} offset={getattr(metadata, 'offset', '?')}"
        )
        return event

    def close(self, timeout: Optional[float] = None) -> None:
        """Flush pending messages and close the producer."""
        if self._producer is None:
            return
        producer, self._producer = self._producer, None
        try:
            producer.flush(timeout=timeout)
        except KafkaError as e:
            raise PublishError(f"Failed to flush producer: {e}", e)
        finally:
            producer.close(timeout=timeout)
