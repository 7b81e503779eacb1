# enums.py – Constants shared by producers and consumers of resolved topics
"""
Flow selectors, event types and message state records.

Usage:
    from topic_resolver.enums import Flow, State, ENUMS

    resolver.get_kafka_config(Flow.PRODUCER, "TRANSFER", "PREPARE")
    State.FAILURE.code  # 999
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Flow(str, Enum):
    """Which side of the topic the config is fetched for"""
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"


class EventType(str, Enum):
    """Event types carried in message metadata"""
    NOTIFICATION = "notification"
    EVENT = "event"


@dataclass(frozen=True)
class StateRecord:
    status: str
    code: int
    description: str

    def to_dict(self) -> dict:
        return {"status": self.status, "code": self.code, "description": self.description}


class State(Enum):
    """State of the message being created"""
    SUCCESS = StateRecord(status="success", code=0, description="action successful")
    FAILURE = StateRecord(status="error", code=999, description="action failed")

    @property
    def status(self) -> str:
        return self.value.status

    @property
    def code(self) -> int:
        return self.value.code

    @property
    def description(self) -> str:
        return self.value.description


# ---- Convenience mapping for imports ----
ENUMS = {
    "PRODUCER": Flow.PRODUCER.value,
    "CONSUMER": Flow.CONSUMER.value,
    "NOTIFICATION": EventType.NOTIFICATION.value,
    "EVENT": EventType.EVENT.value,
    "STATE": {state.name: state.value.to_dict() for state in State},
}
