import logging

import pytest

from topic_resolver.resolver import TopicConfigResolver
from topic_resolver.settings import KafkaConfig

KAFKA_TREE = {
    "TOPIC_TEMPLATES": {
        "GENERAL_TOPIC_TEMPLATE": {"TEMPLATE": "topic-{{functionality}}-{{action}}", "REGEX": "topic-(.*)-(.*)"},
        "FULFIL_TOPIC_TEMPLATE": {"TEMPLATE": "topic-transfer-fulfil", "REGEX": "topic-transfer-fulfil"},
        "NOTIFICATION_TOPIC_TEMPLATE": {"TEMPLATE": "topic-notification-event"},
        "GET_TRANSFERS_TOPIC_TEMPLATE": {"TEMPLATE": "topic-transfer-get"},
    },
    "PRODUCER": {
        "TRANSFER": {
            "PREPARE": {
                "config": {
                    "options": {"messageCharset": "utf8"},
                    "rdkafkaConf": {
                        "metadata.broker.list": "kafka:9092",
                        "client.id": "prod-transfer-prepare",
                        "socket.keepalive.enable": True,
                    },
                    "topicConf": {"request.required.acks": "all"},
                }
            }
        }
    },
    "CONSUMER": {
        "NOTIFICATION": {
            "EVENT": {
                "config": {
                    "options": {"mode": 2, "batchSize": 1},
                    "rdkafkaConf": {
                        "client.id": "con-notification-event",
                        "group.id": "group-notification-event",
                        "metadata.broker.list": "kafka:9092",
                    },
                    "topicConf": {"auto.offset.reset": "earliest"},
                }
            }
        }
    },
}


class RecordingLogger:
    """Logger sink that remembers what it was asked to log"""

    def __init__(self):
        self.errors = []

    def error(self, message):
        self.errors.append(message)


@pytest.fixture
def kafka_config() -> KafkaConfig:
    return KafkaConfig.model_validate(KAFKA_TREE)


@pytest.fixture
def sink() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def resolver(kafka_config: KafkaConfig, sink: RecordingLogger) -> TopicConfigResolver:
    return TopicConfigResolver(kafka_config, log=sink)


@pytest.fixture
def default_logger_resolver(kafka_config: KafkaConfig) -> TopicConfigResolver:
    return TopicConfigResolver(kafka_config, log=logging.getLogger("tests.resolver"))
